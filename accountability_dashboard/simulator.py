"""
Simulated report data for demonstrations and the pipeline smoke run.

Generates plausible report entries for every (action, sector) pair of a
year. All values are synthetic; no real accountability data is used.
"""

from typing import Optional, Sequence

import numpy as np

from .config import MONTH_LABELS
from .models import AttachedFile, DeliveryItem, ReportEntry, SectorConfig, StrategicAction, new_id

# ---------------------------------------------------------------------------
# Typical reporting shape
# ---------------------------------------------------------------------------
# Share of pairs explicitly declared without activity, share left untouched,
# mean deliveries for the rest
_INACTIVE_SHARE = 0.15
_MISSING_SHARE = 0.20
_MEAN_DELIVERIES = 1.8

_DELIVERY_TITLES = [
    "Implantação do novo ambiente de homologação",
    "Migração de serviços para a nuvem",
    "Publicação de norma interna de desenvolvimento",
    "Capacitação das equipes técnicas",
    "Aquisição de equipamentos de rede",
    "Automação do processo de arrecadação",
    "Renovação de contratos de suporte",
    "Mapeamento de processos da área fim",
]

_RESULTS = [
    "Redução do tempo médio de atendimento.",
    "Maior disponibilidade dos sistemas corporativos.",
    "Padronização das entregas entre as equipes.",
    "Economia nos custos de manutenção.",
]


def _date_label(rng: np.random.Generator, year: int) -> str:
    """Free-text date in one of the shapes users actually type."""
    month = int(rng.integers(0, 12))
    style = int(rng.integers(0, 3))
    if style == 0:
        return f"{MONTH_LABELS[month]}/{year}"
    if style == 1:
        return f"{int(rng.integers(1, 28)):02d}/{month + 1:02d}/{year}"
    return f"{year}"


def generate_entries(
    sectors: Sequence[SectorConfig],
    actions: Sequence[StrategicAction],
    year: int,
    seed: Optional[int] = 42,
) -> list[ReportEntry]:
    """Generate simulated report entries for one fiscal year."""
    rng = np.random.default_rng(seed)
    entries = []
    stamp = int(np.datetime64(f"{year}-06-30", "ms").astype(np.int64))

    for sector in sectors:
        for action in actions:
            draw = rng.random()
            if draw < _MISSING_SHARE:
                continue
            if draw < _MISSING_SHARE + _INACTIVE_SHARE:
                entries.append(ReportEntry(
                    action_id=action.id,
                    sector_id=sector.id,
                    deliveries=[],
                    has_activities=False,
                    last_updated=stamp,
                ))
                continue

            n_deliveries = int(rng.poisson(_MEAN_DELIVERIES))
            deliveries = []
            for _ in range(n_deliveries):
                attachments = [
                    AttachedFile(
                        id=new_id(),
                        name=f"evidencia_{sector.id.lower()}_{action.id}_{i + 1}.pdf",
                        size=int(rng.integers(20_000, 2_000_000)),
                        mime_type="application/pdf",
                    )
                    for i in range(int(rng.integers(0, 3)))
                ]
                deliveries.append(DeliveryItem(
                    id=new_id(),
                    title=str(rng.choice(_DELIVERY_TITLES)),
                    date=_date_label(rng, year),
                    description=f"Entrega vinculada à ação {action.id} no setor {sector.short_name}.",
                    results=str(rng.choice(_RESULTS)),
                    attachments=attachments,
                ))

            entries.append(ReportEntry(
                action_id=action.id,
                sector_id=sector.id,
                deliveries=deliveries,
                has_activities=True,
                last_updated=stamp,
            ))

    return entries
