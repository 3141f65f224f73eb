"""
Configuration: storage paths, fiscal years, registry defaults, constants.

DEFAULT_SECTORS and DEFAULT_STRATEGIC_ACTIONS seed the registries the first
time the application runs against an empty data directory. After that the
persisted copies are authoritative.
"""

import os
from pathlib import Path

# ---------------------------------------------------------------------------
# File paths: adjust with ACCOUNTABILITY_DATA_DIR if the data moves
# ---------------------------------------------------------------------------
DATA_DIR = Path(
    os.getenv(
        "ACCOUNTABILITY_DATA_DIR",
        Path(__file__).resolve().parent.parent / "data",
    )
)
ATTACHMENTS_DIRNAME = "attachments"

# ---------------------------------------------------------------------------
# Storage keys (one JSON document each)
# ---------------------------------------------------------------------------
REPORT_KEY_TEMPLATE = "report_{year}"
APP_CONFIG_KEY = "app_config"
SECTORS_KEY = "sectors"
STRATEGIC_ACTIONS_KEY = "strategic_actions"

# ---------------------------------------------------------------------------
# Fiscal years
# ---------------------------------------------------------------------------
CURRENT_YEAR = int(os.getenv("ACCOUNTABILITY_CURRENT_YEAR", "2025"))

# Enumerated, not computed: prior, current and next year
SELECTABLE_YEARS: tuple[int, ...] = (CURRENT_YEAR + 1, CURRENT_YEAR, CURRENT_YEAR - 1)

YEAR_LABELS: dict[str, str] = {
    "historical": "Histórico",
    "current": "Em Execução",
    "planning": "Planejamento",
}

# ---------------------------------------------------------------------------
# Sector colour palette (token -> display label, hex for charts)
# ---------------------------------------------------------------------------
SECTOR_COLOR_PALETTE: dict[str, dict[str, str]] = {
    "bg-blue-900": {"label": "Azul Escuro", "hex": "#1e3a8a"},
    "bg-blue-700": {"label": "Azul Médio", "hex": "#1d4ed8"},
    "bg-blue-600": {"label": "Azul Padrão", "hex": "#2563eb"},
    "bg-yellow-600": {"label": "Amarelo/Dourado", "hex": "#ca8a04"},
    "bg-green-600": {"label": "Verde", "hex": "#16a34a"},
    "bg-indigo-600": {"label": "Roxo", "hex": "#4f46e5"},
}
DEFAULT_SECTOR_COLOR = "bg-blue-600"

# ---------------------------------------------------------------------------
# Institutional identity
# ---------------------------------------------------------------------------
DEFAULT_APP_CONFIG: dict = {
    "institutionName": "Governo do Estado do Tocantins",
    "departmentName": "Secretaria da Fazenda",
    "subDepartmentName": "Superintendência de Tecnologia e Inovação Fazendária",
    "logoUrl": None,
    "deadlines": {
        "sectorDeadline": "",
        "finalDeadline": "",
        "showBanner": False,
    },
}

# ---------------------------------------------------------------------------
# Registry defaults
# ---------------------------------------------------------------------------
DEFAULT_SECTORS: list[dict] = [
    {
        "id": "STIF",
        "name": "Superintendência de Tecnologia e Inovação Fazendária",
        "shortName": "GAB/STIF",
        "color": "bg-blue-900",
        "subDepartments": ["Gabinete"],
        "isActive": True,
    },
    {
        "id": "DGGT",
        "name": "Diretoria Geral de Gestão Tecnológica",
        "shortName": "DGGT",
        "color": "bg-blue-700",
        "subDepartments": [
            "Gerência de Segurança Digital",
            "Gerência de Suporte e Operações",
        ],
        "isActive": True,
    },
    {
        "id": "DISCO",
        "name": "Diretoria de Sistemas Corporativos",
        "shortName": "DISCO",
        "color": "bg-blue-600",
        "subDepartments": [
            "Gerência de Sistemas Tributários",
            "Gerência de Sistemas Financeiros",
            "Gerência de Testes e Homologação",
        ],
        "isActive": True,
    },
    {
        "id": "DINFRA",
        "name": "Diretoria de Infraestrutura",
        "shortName": "DINFRA",
        "color": "bg-blue-600",
        "subDepartments": [
            "Gerência de Banco de Dados",
            "Gerência de Redes e Comunicação",
            "Gerência de Servidores e Data Center",
        ],
        "isActive": True,
    },
    {
        "id": "DINOV",
        "name": "Diretoria de Inovação",
        "shortName": "DINOV",
        "color": "bg-yellow-600",
        "subDepartments": ["Assessoria de Integração e Pesquisa"],
        "isActive": True,
    },
]

DEFAULT_STRATEGIC_ACTIONS: list[dict] = [
    {
        "id": "1",
        "action": "Modernizar os sistemas e automações (WS)",
        "description": (
            "Implementar um plano de ação para convergir as plataformas atuais "
            "para a plataforma adotada."
        ),
        "startYear": 2023,
        "endYear": 2027,
        "responsible": "SID/STIF",
        "isActive": True,
    },
    {
        "id": "2",
        "action": "Aquisição de Parque Tecnológico",
        "description": (
            "Reformulação de processos, recursos humanos, infraestrutura e "
            "serviços de TIC."
        ),
        "startYear": 2023,
        "endYear": 2027,
        "responsible": "SID/STIF",
        "isActive": True,
    },
    {
        "id": "3",
        "action": "Elaborar e implementar um plano de sustentabilidade de TIC da SEFAZ",
        "description": (
            "Assegurar a operação ininterrupta dos sistemas com alta "
            "disponibilidade, ampliando os serviços à população."
        ),
        "startYear": 2023,
        "endYear": 2027,
        "responsible": "SID/STIF",
        "isActive": True,
    },
    {
        "id": "4",
        "action": "Definir padrões e normatização dos sistemas de informações",
        "description": "Implementar padrões e normativos com base nos diagnósticos.",
        "startYear": 2023,
        "endYear": 2027,
        "responsible": "SID/STIF",
        "isActive": True,
    },
    {
        "id": "5",
        "action": "Elaborar e implementar o plano diretor da TI da SEFAZ",
        "description": (
            "Implementar um plano de ações voltadas para as áreas de pessoal, "
            "infraestrutura, processos, normas e gestão de recursos na TIC."
        ),
        "startYear": 2023,
        "endYear": 2027,
        "responsible": "SID/STIF",
        "isActive": True,
    },
    {
        "id": "6",
        "action": "Melhoria dos redesenhos e automatização os processos da SEFAZ",
        "description": (
            "Atualizar e melhorar o redesenho de processos existentes e "
            "automatizando para homologação e produção."
        ),
        "startYear": 2023,
        "endYear": 2027,
        "responsible": "SID/STIF",
        "isActive": True,
    },
]

# Defaults offered when a new action is created in the settings screen
NEW_ACTION_DEFAULTS: dict = {
    "startYear": CURRENT_YEAR,
    "endYear": CURRENT_YEAR + 3,
    "responsible": "SID/STIF",
    "isActive": True,
}

# ---------------------------------------------------------------------------
# Month classification (free-text delivery dates)
# ---------------------------------------------------------------------------
# Index in this tuple == calendar month index (0 = January)
MONTH_TOKENS: tuple[str, ...] = (
    "jan", "fev", "mar", "abr", "mai", "jun",
    "jul", "ago", "set", "out", "nov", "dez",
)
MONTH_LABELS: tuple[str, ...] = (
    "Jan", "Fev", "Mar", "Abr", "Mai", "Jun",
    "Jul", "Ago", "Set", "Out", "Nov", "Dez",
)

# ---------------------------------------------------------------------------
# Text improvement service
# ---------------------------------------------------------------------------
GEMINI_API_KEY = os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY")
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
GEMINI_ENDPOINT = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"
GEMINI_TEMPERATURE = 0.3
IMPROVE_MIN_LENGTH = 5
