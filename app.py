"""
Prestação de Contas — Interactive Dashboard

Run with:  streamlit run app.py
"""

import base64
import logging
from datetime import date

import pandas as pd
import plotly.graph_objects as go
import streamlit as st

from accountability_dashboard.config import (
    NEW_ACTION_DEFAULTS,
    SECTOR_COLOR_PALETTE,
    DEFAULT_SECTOR_COLOR,
)
from accountability_dashboard.dashboard import (
    action_ranking,
    get_deadline_status,
    get_evidence_table,
    get_overview_table,
    get_report_sections,
    get_sector_cards,
    get_stats_summary,
    sector_ranking,
)
from accountability_dashboard.errors import DashboardError, ValidationError
from accountability_dashboard.exporters import docx_report, excel_report
from accountability_dashboard.models import (
    Deadlines,
    DeliveryItem,
    Overview,
    SectorConfig,
    SectorView,
    Settings,
    StrategicAction,
    new_id,
)
from accountability_dashboard.registry import get_sector
from accountability_dashboard.simulator import generate_entries
from accountability_dashboard.state import ReportSession, year_label
from accountability_dashboard.text_improver import improve_text

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
)
logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Page config
# ---------------------------------------------------------------------------
st.set_page_config(
    page_title="Prestação de Contas",
    page_icon="📑",
    layout="wide",
    initial_sidebar_state="expanded",
)

STATUS_COLORS = {
    "complete": "#16a34a",
    "pending": "#f59e0b",
    "inactive": "#94a3b8",
}


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------
def get_session() -> ReportSession:
    if "report_session" not in st.session_state:
        st.session_state["report_session"] = ReportSession.open()
    return st.session_state["report_session"]


def flash(kind: str, message: str) -> None:
    """Queue a message to show after the next rerun."""
    st.session_state.setdefault("flash", []).append((kind, message))


def show_flash() -> None:
    for kind, message in st.session_state.pop("flash", []):
        getattr(st, kind)(message)


session = get_session()

# ---------------------------------------------------------------------------
# Sidebar
# ---------------------------------------------------------------------------
st.sidebar.title(session.config.sub_department_name)
st.sidebar.markdown(session.config.department_name)
st.sidebar.divider()

years = sorted(session.selectable_years, reverse=True)
selected_year = st.sidebar.selectbox(
    "Ano de Referência",
    years,
    index=years.index(session.year),
    format_func=lambda y: year_label(y, session.current_year),
)
if selected_year != session.year:
    session.switch_year(selected_year)

nav_options = {"Visão Geral": Overview()}
for sector in session.active_sectors():
    nav_options[sector.short_name] = SectorView(sector.id)
nav_options["Configurações"] = Settings()

page = st.sidebar.radio("Navegar", list(nav_options))
session.navigate(nav_options[page])

st.sidebar.divider()
if session.read_only:
    st.sidebar.warning(f"{session.year}: somente leitura")
elif session.scope.provisional:
    st.sidebar.info(f"{session.year}: planejamento (dados provisórios)")
st.sidebar.caption(session.config.institution_name)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def sector_hex(color: str) -> str:
    return SECTOR_COLOR_PALETTE.get(color, SECTOR_COLOR_PALETTE[DEFAULT_SECTOR_COLOR])["hex"]


def deadline_banner() -> None:
    status = get_deadline_status(session.config.deadlines)
    if status is None:
        return

    parts = []
    for label, key, days_key in (
        ("Envio dos setores", "sector_deadline", "sector_days"),
        ("Consolidação final", "final_deadline", "final_days"),
    ):
        days = status[days_key]
        if days is None:
            continue
        if days < 0:
            parts.append(f"**{label}**: prazo encerrado em {status[key]}")
        else:
            parts.append(f"**{label}**: {status[key]} ({days} dias restantes)")

    if parts:
        st.info(" &nbsp;|&nbsp; ".join(parts))


def stats_cards(target) -> dict:
    stats = get_stats_summary(session.entries, session.sectors, session.active_actions(), target)
    cov = stats["coverage"]

    col1, col2, col3 = st.columns(3)
    with col1:
        st.metric("Entregas Registradas", stats["total_deliveries"])
        st.caption(f"{stats['active_entries']} ações com atividade declarada")
    with col2:
        st.metric("Cobertura", f"{cov['percentage']}%")
        st.progress(cov["percentage"] / 100)
        st.caption(f"{cov['achieved']} de {cov['possible']} ações preenchidas")
    with col3:
        fig = go.Figure(go.Bar(
            x=stats["month_labels"],
            y=stats["months"],
            marker_color="#2563eb",
        ))
        fig.update_layout(
            title="Ritmo Mensal",
            height=180,
            yaxis=dict(range=[0, stats["max_monthly"]], visible=False),
            plot_bgcolor="rgba(0,0,0,0)",
            margin=dict(l=10, r=10, t=30, b=10),
        )
        st.plotly_chart(fig, use_container_width=True)
    return stats


def load_demo_data() -> None:
    entries = generate_entries(session.sectors, session.active_actions(), session.year)
    for entry in entries:
        session.save_entry(entry)
    flash("success", f"{len(entries)} registros de demonstração carregados para {session.year}.")


# ---------------------------------------------------------------------------
# Delivery form callbacks
# ---------------------------------------------------------------------------
def form_prefix(action_id: str, sector_id: str) -> str:
    nonce = st.session_state.setdefault("form_nonce", {}).get((action_id, sector_id), 0)
    return f"dlv_{sector_id}_{action_id}_{nonce}"


def reset_form(action_id: str, sector_id: str) -> str:
    nonces = st.session_state.setdefault("form_nonce", {})
    nonces[(action_id, sector_id)] = nonces.get((action_id, sector_id), 0) + 1
    st.session_state.get("editing", {}).pop((action_id, sector_id), None)
    return form_prefix(action_id, sector_id)


def start_edit(action_id: str, sector_id: str, delivery: DeliveryItem) -> None:
    prefix = reset_form(action_id, sector_id)
    st.session_state.setdefault("editing", {})[(action_id, sector_id)] = delivery
    st.session_state[f"{prefix}_title"] = delivery.title
    st.session_state[f"{prefix}_date"] = delivery.date
    st.session_state[f"{prefix}_description"] = delivery.description
    st.session_state[f"{prefix}_results"] = delivery.results


def improve_field(key: str, mode: str) -> None:
    with st.spinner("Melhorando texto..."):
        improved = improve_text(st.session_state.get(key, ""), mode)
    if improved is None:
        flash("warning", "Não foi possível melhorar o texto. O conteúdo original foi mantido.")
    else:
        st.session_state[key] = improved


def submit_delivery(action_id: str, sector_id: str) -> None:
    prefix = form_prefix(action_id, sector_id)
    editing = st.session_state.get("editing", {}).get((action_id, sector_id))

    delivery = DeliveryItem(
        id=editing.id if editing else new_id(),
        title=st.session_state.get(f"{prefix}_title", "").strip(),
        date=st.session_state.get(f"{prefix}_date", "").strip(),
        description=st.session_state.get(f"{prefix}_description", ""),
        results=st.session_state.get(f"{prefix}_results", ""),
        attachments=list(editing.attachments) if editing else [],
    )
    uploads = [
        (upload.name, upload.getvalue(), upload.type or "")
        for upload in st.session_state.get(f"{prefix}_files") or []
    ]
    try:
        session.save_delivery(action_id, sector_id, delivery, uploads=uploads)
    except DashboardError as exc:
        flash("error", str(exc))
        return
    except OSError:
        logger.exception("Could not save delivery for action %s, sector %s", action_id, sector_id)
        flash("error", "Não foi possível gravar a entrega. Tente novamente.")
        return

    reset_form(action_id, sector_id)
    flash("success", "Entrega salva.")


def remove_delivery(action_id: str, sector_id: str, delivery_id: str) -> None:
    confirmed = st.session_state.get(f"confirm_{sector_id}_{action_id}_{delivery_id}", False)
    try:
        session.delete_delivery(action_id, sector_id, delivery_id, confirmed=confirmed)
    except DashboardError as exc:
        flash("error", str(exc))
        return
    flash("success", "Entrega excluída.")


def delivery_form(action_id: str, sector_id: str) -> None:
    prefix = form_prefix(action_id, sector_id)
    editing = st.session_state.get("editing", {}).get((action_id, sector_id))
    st.markdown("**Editar entrega**" if editing else "**Nova entrega**")

    col1, col2 = st.columns([3, 1])
    with col1:
        st.text_input("Título *", key=f"{prefix}_title")
    with col2:
        st.text_input("Período/Data *", key=f"{prefix}_date", placeholder="Ex.: Março/2025")

    st.text_area("Ações realizadas", key=f"{prefix}_description")
    st.button(
        "Melhorar redação (ações)",
        key=f"{prefix}_improve_description",
        on_click=improve_field,
        args=(f"{prefix}_description", "actions"),
    )
    st.text_area("Resultados alcançados", key=f"{prefix}_results")
    st.button(
        "Melhorar redação (resultados)",
        key=f"{prefix}_improve_results",
        on_click=improve_field,
        args=(f"{prefix}_results", "results"),
    )
    st.file_uploader("Evidências", accept_multiple_files=True, key=f"{prefix}_files")

    col1, col2 = st.columns(2)
    with col1:
        st.button(
            "Salvar entrega",
            key=f"{prefix}_save",
            type="primary",
            on_click=submit_delivery,
            args=(action_id, sector_id),
        )
    with col2:
        if editing:
            st.button(
                "Cancelar edição",
                key=f"{prefix}_cancel",
                on_click=reset_form,
                args=(action_id, sector_id),
            )


# ===========================================================================
# PAGE: Overview
# ===========================================================================
def render_overview() -> None:
    st.title(f"Prestação de Contas {session.year}")
    st.caption(f"{session.config.institution_name} · {session.config.department_name}")
    deadline_banner()
    show_flash()

    actions = session.active_actions()
    entries = session.entries

    if not entries and not session.read_only:
        st.info("Nenhum registro para este ano.")
        st.button("Carregar dados de demonstração", on_click=load_demo_data)

    stats_cards(Overview())
    st.divider()

    st.subheader("Progresso por Setor")
    overview = get_overview_table(entries, session.sectors, actions)
    st.dataframe(
        overview.drop(columns=["sector_id"]).rename(columns={
            "short_name": "Setor",
            "name": "Nome",
            "completed": "Concluídas",
            "total": "Total",
            "percentage": "Progresso (%)",
            "deliveries": "Entregas",
        }),
        use_container_width=True,
        hide_index=True,
    )

    col1, col2 = st.columns(2)
    with col1:
        st.subheader("Ranking de Setores")
        ranking = sector_ranking(entries, session.sectors)
        fig = go.Figure(go.Bar(
            x=ranking["deliveries"],
            y=ranking["short_name"],
            orientation="h",
            marker_color=[sector_hex(c) for c in ranking["color"]],
            text=ranking["deliveries"],
            textposition="outside",
        ))
        fig.update_layout(
            height=350,
            xaxis_title="Entregas",
            yaxis=dict(autorange="reversed"),
            plot_bgcolor="rgba(0,0,0,0)",
            margin=dict(l=10, r=10, t=10, b=40),
        )
        st.plotly_chart(fig, use_container_width=True)

    with col2:
        st.subheader("Ranking de Ações Estratégicas")
        st.dataframe(
            action_ranking(entries, actions).rename(columns={
                "rank": "Posição",
                "action_id": "Ação",
                "title": "Título",
                "deliveries": "Entregas",
            }),
            use_container_width=True,
            hide_index=True,
        )

    st.divider()
    st.subheader("Exportar")
    col1, col2 = st.columns(2)
    with col1:
        doc = docx_report.build_consolidated_report(
            entries, session.sectors, actions, session.config, session.year
        )
        st.download_button(
            "Relatório consolidado (.docx)",
            data=docx_report.to_bytes(doc),
            file_name=f"relatorio_consolidado_{session.year}.docx",
            mime="application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        )
    with col2:
        wb = excel_report.build_summary_workbook(
            entries, session.sectors, actions, session.config, session.year
        )
        st.download_button(
            "Resumo (.xlsx)",
            data=excel_report.to_bytes(wb),
            file_name=f"resumo_{session.year}.xlsx",
            mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        )


# ===========================================================================
# PAGE: Sector
# ===========================================================================
def render_sector(sector_id: str) -> None:
    sector = get_sector(session.sectors, sector_id)
    st.title(f"{sector.short_name} — {sector.name}")
    if sector.sub_departments:
        st.caption(" · ".join(sector.sub_departments))
    deadline_banner()
    show_flash()

    actions = session.active_actions()
    stats_cards(SectorView(sector_id))
    st.divider()

    tab_manage, tab_report = st.tabs(["Ações Estratégicas", "Relatório"])

    with tab_manage:
        for card in get_sector_cards(session.entries, sector_id, actions):
            action = card["action"]
            if not card["has_activities"]:
                status, color = "Sem atividades no ano", STATUS_COLORS["inactive"]
            elif card["is_complete"]:
                status, color = f"{card['delivery_count']} entrega(s)", STATUS_COLORS["complete"]
            else:
                status, color = "Pendente", STATUS_COLORS["pending"]

            with st.expander(f"Ação {action.id} · {action.title}  ({status})"):
                st.markdown(
                    f"<div style='border-left: 4px solid {color}; padding: 4px 10px; color: #555;'>"
                    f"{action.description}</div>",
                    unsafe_allow_html=True,
                )

                active = st.toggle(
                    "Houve atividades nesta ação",
                    value=card["has_activities"],
                    key=f"active_{session.year}_{sector_id}_{action.id}",
                    disabled=session.read_only,
                )
                if active != card["has_activities"]:
                    session.set_activity(action.id, sector_id, active)
                    st.rerun()

                if not card["has_activities"]:
                    continue

                entry = card["entry"]
                for idx, delivery in enumerate(entry.deliveries if entry else [], start=1):
                    st.markdown(f"**{action.id}.{idx} {delivery.title}** · _{delivery.date}_")
                    if delivery.description:
                        st.write(delivery.description)
                    if delivery.results:
                        st.caption(f"Resultados: {delivery.results}")
                    for attachment in delivery.attachments:
                        st.caption(f"📎 {attachment.name} ({attachment.size / 1024:,.0f} KB)")

                    if not session.read_only:
                        col1, col2, col3 = st.columns([1, 2, 1])
                        with col1:
                            st.button(
                                "Editar",
                                key=f"edit_{sector_id}_{action.id}_{delivery.id}",
                                on_click=start_edit,
                                args=(action.id, sector_id, delivery),
                            )
                        with col2:
                            st.checkbox(
                                "Confirmar exclusão",
                                key=f"confirm_{sector_id}_{action.id}_{delivery.id}",
                            )
                        with col3:
                            st.button(
                                "Excluir",
                                key=f"delete_{sector_id}_{action.id}_{delivery.id}",
                                on_click=remove_delivery,
                                args=(action.id, sector_id, delivery.id),
                            )
                    st.divider()

                if not session.read_only:
                    delivery_form(action.id, sector_id)

    with tab_report:
        sections = get_report_sections(session.entries, sector_id, actions)
        if not sections:
            st.info(f"Nenhuma atividade registrada e ativa para este setor em {session.year}.")
        for section in sections:
            action = section["action"]
            st.markdown(f"### {action.id}. {action.title}")
            for item in section["deliveries"]:
                delivery = item["item"]
                st.markdown(f"**{item['number']} {delivery.title}** ({delivery.date})")
                if delivery.description:
                    st.write(delivery.description)
                if delivery.results:
                    st.write(f"_Resultados:_ {delivery.results}")

        evidence = get_evidence_table(session.entries, sector_id, actions)
        if not evidence.empty:
            st.markdown("#### Anexo I — Evidências")
            st.dataframe(
                evidence.drop(columns=["sector_id"]).rename(columns={
                    "action_id": "Ação",
                    "delivery_title": "Entrega",
                    "file_name": "Arquivo",
                }),
                use_container_width=True,
                hide_index=True,
            )

        doc = docx_report.build_sector_report(
            session.entries, sector, actions, session.config, session.year
        )
        st.download_button(
            "Baixar relatório (.docx)",
            data=docx_report.to_bytes(doc),
            file_name=f"relatorio_{sector.id}_{session.year}.docx",
            mime="application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        )


# ===========================================================================
# PAGE: Settings
# ===========================================================================
def render_identity_tab() -> None:
    config = session.config
    with st.form("identity"):
        institution = st.text_input("Instituição", value=config.institution_name)
        department = st.text_input("Secretaria / Órgão", value=config.department_name)
        sub_department = st.text_input("Superintendência", value=config.sub_department_name)
        logo_file = st.file_uploader("Logotipo", type=["png", "jpg", "jpeg"])
        submitted = st.form_submit_button("Salvar identidade")

    if submitted:
        logo = None
        if logo_file is not None:
            encoded = base64.b64encode(logo_file.getvalue()).decode("ascii")
            logo = f"data:{logo_file.type};base64,{encoded}"
        try:
            session.update_identity(institution, department, sub_department, logo)
        except ValidationError as exc:
            st.error(str(exc))
        else:
            st.success("Identidade salva.")


def _parse_date(value: str):
    try:
        return date.fromisoformat(value) if value else None
    except ValueError:
        return None


def render_deadlines_tab() -> None:
    deadlines = session.config.deadlines
    with st.form("deadlines"):
        sector_deadline = st.date_input(
            "Prazo para envio dos setores", value=_parse_date(deadlines.sector_deadline)
        )
        final_deadline = st.date_input(
            "Prazo de consolidação final", value=_parse_date(deadlines.final_deadline)
        )
        show_banner = st.checkbox("Exibir aviso de prazos", value=deadlines.show_banner)
        submitted = st.form_submit_button("Salvar prazos")

    if submitted:
        session.update_deadlines(Deadlines(
            sector_deadline=sector_deadline.isoformat() if sector_deadline else "",
            final_deadline=final_deadline.isoformat() if final_deadline else "",
            show_banner=show_banner,
        ))
        st.success("Prazos salvos.")


def sector_form(key: str, sector: SectorConfig = None) -> None:
    palette = list(SECTOR_COLOR_PALETTE)
    with st.form(key):
        sector_id = st.text_input(
            "ID *", value=sector.id if sector else "", disabled=sector is not None
        )
        name = st.text_input("Nome *", value=sector.name if sector else "")
        short_name = st.text_input("Sigla *", value=sector.short_name if sector else "")
        color = st.selectbox(
            "Cor",
            palette,
            index=palette.index(sector.color) if sector and sector.color in palette else 0,
            format_func=lambda token: SECTOR_COLOR_PALETTE[token]["label"],
        )
        sub_departments = st.text_area(
            "Subdivisões (uma por linha)",
            value="\n".join(sector.sub_departments) if sector else "",
        )
        submitted = st.form_submit_button("Salvar setor")

    if submitted:
        candidate = SectorConfig(
            id=sector.id if sector else sector_id,
            name=name.strip(),
            short_name=short_name.strip(),
            color=color,
            sub_departments=[s.strip() for s in sub_departments.splitlines() if s.strip()],
            is_active=sector.is_active if sector else True,
        )
        try:
            session.save_sector(candidate, editing_id=sector.id if sector else None)
        except DashboardError as exc:
            st.error(str(exc))
        else:
            st.rerun()


def render_sectors_tab() -> None:
    st.caption("A ordem abaixo define a ordem de exibição em todo o painel.")
    last = len(session.sectors) - 1
    for idx, sector in enumerate(session.sectors):
        col1, col2, col3, col4 = st.columns([6, 1, 1, 2])
        with col1:
            status = "" if sector.is_active else " (desativado)"
            st.markdown(
                f"<span style='color: {sector_hex(sector.color)}; font-weight: 700;'>■</span> "
                f"**{sector.short_name}** · {sector.name}{status}",
                unsafe_allow_html=True,
            )
        with col2:
            if st.button("↑", key=f"up_{sector.id}", disabled=idx == 0):
                session.move_sector_up(idx)
                st.rerun()
        with col3:
            if st.button("↓", key=f"down_{sector.id}", disabled=idx == last):
                session.move_sector_down(idx)
                st.rerun()
        with col4:
            if st.button("Desativar" if sector.is_active else "Ativar", key=f"toggle_{sector.id}"):
                session.toggle_sector(sector.id)
                st.rerun()
        with st.expander(f"Editar {sector.short_name}"):
            sector_form(f"sector_{sector.id}", sector)

    st.divider()
    st.markdown("**Novo setor**")
    sector_form("sector_new")


def action_form(key: str, action: StrategicAction = None) -> None:
    defaults = NEW_ACTION_DEFAULTS
    with st.form(key):
        action_id = st.text_input(
            "ID *",
            value=action.id if action else session.next_action_id(),
            disabled=action is not None,
        )
        title = st.text_input("Ação *", value=action.title if action else "")
        description = st.text_area("Descrição *", value=action.description if action else "")
        col1, col2 = st.columns(2)
        with col1:
            start_year = st.number_input(
                "Ano de início",
                value=action.start_year if action else defaults["startYear"],
                step=1,
            )
        with col2:
            end_year = st.number_input(
                "Ano de fim",
                value=action.end_year if action else defaults["endYear"],
                step=1,
            )
        responsible = st.text_input(
            "Responsável", value=action.responsible if action else defaults["responsible"]
        )
        submitted = st.form_submit_button("Salvar ação")

    if submitted:
        candidate = StrategicAction(
            id=action.id if action else action_id,
            title=title.strip(),
            description=description.strip(),
            start_year=int(start_year),
            end_year=int(end_year),
            responsible=responsible.strip(),
            is_active=action.is_active if action else defaults["isActive"],
        )
        try:
            session.save_action(candidate, editing_id=action.id if action else None)
        except DashboardError as exc:
            st.error(str(exc))
        else:
            st.rerun()


def render_actions_tab() -> None:
    rows = pd.DataFrame([
        {
            "ID": a.id,
            "Ação": a.title,
            "Vigência": f"{a.start_year}–{a.end_year}",
            "Responsável": a.responsible,
            "Situação": "Ativa" if a.is_active else "Desativada",
        }
        for a in session.actions
    ])
    st.dataframe(rows, use_container_width=True, hide_index=True)

    for action in session.actions:
        with st.expander(f"Ação {action.id} · {action.title}"):
            if st.button(
                "Desativar" if action.is_active else "Ativar", key=f"toggle_action_{action.id}"
            ):
                session.toggle_action(action.id)
                st.rerun()
            action_form(f"action_{action.id}", action)

    st.divider()
    st.markdown("**Nova ação estratégica**")
    action_form("action_new")


def render_settings() -> None:
    st.title("Configurações")
    show_flash()
    tabs = st.tabs(["Identidade", "Prazos", "Setores", "Ações Estratégicas"])
    with tabs[0]:
        render_identity_tab()
    with tabs[1]:
        render_deadlines_tab()
    with tabs[2]:
        render_sectors_tab()
    with tabs[3]:
        render_actions_tab()


# ---------------------------------------------------------------------------
# Router
# ---------------------------------------------------------------------------
target = session.navigation
if isinstance(target, SectorView):
    render_sector(target.sector_id)
elif isinstance(target, Settings):
    render_settings()
else:
    render_overview()
