"""
Auction Deal Simulator - Streamlit Dashboard
=============================================

Workflow:
  1. Pick a saved property (or start a new one) in the sidebar
  2. Edit the deal form and press "Recalcular": one explicit recompute per committed edit
  3. Read the timeline, the bid-sensitivity table, market research and the report

Run: streamlit run app/streamlit_app.py   (or the `auction-sim` console script)
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

import pandas as pd
import plotly.graph_objects as go
import streamlit as st

# ---------------------------------------------------------------------------
# Make project root importable
# ---------------------------------------------------------------------------
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from core.config import DEFAULT_SIMULATION_CONFIG
from core.schema import AuctionType, DealParameters, IncomeTaxMode, PaymentMethod

from data_prep.normalize import normalize_deal_input
from data_prep.validators import validate_deal

from engine.projection import SimulationResult, run_simulation

from analysis.decisions import RoiBand, classify_roi, generate_deal_report
from analysis.export import export_report_xlsx
from analysis.formatting import format_currency, format_percent
from analysis.market import summarize_comparables
from analysis.tables import bid_table_to_dataframe, breakdown_table

from storage.records import PropertyRecord
from storage.repository import DealRepository, StorageError, create_repository
from storage.settings import StorageSettings

logger = logging.getLogger("app.streamlit_app")
if not logging.getLogger().handlers:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s %(message)s")

BAND_COLORS = {
    RoiBand.SUCCESS: "background-color: #4ade80",
    RoiBand.WARNING: "background-color: #facc15",
    RoiBand.DANGER: "background-color: #f87171",
}

PERCENT_ROWS = {"Lucro (%)", "Taxa Equiv. Mensal (%)"}

# (field, label, step) for the number inputs, grouped as in the deal sheet
FORM_SECTIONS = {
    "Arrematação": [
        ("bid_value", "Lance (R$)", 1000.0),
        ("bid_increment", "Incremento da tabela de lances (R$)", 500.0),
        ("auctioneer_fee_percent", "Comissão leiloeiro (%)", 0.5),
        ("itbi_percent", "ITBI (%)", 0.5),
        ("deed_percent", "Escritura (%)", 0.1),
        ("registry_percent", "Registro (%)", 0.1),
    ],
    "Custos": [
        ("condo_monthly", "Condomínio mensal (R$)", 50.0),
        ("iptu_monthly", "IPTU mensal (R$)", 50.0),
        ("reforms", "Reformas (R$)", 1000.0),
        ("vacation_cost", "Desocupação (R$)", 500.0),
        ("debts", "Débitos do imóvel (R$)", 500.0),
        ("advisory_fee", "Assessoria (R$)", 500.0),
    ],
    "Venda": [
        ("market_value", "Valor de venda (R$)", 1000.0),
        ("sale_discount_percent", "Desconto na venda (%)", 1.0),
        ("broker_fee_percent", "Corretagem (%)", 0.5),
        ("rent_revenue", "Aluguel mensal durante a posse (R$)", 100.0),
        ("min_profit_percent", "Lucro mínimo (%)", 1.0),
    ],
    "Pagamento": [
        ("cash_discount_percent", "Desconto à vista (%)", 1.0),
        ("financing_entry_percent", "Entrada (%)", 1.0),
        ("financing_rate_monthly", "Juros mensais (%)", 0.1),
        ("financing_months", "Prazo (meses)", 1.0),
    ],
}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def _get_repository(settings: StorageSettings) -> DealRepository:
    """One repository per settings value; the previous one is closed on change."""
    current = st.session_state.get("repo")
    if current is not None and st.session_state.get("repo_settings") == settings:
        return current
    if current is not None:
        current.close()
    repo = create_repository(settings)
    st.session_state["repo"] = repo
    st.session_state["repo_settings"] = settings
    return repo


def _current_record() -> PropertyRecord:
    if "record" not in st.session_state:
        st.session_state["record"] = PropertyRecord()
    return st.session_state["record"]


def _style_roi(df: pd.DataFrame, min_profit: float):
    return df.style.map(lambda v: BAND_COLORS[classify_roi(v, min_profit)]).format(format_percent)


def _plot_timeline(result: SimulationResult) -> go.Figure:
    months = [r.month for r in result.timeline]
    fig = go.Figure()
    fig.add_bar(x=months, y=[r.net_profit for r in result.timeline], name="Resultado líquido")
    fig.add_scatter(
        x=months, y=[r.roi_percent for r in result.timeline], name="Lucro (%)", yaxis="y2", mode="lines+markers"
    )
    fig.update_layout(
        height=320,
        xaxis_title="Meses de posse",
        yaxis=dict(title="R$"),
        yaxis2=dict(title="%", overlaying="y", side="right"),
        margin=dict(l=10, r=10, t=30, b=10),
    )
    return fig


# ---------------------------------------------------------------------------
# Sections
# ---------------------------------------------------------------------------
def _render_sidebar() -> Optional[DealRepository]:
    with st.sidebar:
        st.header("Armazenamento")
        env_settings = StorageSettings.from_env()
        backend = st.selectbox("Backend", ["local", "supabase"], index=0 if env_settings.backend == "local" else 1)
        if backend == "supabase":
            url = st.text_input("Supabase URL", value=env_settings.supabase_url)
            key = st.text_input("Supabase Key", value=env_settings.supabase_key, type="password")
            settings = StorageSettings(backend="supabase", supabase_url=url, supabase_key=key, table=env_settings.table)
        else:
            settings = StorageSettings(backend="local", root_dir=env_settings.root_dir)

        try:
            repo = _get_repository(settings)
        except (ValueError, StorageError) as exc:
            st.error(str(exc))
            return None

        if st.button("Testar conexão"):
            ok, message = repo.check_connection()
            (st.success if ok else st.error)(message)

        st.divider()
        st.header("Imóveis")
        if st.button("Novo imóvel", use_container_width=True):
            st.session_state["record"] = PropertyRecord()

        try:
            records = repo.load_all()
        except StorageError as exc:
            st.error(str(exc))
            records = []

        for rec in records:
            cols = st.columns([4, 1])
            if cols[0].button(rec.display_name, key=f"load_{rec.id}", use_container_width=True):
                st.session_state["record"] = rec
            if cols[1].button("✗", key=f"del_{rec.id}"):
                repo.delete(rec.id)
                st.rerun()
    return repo


def _render_form(record: PropertyRecord) -> PropertyRecord:
    params = record.content
    with st.form("deal_form"):
        c1, c2, c3 = st.columns(3)
        city = c1.text_input("Cidade", value=record.city)
        address = c2.text_input("Endereço", value=record.address)
        auction_link = c3.text_input("Link do leilão", value=record.auction_link)

        c1, c2, c3 = st.columns(3)
        auction_types = list(AuctionType)
        auction_type = c1.selectbox(
            "Modalidade", auction_types, index=auction_types.index(record.auction_type), format_func=lambda a: a.value
        )
        methods = list(PaymentMethod)
        payment_method = c2.selectbox(
            "Forma de pagamento", methods, index=methods.index(params.payment_method), format_func=lambda m: m.value
        )
        modes = list(IncomeTaxMode)
        tax_mode = c3.selectbox(
            "Tributação", modes, index=modes.index(params.income_tax_mode), format_func=lambda m: m.value
        )

        raw = {"payment_method": payment_method, "income_tax_mode": tax_mode, "income_tax_rate": params.income_tax_rate}
        for section, items in FORM_SECTIONS.items():
            st.markdown(f"**{section}**")
            cols = st.columns(3)
            for i, (name, label, step) in enumerate(items):
                raw[name] = cols[i % 3].number_input(label, value=float(getattr(params, name)), step=step)

        submitted = st.form_submit_button("Recalcular", type="primary")

    if submitted:
        record = record.model_copy(update={
            "city": city,
            "address": address,
            "auction_link": auction_link,
            "auction_type": auction_type,
            "content": normalize_deal_input(raw),
        })
        st.session_state["record"] = record
    return record


def _render_results(result: SimulationResult) -> None:
    table = breakdown_table(result.timeline)
    table.columns = [f"{m} meses" for m in table.columns]
    display = table.copy().astype(object)
    for label in display.index:
        fmt = format_percent if label in PERCENT_ROWS else format_currency
        display.loc[label] = [fmt(v) for v in table.loc[label]]
    st.dataframe(display, use_container_width=True)
    st.plotly_chart(_plot_timeline(result), use_container_width=True)


def _render_bid_table(params: DealParameters, result: SimulationResult) -> None:
    st.markdown("#### Resultado líquido por lance")
    profit = bid_table_to_dataframe(result.bid_table, value="profit")
    profit.index = [format_currency(b) for b in profit.index]
    st.dataframe(profit.style.format(format_currency), use_container_width=True)

    st.markdown("#### Lucro (%) por lance")
    roi = bid_table_to_dataframe(result.bid_table, value="roi")
    roi.index = [format_currency(b) for b in roi.index]
    st.dataframe(_style_roi(roi, params.min_profit_percent), use_container_width=True)


def _render_market(record: PropertyRecord) -> PropertyRecord:
    edited = st.data_editor(
        pd.DataFrame([c.model_dump() for c in record.comparables]),
        column_config={"id": st.column_config.NumberColumn(disabled=True)},
        use_container_width=True,
        hide_index=True,
        key="comparables_editor",
    )
    updated = record.with_comparables(edited.to_dict("records"))
    if updated.comparables != record.comparables:
        st.session_state["record"] = record = updated

    stats = summarize_comparables(record.comparables)
    if stats is None:
        st.info("Informe ao menos um valor de amostra.")
        return record

    cols = st.columns(4)
    cols[0].metric("Média", format_currency(stats.average))
    cols[1].metric("Mediana", format_currency(stats.median))
    cols[2].metric("Mínimo", format_currency(stats.min))
    cols[3].metric("Máximo", format_currency(stats.max))

    if st.button("Usar média como valor de venda"):
        st.session_state["record"] = record.model_copy(
            update={"content": record.content.replace(market_value=stats.average)}
        )
        st.rerun()
    return record


def _render_report(record: PropertyRecord, result: SimulationResult) -> None:
    report = generate_deal_report(record.content, result, deal_name=record.display_name)
    st.dataframe(report.to_dataframe(), use_container_width=True, hide_index=True)
    st.download_button(
        "Exportar Excel",
        data=export_report_xlsx(record.content, result),
        file_name=f"simulacao_{record.id or 'novo'}.xlsx",
        mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    )


# ---------------------------------------------------------------------------
# Page
# ---------------------------------------------------------------------------
def main() -> None:
    st.set_page_config(page_title="Simulador de Leilão", layout="wide")
    st.title("Simulador de Arrematação de Imóveis")

    repo = _render_sidebar()
    record = _render_form(_current_record())
    params = record.content

    validation = validate_deal(params)
    for err in validation.errors:
        st.error(err)
    for warn in validation.warnings:
        st.warning(warn)

    result = run_simulation(params)

    if repo is not None and st.button("Salvar imóvel"):
        try:
            st.session_state["record"] = repo.save(record)
            st.success("Imóvel salvo.")
        except (StorageError, ValueError) as exc:
            st.error(str(exc))

    horizon = DEFAULT_SIMULATION_CONFIG.longest_horizon
    tabs = st.tabs(["Resultados", "Tabela de Lances", "Pesquisa de Mercado", "Relatório"])
    with tabs[0]:
        _render_results(result)
        last = result.timeline_by_month()[horizon]
        st.caption(
            f"{horizon} meses: {format_currency(last.net_profit)} "
            f"({format_percent(last.roi_percent)}, {classify_roi(last.roi_percent, params.min_profit_percent).value})"
        )
    with tabs[1]:
        _render_bid_table(params, result)
    with tabs[2]:
        record = _render_market(record)
    with tabs[3]:
        _render_report(record, result)


def launch() -> None:
    """Console-script entry point: hand this file to `streamlit run`."""
    from streamlit.web import cli as stcli

    sys.argv = ["streamlit", "run", str(Path(__file__).resolve())]
    sys.exit(stcli.main())


if __name__ == "__main__":
    main()
