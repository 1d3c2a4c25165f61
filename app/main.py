"""
Streamlit Frontend for Estate Office

The back office agents and admins use day to day.

DESIGN PRINCIPLES:
1. Every page works on what the signed-in user may see
2. Reports are generated on demand, never cached between runs
3. Clear error messages for rule violations (ValueError) and missing records
4. Exports are plain CSV downloads

The user is picked in the sidebar; there is no login.
"""

from datetime import date

import streamlit as st

from estate_office.accounting import (
    export_balance_sheet_csv,
    export_cash_flow_csv,
    export_commission_report_csv,
    export_expense_summary_csv,
    export_profit_and_loss_csv,
    export_trial_balance_csv,
)
from estate_office.config import validate_all_settings
from estate_office.models.audit import AuditEventBuilder
from estate_office.models.base import UserContext, UserRole
from estate_office.models.deal import DEAL_STAGE_ORDER, DealStatus
from estate_office.orchestrator import EstateOffice, create_app_components
from estate_office.queries import deal_pipeline_summary, lead_statistics
from estate_office.services.storage import StorageError


st.set_page_config(
    page_title="Estate Office",
    page_icon="🏠",
    layout="wide",
    initial_sidebar_state="expanded",
)


@st.cache_resource
def get_components() -> EstateOffice:
    """Get or create application components (cached)."""
    return create_app_components()


def money(value: float) -> str:
    return f"PKR {value:,.0f}"


def main():
    """Main application entry point."""
    try:
        office = get_components()
    except StorageError as e:
        st.error(f"Storage is not available: {e}")
        return

    st.sidebar.title("🏠 Estate Office")
    st.sidebar.markdown("---")

    user_id = st.sidebar.text_input("User ID", value="admin")
    role = st.sidebar.selectbox(
        "Role",
        options=list(UserRole),
        format_func=lambda r: r.value.replace("-", " ").title(),
    )
    user = UserContext(user_id=user_id or "admin", role=role)

    st.sidebar.markdown("---")
    page = st.sidebar.radio(
        "Navigate to:",
        [
            "📊 Dashboard",
            "🏘️ Properties",
            "🤝 Deals",
            "🎯 Buyer Matching",
            "📑 Financial Reports",
            "⚙️ Settings",
        ],
        index=0,
    )

    if page == "📊 Dashboard":
        render_dashboard(office, user)
    elif page == "🏘️ Properties":
        render_properties_page(office, user)
    elif page == "🤝 Deals":
        render_deals_page(office, user)
    elif page == "🎯 Buyer Matching":
        render_matching_page(office, user)
    elif page == "📑 Financial Reports":
        render_reports_page(office, user)
    elif page == "⚙️ Settings":
        render_settings_page(office)


def render_dashboard(office: EstateOffice, user: UserContext):
    st.title("📊 Dashboard")

    properties = office.properties.list_active(user)
    leads = lead_statistics(office.leads.list_for(user))
    pipeline = deal_pipeline_summary(office.deals.list_for(user))

    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Active Properties", len(properties))
    col2.metric("Leads", leads.total, f"{leads.conversion_rate:.0f}% converted")
    col3.metric("Active Deals", pipeline.by_status.get(DealStatus.ACTIVE.value, 0))
    col4.metric("Pipeline Value", money(pipeline.active_pipeline_value))

    st.markdown("### Deals by Stage")
    st.bar_chart(pipeline.by_stage)

    st.markdown("### Leads by Status")
    st.bar_chart(leads.by_status)


def render_properties_page(office: EstateOffice, user: UserContext):
    st.title("🏘️ Properties")

    show_archived = st.checkbox("Show archived")
    properties = (
        office.properties.list_archived(user) if show_archived
        else office.properties.list_active(user)
    )
    if not properties:
        st.info("No properties to show.")
        return

    st.dataframe([
        {
            "Title": p.display_title,
            "Location": p.location_text,
            "Type": p.property_type.value,
            "Status": p.status.value,
            "Price": p.price,
            "Owner": p.current_owner_name or "",
        }
        for p in properties
    ])

    st.markdown("### Ownership History")
    selected = st.selectbox(
        "Property",
        options=properties,
        format_func=lambda p: p.display_title,
    )
    history = office.ownership.get_ownership_history(selected.id)
    if history:
        st.dataframe([record.model_dump() for record in history])
    else:
        st.info("No ownership history recorded.")


def render_deals_page(office: EstateOffice, user: UserContext):
    st.title("🤝 Deals")

    deals = office.deals.list_for(user)
    if not deals:
        st.info("No deals yet.")
        return

    deal = st.selectbox(
        "Deal",
        options=deals,
        format_func=lambda d: f"{d.deal_number} - {d.lifecycle.stage.value} ({d.lifecycle.status.value})",
    )

    col1, col2, col3 = st.columns(3)
    col1.metric("Agreed Price", money(deal.financial.agreed_price))
    col2.metric("Paid", money(deal.financial.total_paid))
    col3.metric("Commission", money(deal.financial.commission.total))

    if deal.lifecycle.status != DealStatus.ACTIVE:
        return

    current = DEAL_STAGE_ORDER.index(deal.lifecycle.stage)
    next_stages = DEAL_STAGE_ORDER[current + 1:-1]
    if next_stages:
        stage = st.selectbox("Move to stage", options=next_stages, format_func=lambda s: s.value)
        if st.button("➡️ Progress Stage"):
            try:
                office.pipeline.progress_stage(deal.id, stage, user)
                st.success(f"Deal moved to {stage.value}")
                st.rerun()
            except ValueError as e:
                st.error(str(e))

    if st.button("✅ Complete Deal", type="primary"):
        try:
            office.pipeline.complete_deal(deal.id, user)
            st.success("Deal completed and ownership transferred")
            st.rerun()
        except (ValueError, StorageError) as e:
            st.error(str(e))

    reason = st.text_input("Cancellation reason")
    if st.button("❌ Cancel Deal") and reason:
        try:
            office.pipeline.cancel_deal(deal.id, reason, user)
            st.warning("Deal cancelled")
            st.rerun()
        except (ValueError, StorageError) as e:
            st.error(str(e))


def render_matching_page(office: EstateOffice, user: UserContext):
    st.title("🎯 Buyer Matching")

    requirements = office.requirements.list_for(user)
    if not requirements:
        st.info("No buyer requirements recorded.")
        return

    requirement = st.selectbox(
        "Buyer requirement",
        options=requirements,
        format_func=lambda r: f"{r.buyer_name or r.id} ({money(r.min_budget)} - {money(r.max_budget)})",
    )

    matches = office.matcher.find_matches_for_buyer(requirement, user)
    if not matches:
        st.info("No listed properties match this requirement.")
        return

    for match in matches:
        with st.expander(f"{match.property.display_title} - score {match.match_score}"):
            st.markdown(f"**Asking price:** {money(match.asking_price)}")
            for reason in match.match_reasons:
                st.markdown(f"✅ {reason}")
            for mismatch in match.mismatches:
                st.markdown(f"⚠️ {mismatch}")


def render_reports_page(office: EstateOffice, user: UserContext):
    st.title("📑 Financial Reports")

    today = date.today()
    col1, col2 = st.columns(2)
    start = col1.date_input("From", value=date(today.year, 1, 1))
    end = col2.date_input("To", value=today)

    report_type = st.selectbox(
        "Report",
        [
            "Trial Balance",
            "Profit & Loss",
            "Balance Sheet",
            "Cash Flow",
            "Commission Report",
            "Expense Summary",
        ],
    )

    if report_type == "Trial Balance":
        report = office.statements.generate_trial_balance(end, user)
        csv_text = export_trial_balance_csv(report)
        if not report.is_balanced:
            st.warning(f"Trial balance is out by {money(report.difference)}")
    elif report_type == "Profit & Loss":
        report = office.statements.generate_profit_and_loss(start, end, user)
        csv_text = export_profit_and_loss_csv(report)
        st.metric("Net Income", money(report.net_income))
    elif report_type == "Balance Sheet":
        report = office.statements.generate_balance_sheet(end, user)
        csv_text = export_balance_sheet_csv(report)
        st.metric("Total Assets", money(report.assets.total_assets))
    elif report_type == "Cash Flow":
        report = office.statements.generate_cash_flow_statement(start, end, user)
        csv_text = export_cash_flow_csv(report)
        st.metric("Ending Cash", money(report.ending_cash))
    elif report_type == "Commission Report":
        report = office.performance.generate_commission_report(start, end, user)
        csv_text = export_commission_report_csv(report)
        st.metric("Total Commission", money(report.summary.total_commission))
    else:
        report = office.performance.generate_expense_summary_report(start, end, user)
        csv_text = export_expense_summary_csv(report)
        st.metric("Total Expenses", money(report.summary.total_expenses))

    st.text(csv_text)

    if st.download_button(
        "⬇️ Download CSV",
        data=csv_text,
        file_name=f"{report.id}.csv",
        mime="text/csv",
    ):
        office.audit_logger.log(AuditEventBuilder.report_exported(
            report_type=report_type,
            report_id=report.id,
            size_bytes=len(csv_text.encode("utf-8")),
        ))


def render_settings_page(office: EstateOffice):
    st.title("⚙️ Settings")

    st.markdown("### Configuration Status")
    status = validate_all_settings()

    sections = [
        ("Storage", "storage"),
        ("Accounting", "accounting"),
        ("Application", "app"),
    ]
    for name, key in sections:
        if status.get(key, False):
            st.success(f"✅ {name} - OK")
        else:
            error = status.get(f"{key}_error", "Not configured")
            st.error(f"❌ {name} - {error}")

    st.markdown("### Recent Activity")
    events = office.audit_logger.recent_events(limit=20)
    if events:
        st.dataframe([
            {
                "Time": e.timestamp,
                "Event": e.event_type.value,
                "Entity": f"{e.entity_type or ''} {e.entity_id or ''}".strip(),
                "Description": e.description,
            }
            for e in events
        ])
    else:
        st.info("No audit events yet.")

    st.markdown("---")
    st.markdown(
        "Configure the application with a `.env` file. Storage settings use the "
        "`ESTATE_STORAGE_` prefix and accounting settings the `ESTATE_ACCOUNTING_` prefix."
    )


if __name__ == "__main__":
    main()
