"""
Streamlit Frontend for LabCash

This is the screen the lab's front desk uses every shift.

DESIGN PRINCIPLES:
1. One month at a time, picked in the sidebar
2. Every number comes from the engine (nothing is computed here)
3. Clear error messages in simple language
4. Deleting is always an explicit button press
5. The AI summary is optional and never blocks the ledger

The UI only talks to the orchestrator flows.
"""

import asyncio
import logging
from datetime import date

import streamlit as st

from labcash.config import get_settings, validate_all_settings
from labcash.engine import DENOMINATIONS, CashCountError
from labcash.models.records import ShiftType
from labcash.models.statement import MonthlyReport, Period
from labcash.orchestrator import LedgerFlow, SummaryFlow, create_app_components
from labcash.reports import format_currency, format_day, format_ledger_day, format_signed
from labcash.services.storage import NotFoundError, StorageError


# Local structured logs (structlog renders through stdlib logging)
logging.basicConfig(level=get_settings().app.log_level, format="%(message)s")

# Page configuration
st.set_page_config(
    page_title="LabCash",
    page_icon="🧪",
    layout="wide",
    initial_sidebar_state="expanded",
)

# Custom CSS for better UX
st.markdown("""
<style>
    .stButton>button {
        width: 100%;
    }
    .stat-card {
        padding: 16px;
        background-color: #f8fafc;
        border-radius: 10px;
        border-left: 5px solid #4f46e5;
        margin: 6px 0;
    }
    .stat-card.negative {
        border-left-color: #dc3545;
    }
    .stat-title {
        font-size: 0.85em;
        color: #64748b;
    }
    .big-number {
        font-size: 1.8em;
        font-weight: bold;
        color: #2c3e50;
    }
</style>
""", unsafe_allow_html=True)


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


def run_action(coro):
    """Run a save or delete. Storage failures are shown on the page and give None."""
    try:
        return run_async(coro)
    except NotFoundError:
        st.error("That record no longer exists. Reload the page to see the current list.")
    except StorageError as e:
        st.error(f"Could not save the change: {e}")
    return None


@st.cache_resource
def get_components():
    """Get or create application components (cached)."""
    return create_app_components(use_storage=True)


def stat_card(title: str, value, subtitle: str = "", negative: bool = False):
    css = "stat-card negative" if negative else "stat-card"
    st.markdown(f"""
    <div class="{css}">
        <div class="stat-title">{title}</div>
        <div class="big-number">{format_currency(value)}</div>
        <div class="stat-title">{subtitle}</div>
    </div>
    """, unsafe_allow_html=True)


def show_submission(result, message, snapshot):
    """Errors stay on the form; a save reruns the page so the report is fresh."""
    if snapshot is None:
        st.error(message)
        return

    st.session_state.flash = message if result.warnings else None
    st.session_state.saved = True
    st.rerun()


def show_flash():
    if st.session_state.pop("saved", False):
        st.success("Saved.")
        flash = st.session_state.pop("flash", None)
        if flash:
            st.warning(flash)


def month_picker() -> Period:
    """Sidebar month selector: the last twelve months, current first."""
    periods = [Period.current()]
    for _ in range(11):
        periods.append(periods[-1].previous())

    return st.sidebar.selectbox(
        "Month",
        options=periods,
        format_func=lambda p: p.label,
        index=0,
    )


def main():
    """Main application entry point."""
    ledger_flow, summary_flow, json_client = get_components()

    st.sidebar.title("🧪 LabCash")
    st.sidebar.markdown("---")

    period = month_picker()

    page = st.sidebar.radio(
        "Navigate to:",
        [
            "📊 Dashboard",
            "💵 Income",
            "🧾 Expenses",
            "💸 Advances",
            "👥 Staff",
            "🧮 Cash Calculator",
            "✨ AI Summary",
            "⚙️ Settings",
        ],
        index=0,
    )

    st.sidebar.markdown("---")
    if json_client is None:
        st.sidebar.warning("Data is kept in memory only and will be lost on restart.")
    else:
        st.sidebar.caption(f"Data folder: {json_client.data_dir}")

    try:
        report = run_async(ledger_flow.monthly_report(period))
    except StorageError as e:
        st.error(f"Could not read the saved records: {e}")
        st.stop()

    show_flash()

    if page == "📊 Dashboard":
        render_dashboard_page(report)
    elif page == "💵 Income":
        render_income_page(ledger_flow, report)
    elif page == "🧾 Expenses":
        render_expenses_page(ledger_flow, report)
    elif page == "💸 Advances":
        render_advances_page(ledger_flow, report)
    elif page == "👥 Staff":
        render_staff_page(ledger_flow, report)
    elif page == "🧮 Cash Calculator":
        render_calculator_page(ledger_flow)
    elif page == "✨ AI Summary":
        render_summary_page(summary_flow, report)
    elif page == "⚙️ Settings":
        render_settings_page()


def render_stats(report: MonthlyReport):
    s = report.statement
    col1, col2, col3, col4 = st.columns(4)
    with col1:
        stat_card("Total Revenue", s.total_revenue, report.period.label)
    with col2:
        stat_card("Government Share", s.government_share, "85% of revenue")
    with col3:
        stat_card(
            "Distributable Pool",
            s.distributable_pool,
            f"Staff pool {format_currency(s.gross_staff_pool)} minus expenses",
            negative=s.has_deficit,
        )
    with col4:
        stat_card(
            "Share per Staff",
            s.base_share_per_staff,
            f"{s.staff_count} staff, before advances",
            negative=s.base_share_per_staff < 0,
        )


def render_dashboard_page(report: MonthlyReport):
    """Render the month overview."""
    st.title(f"📊 {report.period.label}")
    render_stats(report)

    if report.statement.has_deficit:
        st.warning("Expenses are larger than the staff pool this month.")

    st.markdown("---")
    st.subheader("Daily Revenue")
    if report.daily_totals:
        st.bar_chart(
            {
                "Day": [d.day for d in report.daily_totals],
                "Revenue": [float(d.amount) for d in report.daily_totals],
            },
            x="Day",
            y="Revenue",
        )
    else:
        st.info("No revenue recorded for this month yet.")

    st.subheader("Shifts")
    cols = st.columns(len(report.shift_totals) or 1)
    for col, total in zip(cols, report.shift_totals):
        with col:
            st.metric(
                total.shift.value,
                format_currency(total.amount),
                f"{total.entry_count} entries",
                delta_color="off",
            )
    if report.best_shift:
        st.caption(f"Best shift this month: {report.best_shift.shift.value}")


def render_income_page(ledger_flow: LedgerFlow, report: MonthlyReport):
    """Render the revenue entry form and history."""
    st.title("💵 Income")

    with st.form("entry_form", clear_on_submit=True):
        col1, col2, col3 = st.columns(3)
        with col1:
            record_date = st.date_input("Date", value=date.today())
        with col2:
            shift = st.selectbox("Shift", options=list(ShiftType), format_func=lambda s: s.value)
        with col3:
            amount = st.text_input("Amount", placeholder="e.g. 2500")
        submitted = st.form_submit_button("Add Entry", type="primary")

    if submitted:
        outcome = run_action(ledger_flow.submit_revenue_entry(record_date, shift, amount))
        if outcome:
            show_submission(*outcome)

    st.markdown("---")
    st.subheader(f"History: {report.period.label}")
    if not report.day_groups:
        st.info("No entries for this month.")

    for group in report.day_groups:
        st.markdown(f"**{format_day(group.record_date)}** · {format_currency(group.total)}")
        for entry in group.entries:
            col1, col2, col3 = st.columns([3, 3, 1])
            col1.write(entry.shift.value)
            col2.write(format_currency(entry.amount))
            if col3.button("🗑️", key=f"del-entry-{entry.id}"):
                if run_action(ledger_flow.delete_revenue_entry(entry.id)) is not None:
                    st.rerun()


def render_expenses_page(ledger_flow: LedgerFlow, report: MonthlyReport):
    """Render the shared expense form and list."""
    st.title("🧾 Expenses")
    st.markdown("Shared expenses are paid out of the staff pool before it is split.")

    with st.form("expense_form", clear_on_submit=True):
        col1, col2 = st.columns(2)
        with col1:
            record_date = st.date_input("Date", value=date.today())
            amount = st.text_input("Amount", placeholder="e.g. 500")
        with col2:
            description = st.text_input("Description *", placeholder="e.g. Tea & biscuits")
            remarks = st.text_input("Remarks (optional)")
        submitted = st.form_submit_button("Add Expense", type="primary")

    if submitted:
        outcome = run_action(
            ledger_flow.submit_expense(record_date, amount, description, remarks)
        )
        if outcome:
            show_submission(*outcome)

    st.markdown("---")
    st.subheader(f"Expenses: {report.period.label}")
    st.write(f"Total: **{format_currency(report.statement.total_expenses)}**")
    for expense in sorted(report.expenses, key=lambda e: e.record_date, reverse=True):
        col1, col2, col3, col4 = st.columns([2, 3, 2, 1])
        col1.write(format_day(expense.record_date))
        col2.write(expense.description + (f" ({expense.remarks})" if expense.remarks else ""))
        col3.write(format_currency(expense.amount))
        if col4.button("🗑️", key=f"del-expense-{expense.id}"):
            if run_action(ledger_flow.delete_expense(expense.id)) is not None:
                st.rerun()


def render_advances_page(ledger_flow: LedgerFlow, report: MonthlyReport):
    """Render the personal advance form and list."""
    st.title("💸 Advances")
    st.markdown("An advance is deducted only from that staff member's own share.")

    snapshot = run_async(ledger_flow.load())
    if not snapshot.staff:
        st.info("Add staff members on the Staff page first.")
    else:
        with st.form("advance_form", clear_on_submit=True):
            col1, col2 = st.columns(2)
            with col1:
                record_date = st.date_input("Date", value=date.today())
                staff = st.selectbox(
                    "Staff Member",
                    options=list(snapshot.staff),
                    format_func=lambda m: m.name,
                )
            with col2:
                amount = st.text_input("Amount", placeholder="e.g. 1000")
                remarks = st.text_input("Remarks (optional)")
            submitted = st.form_submit_button("Add Advance", type="primary")

        if submitted:
            outcome = run_action(
                ledger_flow.submit_advance(record_date, amount, staff.id, remarks)
            )
            if outcome:
                show_submission(*outcome)

    st.markdown("---")
    st.subheader(f"Advances: {report.period.label}")
    st.write(f"Total: **{format_currency(report.statement.total_advances)}**")
    for advance in sorted(report.advances, key=lambda a: a.record_date, reverse=True):
        col1, col2, col3, col4 = st.columns([2, 3, 2, 1])
        col1.write(format_day(advance.record_date))
        col2.write(advance.staff_name + (f" ({advance.remarks})" if advance.remarks else ""))
        col3.write(format_currency(advance.amount))
        if col4.button("🗑️", key=f"del-advance-{advance.id}"):
            if run_action(ledger_flow.delete_advance(advance.id)) is not None:
                st.rerun()

    if report.orphaned_advances:
        st.caption(
            f"{len(report.orphaned_advances)} advance(s) belong to staff no longer on the list."
        )


def render_staff_page(ledger_flow: LedgerFlow, report: MonthlyReport):
    """Render the staff roster and personal sheets."""
    st.title("👥 Staff")

    with st.form("staff_form", clear_on_submit=True):
        col1, col2 = st.columns([3, 2])
        with col1:
            name = st.text_input("Name *", placeholder="Enter staff name...")
        with col2:
            role = st.text_input("Role (optional)")
        submitted = st.form_submit_button("Add Staff", type="primary")

    if submitted:
        outcome = run_action(ledger_flow.submit_staff(name, role))
        if outcome:
            show_submission(*outcome)

    st.markdown("---")
    if not report.ledgers:
        st.info("No staff members yet. The share is calculated for one person until you add some.")
        return

    for ledger in report.ledgers:
        with st.expander(
            f"{ledger.staff_name} · Net payable {format_currency(ledger.net_payable)}"
        ):
            col1, col2, col3 = st.columns(3)
            col1.metric("Base Share", format_currency(ledger.base_share))
            col2.metric("Advances", format_currency(ledger.personal_advance_total))
            col3.metric("Net Payable", format_currency(ledger.net_payable))
            if ledger.owes_money:
                st.error("Advances exceed the share: this member owes the difference.")

            st.markdown("**Personal sheet**")
            for item in ledger.entries:
                row1, row2, row3 = st.columns([2, 3, 2])
                row1.write(format_ledger_day(item.entry_date, ledger.period))
                row2.write(item.description + (f" ({item.remarks})" if item.remarks else ""))
                row3.write(format_signed(item.amount))

            if st.button("Remove from staff", key=f"del-staff-{ledger.staff_id}"):
                if run_action(ledger_flow.remove_staff(ledger.staff_id)) is not None:
                    st.rerun()


def render_calculator_page(ledger_flow: LedgerFlow):
    """Render the drawer cash counter."""
    st.title("🧮 Cash Calculator")
    st.markdown("Count the drawer by note. Leave a box empty for none.")

    counts = {}
    cols = st.columns(len(DENOMINATIONS))
    for col, denomination in zip(cols, DENOMINATIONS):
        with col:
            counts[denomination] = st.text_input(
                f"{denomination}",
                key=f"count-{denomination}",
                placeholder="0",
            )

    try:
        cash = ledger_flow.count_cash(counts)
    except CashCountError as e:
        st.error(str(e))
        return

    st.markdown("---")
    for line in cash.lines:
        if line.count:
            st.write(f"{line.denomination} × {line.count} = {format_currency(line.subtotal)}")
    stat_card("Total Cash", cash.total, f"{cash.note_count} notes")


def render_summary_page(summary_flow: SummaryFlow, report: MonthlyReport):
    """Render the AI summary page."""
    st.title("✨ AI Summary")
    st.markdown(f"A written overview of {report.period.label}, based only on the figures above.")

    if not summary_flow.is_available:
        st.info("Set GEMINI_API_KEY in your .env file to enable AI summaries.")

    if st.button("Generate Summary", type="primary"):
        with st.spinner("Writing the summary..."):
            summary = run_async(summary_flow.summarize(report))
        if summary.generated:
            st.markdown(summary.text)
        else:
            st.warning(summary.text)


def render_settings_page():
    """Render the settings page."""
    st.title("⚙️ Settings")

    st.markdown("### Configuration Status")

    status = validate_all_settings()

    sections = [
        ("Gemini (AI Summary)", "gemini"),
        ("Local Storage", "storage"),
        ("Application", "app"),
    ]

    for name, key in sections:
        if status.get(key, False):
            st.success(f"✅ {name} - OK")
        else:
            error = status.get(f"{key}_error", "Not configured")
            st.error(f"❌ {name} - {error}")

    st.markdown("---")
    st.markdown("### Configuration")
    st.markdown(
        "To configure the application, create a `.env` file. "
        "See `.env.example` for the available variables."
    )


if __name__ == "__main__":
    main()
