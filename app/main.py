"""
Streamlit Frontend for Crypto Ledger

A thin view over the ledger store: everything shown here is read from
the store, and every button maps to exactly one store or updater call.

Layout:
1. Summary cards (balance, income, expense) in crypto and fiat
2. Recent activity bar chart
3. Add transaction form
4. Transaction history with per-row delete
5. Exchange rate panel with refresh and cited sources
"""

import asyncio
from datetime import date

import streamlit as st

from crypto_ledger.config import get_settings
from crypto_ledger.ledger import LedgerStore, RateUpdater
from crypto_ledger.models.transaction import TransactionType
from crypto_ledger.orchestrator import create_app_components


# Page configuration
st.set_page_config(
    page_title="Crypto Ledger",
    page_icon="💰",
    layout="wide",
)


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@st.cache_resource
def get_components() -> tuple[LedgerStore, RateUpdater]:
    """Get or create application components (cached)."""
    try:
        return create_app_components(use_ai=True)
    except Exception as e:
        st.error(f"Failed to initialize: {e}")
        return create_app_components(use_ai=False)


def truncate_label(text: str, limit: int) -> str:
    """Shorten chart labels to `limit` characters plus an ellipsis."""
    if len(text) <= limit:
        return text
    return text[:limit] + "…"


def main():
    """Main application entry point."""
    store, rate_updater = get_components()
    app_settings = get_settings().app
    crypto = app_settings.crypto_symbol
    fiat = app_settings.fiat_currency

    st.title("💰 Crypto Ledger")

    render_summary(store, crypto, fiat)
    st.markdown("---")

    col1, col2 = st.columns([3, 2])
    with col1:
        render_activity_chart(store, app_settings.recent_activity_points,
                              app_settings.chart_label_length)
    with col2:
        render_rate_panel(store, rate_updater, crypto, fiat)

    st.markdown("---")
    render_add_form(store, crypto)
    st.markdown("---")
    render_history(store, crypto, fiat)


def render_summary(store: LedgerStore, crypto: str, fiat: str):
    """Render the three summary cards."""
    summary = store.summary
    cards = [
        ("Total Balance", summary.total_balance),
        ("Total Income", summary.total_income),
        ("Total Expense", summary.total_expense),
    ]
    for column, (label, amount) in zip(st.columns(3), cards):
        with column:
            st.metric(label, f"{amount:,} {crypto}")
            st.caption(f"≈ {store.format_local_currency(amount)} {fiat}")


def render_activity_chart(store: LedgerStore, points: int, label_length: int):
    """Render the recent activity bar chart (oldest on the left)."""
    st.subheader("📊 Recent Activity")
    activity = store.recent_activity(points)
    if not activity:
        st.info("No transactions yet.")
        return

    st.bar_chart(
        {
            "transaction": [
                f"{i + 1}. {truncate_label(point.label, label_length)}"
                for i, point in enumerate(activity)
            ],
            "income": [
                float(point.amount) if point.type == TransactionType.INCOME else 0.0
                for point in activity
            ],
            "expense": [
                float(point.amount) if point.type == TransactionType.EXPENSE else 0.0
                for point in activity
            ],
        },
        x="transaction",
        y=["income", "expense"],
    )


def render_rate_panel(store: LedgerStore, rate_updater: RateUpdater, crypto: str, fiat: str):
    """Render the current rate, refresh button, manual override and sources."""
    st.subheader("💱 Exchange Rate")
    st.markdown(f"**1 {crypto} = {store.exchange_rate} {fiat}**")

    # run_async blocks this script run, so is_updating only reads True when
    # another session shares the cached updater mid-refresh.
    if st.button(
        "🔄 Refresh Rate",
        disabled=rate_updater.is_updating,
        help="Look up the current market rate",
    ):
        with st.spinner("Looking up the current rate..."):
            result = run_async(rate_updater.refresh())
        if result.rate is None:
            st.warning("Could not fetch a new rate; keeping the current one.")
        st.rerun()

    with st.expander("✏️ Set rate manually"):
        manual_rate = st.number_input(
            f"{fiat} per {crypto}",
            min_value=0.0,
            value=float(store.exchange_rate),
            step=0.01,
            format="%.6f",
        )
        if st.button("Save rate"):
            try:
                store.set_exchange_rate(manual_rate)
                st.rerun()
            except ValueError as e:
                st.error(str(e))

    if store.rate_sources:
        st.markdown("**Sources:**")
        for source in store.rate_sources:
            st.markdown(f"- [{source.title}]({source.uri})")


def render_add_form(store: LedgerStore, crypto: str):
    """Render the add transaction form."""
    st.subheader("➕ Add Transaction")
    with st.form("add_transaction", clear_on_submit=True):
        col1, col2, col3 = st.columns(3)
        with col1:
            description = st.text_input("Description *")
            transaction_type = st.selectbox(
                "Type *",
                options=list(TransactionType),
                format_func=lambda x: x.value.title(),
            )
        with col2:
            amount = st.number_input(
                f"Amount ({crypto}) *",
                min_value=0.0,
                step=0.01,
                format="%.8f",
            )
            category = st.text_input("Category")
        with col3:
            transaction_date = st.date_input("Date", value=date.today())

        if st.form_submit_button("Add", type="primary"):
            if not description.strip():
                st.error("Please enter a description")
            elif amount <= 0:
                st.error("Please enter an amount greater than zero")
            else:
                try:
                    store.add(
                        description=description,
                        amount=str(amount),
                        type=transaction_type,
                        category=category,
                        date=transaction_date,
                    )
                    st.rerun()
                except Exception as e:
                    st.error(f"Failed to save: {str(e)}")


def render_history(store: LedgerStore, crypto: str, fiat: str):
    """Render the full transaction history with a delete button per row."""
    st.subheader("📋 Transaction History")
    if not store.transactions:
        st.info("Your transactions will appear here once you add them.")
        return

    header = st.columns([2, 3, 2, 2, 2, 2, 1])
    for column, title in zip(
        header, ["Date", "Description", "Category", "Type", crypto, fiat, ""]
    ):
        column.markdown(f"**{title}**")

    for transaction in store.transactions:
        row = st.columns([2, 3, 2, 2, 2, 2, 1])
        sign = "+" if transaction.type == TransactionType.INCOME else "-"
        row[0].write(transaction.date.isoformat())
        row[1].write(transaction.description)
        row[2].write(transaction.category or "—")
        row[3].write(transaction.type.value.title())
        row[4].write(f"{sign}{transaction.amount}")
        row[5].write(f"{sign}{store.format_local_currency(transaction.amount)}")
        if row[6].button("🗑️", key=f"delete_{transaction.id}", help="Delete"):
            store.delete(transaction.id)
            st.rerun()


if __name__ == "__main__":
    main()
