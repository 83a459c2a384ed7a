"""Main entry point for the Streamlit multi-page app.

Logged-out visitors get the login and signup forms; logged-in users see
this month's net balance and their latest transactions.  Pages in the
pages/ directory appear in the sidebar automatically.
"""

from __future__ import annotations

import sys
from datetime import date
from pathlib import Path

import streamlit as st

# Add project root to path for imports
project_root = Path(__file__).parent.parent.resolve()
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from finance_tracker import auth
from finance_tracker.display import format_currency, transactions_frame
from finance_tracker.shared_sidebar import (
    get_store,
    login,
    render_shared_sidebar,
    show_result_error,
)


def _render_login() -> None:
    with st.form("login_form"):
        email = st.text_input("Email", placeholder="jsmith@example.com")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Log in")
    if submitted:
        result = auth.authenticate(get_store(), email, password)
        if result.is_ok:
            login(result.data)
            st.rerun()
        else:
            show_result_error(result, "Login failed.")


def _render_signup() -> None:
    with st.form("signup_form", clear_on_submit=False):
        name = st.text_input("Name")
        email = st.text_input("Email", key="signup_email")
        password = st.text_input("Password", type="password", key="signup_password")
        submitted = st.form_submit_button("Create account")
    if submitted:
        result = auth.signup(get_store(), {"name": name, "email": email, "password": password})
        if result.is_ok:
            st.success(f"{result.message} You can now log in.")
        else:
            show_result_error(result, "Signup failed.")


def _render_landing(sidebar) -> None:
    service = sidebar["service"]
    user_id = sidebar["user_id"]
    today = date.today()

    st.subheader(f"Welcome back, {sidebar['user_name']}")

    summary = service.quick_summary(user_id, today)
    if summary.is_ok:
        st.metric(f"Net balance for {today:%B %Y}", format_currency(summary.data))
    else:
        show_result_error(summary)

    st.markdown("**Recent transactions**")
    recent = service.recent_transactions(user_id)
    if not recent.is_ok:
        show_result_error(recent)
    elif not recent.data:
        st.info("No transactions yet. Add one on the Transactions page.")
    else:
        st.dataframe(
            transactions_frame(recent.data).drop(columns=["ID"]),
            use_container_width=True,
            hide_index=True,
        )


def main() -> None:
    st.set_page_config(page_title="Finance Tracker", page_icon="💰", layout="wide")
    sidebar = render_shared_sidebar()
    st.title("💰 Finance Tracker")

    if sidebar["user_id"]:
        _render_landing(sidebar)
        return

    st.write("Track your income and expenses, set monthly budgets, and see where your money goes.")
    login_tab, signup_tab = st.tabs(["Log in", "Sign up"])
    with login_tab:
        _render_login()
    with signup_tab:
        _render_signup()


if __name__ == "__main__":
    main()
