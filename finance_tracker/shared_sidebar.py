"""Shared sidebar and session helpers for the multi-page app.

The logged-in user's id lives in ``st.session_state``; pages read it here
and pass it explicitly into every service call.  Nothing below the page
layer looks at the session.
"""

from __future__ import annotations

from typing import Any, Dict, MutableMapping, Optional

import streamlit as st

from .db import TransactionStore
from .log import configure_logging
from .models import User
from .results import Result, ResultStatus
from .services import FinanceService

SESSION_USER_ID = "user_id"
SESSION_USER_NAME = "user_name"
SESSION_FLASH = "flash_message"


@st.cache_resource
def get_store() -> TransactionStore:
    configure_logging()
    store = TransactionStore()
    store.init_db()
    return store


def get_service() -> FinanceService:
    return FinanceService(get_store())


def current_user_id() -> Optional[int]:
    return st.session_state.get(SESSION_USER_ID)


def login(user: User) -> None:
    st.session_state[SESSION_USER_ID] = user.id
    st.session_state[SESSION_USER_NAME] = user.name


def logout() -> None:
    for key in (SESSION_USER_ID, SESSION_USER_NAME):
        st.session_state.pop(key, None)


def render_shared_sidebar() -> Dict[str, Any]:
    """Render sidebar elements available on all pages.

    Returns:
        Dict with keys: 'user_id', 'user_name', 'service'
    """
    user_id = current_user_id()
    user_name = st.session_state.get(SESSION_USER_NAME, "")

    st.sidebar.title("💰 Finance Tracker")
    if user_id:
        st.sidebar.caption(f"Signed in as {user_name}")
        if st.sidebar.button("Log out"):
            logout()
            st.rerun()
    else:
        st.sidebar.info("Log in on the Home page to see your data.")

    return {"user_id": user_id, "user_name": user_name, "service": get_service()}


def require_user(sidebar: Dict[str, Any]) -> int:
    """Stop rendering the page unless someone is logged in."""
    user_id = sidebar.get("user_id")
    if not user_id:
        st.warning("Please log in to view this page.")
        st.stop()
    return user_id


def show_result_error(result: Result, empty_message: str = "No data available.") -> None:
    """Render a non-OK service result as a visible warning instead of zeros."""
    if result.is_ok:
        return
    if result.status == ResultStatus.INVALID_INPUT:
        st.warning(result.message or empty_message)
        for field, messages in result.errors.items():
            st.caption(f"{field}: {', '.join(messages)}")
    elif result.status == ResultStatus.UNAUTHORIZED:
        st.warning(result.message)
    else:
        st.error(f"{empty_message} {result.message}".strip())


def push_flash(message: str, state: Optional[MutableMapping[str, Any]] = None) -> None:
    """Keep a success message across ``st.rerun()``."""
    state = st.session_state if state is None else state
    state[SESSION_FLASH] = message


def pop_flash(state: Optional[MutableMapping[str, Any]] = None) -> Optional[str]:
    state = st.session_state if state is None else state
    return state.pop(SESSION_FLASH, None)


def show_flash() -> None:
    message = pop_flash()
    if message:
        st.success(message)
