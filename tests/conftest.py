"""Shared fixtures: a throwaway SQLite store per test."""

from __future__ import annotations

import pytest
from werkzeug.security import generate_password_hash

from finance_tracker.db import TransactionStore
from finance_tracker.services import FinanceService


@pytest.fixture
def store(tmp_path):
    store = TransactionStore(tmp_path / "finance.db")
    store.init_db()
    return store


@pytest.fixture
def service(store):
    return FinanceService(store)


@pytest.fixture
def user(store):
    return store.create_user("Alice", "alice@example.com", generate_password_hash("secret123"))


@pytest.fixture
def other_user(store):
    return store.create_user("Bob", "bob@example.com", generate_password_hash("secret456"))
