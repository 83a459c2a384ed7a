"""Account creation and credential checks."""

from __future__ import annotations

from typing import Any, Mapping

import structlog
from werkzeug.security import check_password_hash, generate_password_hash

from .db import DuplicateError, StoreError, TransactionStore
from .forms import LoginForm, SignupForm, validate_form
from .results import Result

logger = structlog.get_logger(__name__)

DUPLICATE_EMAIL_MESSAGE = "User with this email already exists."


def signup(store: TransactionStore, form_data: Mapping[str, Any]) -> Result:
    """Create a user from signup form data.

    Returns:
        ``OK`` with the new :class:`~finance_tracker.models.User`,
        ``INVALID_INPUT`` for bad input or a taken email, or
        ``STORE_ERROR`` if the database fails.
    """
    form, errors = validate_form(SignupForm, form_data)
    if form is None:
        return Result.invalid(", ".join(m for msgs in errors.values() for m in msgs), errors)

    try:
        if store.get_user_by_email(form.email) is not None:
            return Result.invalid(DUPLICATE_EMAIL_MESSAGE, {"email": [DUPLICATE_EMAIL_MESSAGE]})
        user = store.create_user(form.name, form.email, generate_password_hash(form.password))
    except DuplicateError:
        return Result.invalid(DUPLICATE_EMAIL_MESSAGE, {"email": [DUPLICATE_EMAIL_MESSAGE]})
    except StoreError as e:
        logger.error("signup_failed", email=form.email, error=str(e))
        return Result.store_error("An unexpected error occurred during signup.")

    logger.info("user_created", user_id=user.id)
    return Result.ok(user, "User created successfully!")


def authenticate(store: TransactionStore, email: str, password: str) -> Result:
    """Check credentials; ``OK`` carries the user, anything else is a refusal."""
    form, errors = validate_form(LoginForm, {"email": email, "password": password})
    if form is None:
        return Result.invalid("Email and password are required.", errors)

    try:
        user = store.get_user_by_email(form.email)
    except StoreError as e:
        logger.error("login_lookup_failed", error=str(e))
        return Result.store_error("Could not reach the database. Try again later.")

    if user is None or not check_password_hash(user.password_hash, form.password):
        logger.info("login_rejected", email=form.email)
        return Result.unauthorized("Invalid email or password.")
    return Result.ok(user)
