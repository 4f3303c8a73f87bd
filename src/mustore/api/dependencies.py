"""Request-scoped dependencies: caller identity, admin key and services."""

import os

from fastapi import Header, HTTPException

from mustore.checkout.lifecycle import OrderLifecycleManager
from mustore.checkout.workflow import OrderWorkflow
from mustore.domain import mustore

DEFAULT_ADMIN_KEY = "admin123"


class Caller:
    """Who is making the request: a signed-in customer or a guest session."""

    def __init__(self, customer_id: str | None, session_id: str | None):
        self.customer_id = customer_id
        self.session_id = session_id


def get_caller(
    x_customer_id: str | None = Header(None),
    x_session_id: str | None = Header(None),
) -> Caller:
    if not x_customer_id and not x_session_id:
        raise HTTPException(status_code=400, detail="X-Customer-Id or X-Session-Id header is required")
    return Caller(customer_id=x_customer_id, session_id=x_session_id)


def require_customer(x_customer_id: str | None = Header(None)) -> str:
    if not x_customer_id:
        raise HTTPException(status_code=401, detail="Authentication required")
    return x_customer_id


def require_admin(x_admin_key: str | None = Header(None)) -> None:
    expected = os.getenv("ADMIN_KEY", DEFAULT_ADMIN_KEY)
    if x_admin_key != expected:
        raise HTTPException(status_code=401, detail="Unauthorized: invalid admin key")


def get_workflow() -> OrderWorkflow:
    return OrderWorkflow(mustore)


def get_lifecycle_manager() -> OrderLifecycleManager:
    return OrderLifecycleManager(mustore)
