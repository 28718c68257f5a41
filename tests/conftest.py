"""Pytest fixtures for testing"""

import pytest
from datetime import date, timedelta
from typing import Callable
from fastapi.testclient import TestClient

from club_ar.api.main import create_app
from club_ar.domain.models import Invoice


AS_OF = date(2025, 6, 30)


def make_invoice(
    invoice_id: str,
    days_overdue: int,
    balance_cents: int,
    amount_cents: int | None = None,
    as_of: date = AS_OF,
) -> Invoice:
    """Invoice due `days_overdue` days before as_of, issued 30 days before that"""
    due_date = as_of - timedelta(days=days_overdue)
    return Invoice(
        invoice_id=invoice_id,
        issue_date=due_date - timedelta(days=30),
        due_date=due_date,
        amount_cents=amount_cents if amount_cents is not None else balance_cents,
        balance_cents=balance_cents,
    )


@pytest.fixture
def as_of() -> date:
    """Fixed reference date so aging never depends on the wall clock"""
    return AS_OF


@pytest.fixture
def invoice_factory() -> Callable[..., Invoice]:
    return make_invoice


@pytest.fixture
def suspended_account() -> list[Invoice]:
    """One invoice 95 days overdue, one 40 days overdue"""
    return [
        make_invoice("INV-1", 95, 5000),
        make_invoice("INV-2", 40, 3000),
    ]


@pytest.fixture
def client() -> TestClient:
    """Create FastAPI test client"""
    app = create_app()
    return TestClient(app)
