"""Dependency injection for FastAPI endpoints"""

from fastapi import Request

from club_ar.config import settings
from club_ar.domain.models import ClearingRule


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_clearing_rule() -> ClearingRule:
    """Rule deciding which payment clears an until-payment override"""
    return settings.override_clearing_rule


def get_page_size() -> int:
    return settings.aging_page_size
