"""Dependency injection for FastAPI endpoints"""

from datetime import timedelta
from functools import lru_cache

from fastapi import Request

from sms_gateway.config import settings
from sms_gateway.domain.categories import DEFAULT_TAXONOMY, Categorizer, load_taxonomy
from sms_gateway.domain.engine import TransactionEngine, build_engine
from sms_gateway.infrastructure.clients.notifier import ReviewNotifier


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


@lru_cache
def get_engine() -> TransactionEngine:
    """Process-wide engine: the receive-time duplicate cache must outlive single requests"""
    taxonomy = (
        load_taxonomy(settings.category_taxonomy_path)
        if settings.category_taxonomy_path
        else DEFAULT_TAXONOMY
    )
    return build_engine(
        require_trusted_sender=settings.require_trusted_sender,
        cache_window=timedelta(minutes=settings.receive_cache_window_minutes),
        cache_max_entries=settings.receive_cache_max_entries,
        categorizer=Categorizer(taxonomy),
    )


def get_notifier() -> ReviewNotifier:
    """Provide review webhook client instance"""
    return ReviewNotifier()
