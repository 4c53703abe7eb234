"""Categories, monthly summary and privacy maintenance endpoints"""

import logging
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from sms_gateway.api.dependencies import get_engine, get_request_id
from sms_gateway.api.v1.schemas import (
    CategoriesResponse,
    CategoryItem,
    CleanupResponse,
    MonthlySummaryResponse,
)
from sms_gateway.api.v1.transactions import to_item
from sms_gateway.config import settings
from sms_gateway.domain.engine import TransactionEngine
from sms_gateway.domain.models import Direction
from sms_gateway.infrastructure.database.repositories import TransactionRepository
from sms_gateway.infrastructure.database.session import get_db
from sms_gateway.utils.date_utils import month_bounds

router = APIRouter()


@router.get("/categories", response_model=CategoriesResponse)
def list_categories(
    db: Session = Depends(get_db),
    engine: TransactionEngine = Depends(get_engine),
):
    """Configured taxonomy in match order plus the categories stored transactions use"""
    taxonomy = [CategoryItem(id=c.id, name=c.display_name) for c in engine.categorizer.taxonomy]
    return CategoriesResponse(taxonomy=taxonomy, in_use=TransactionRepository(db).get_categories())


@router.get("/summary/monthly", response_model=MonthlySummaryResponse)
def monthly_summary(
    year: int = Query(..., ge=2000, le=2100),
    month: int = Query(..., ge=1, le=12),
    db: Session = Depends(get_db),
):
    """
    Spending and income for one calendar month.

    Spending counts debits only. Income is the configured base income plus
    every credit recorded in the month.
    """
    start, end = month_bounds(year, month)
    repo = TransactionRepository(db)

    spending = repo.total_by_direction(Direction.DEBIT, start, end)
    credited = repo.total_by_direction(Direction.CREDIT, start, end)
    base_income = Decimal(str(settings.base_monthly_income)).quantize(Decimal("0.01"))

    return MonthlySummaryResponse(
        year=year,
        month=month,
        total_spending=spending,
        base_income=base_income,
        credited_income=credited,
        total_income=base_income + credited,
        income_transactions=[to_item(r) for r in repo.list_by_direction(Direction.CREDIT, start, end)],
    )


@router.post("/maintenance/cleanup", response_model=CleanupResponse)
def cleanup_sms_bodies(request: Request, db: Session = Depends(get_db)):
    """Clear raw SMS text older than the retention period; the extracted facts stay"""
    request_id = get_request_id(request)
    cutoff = datetime.now(timezone.utc).replace(tzinfo=None) - timedelta(hours=settings.sms_body_retention_hours)
    repo = TransactionRepository(db)

    try:
        eligible = repo.count_sms_bodies_older_than(cutoff)
        cleared = repo.clear_sms_bodies_older_than(cutoff) if eligible else 0
        db.commit()
    except Exception as e:
        db.rollback()
        logging.error(f"SMS body cleanup failed: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    logging.info(
        "SMS body cleanup completed",
        extra={"request_id": request_id, "eligible": eligible, "cleared": cleared},
    )
    return CleanupResponse(cutoff=cutoff, eligible=eligible, cleared=cleared)
