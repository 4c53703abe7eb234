"""/v1/transactions - stored transactions, manual entry and the review queue"""

import logging
import uuid
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from sms_gateway.api.dependencies import get_engine, get_request_id
from sms_gateway.api.v1.schemas import (
    ApproveRequest,
    ManualTransactionRequest,
    TransactionItem,
    TransactionListResponse,
)
from sms_gateway.domain.categories import Categorizer
from sms_gateway.domain.engine import TransactionEngine
from sms_gateway.domain.exceptions import InvalidReviewActionError, TransactionNotFoundError
from sms_gateway.domain.models import Direction
from sms_gateway.infrastructure.database.models import (
    STATUS_IGNORED,
    STATUS_PENDING_REVIEW,
    STATUS_RECORDED,
    SmsTransaction,
)
from sms_gateway.infrastructure.database.repositories import TransactionRepository, signed_value
from sms_gateway.infrastructure.database.session import get_db
from sms_gateway.infrastructure.observability.metrics import record_transaction
from sms_gateway.utils.date_utils import to_utc_naive

router = APIRouter()


def to_item(row: SmsTransaction) -> TransactionItem:
    return TransactionItem(
        transaction_id=str(row.id),
        amount=signed_value(row),
        direction=row.direction,
        counterparty=row.counterparty,
        category=row.category,
        description=row.description or "",
        reference=row.reference or "",
        sms_sender=row.sms_sender,
        status=row.status,
        observed_at=row.observed_at,
    )


def _items(rows: List[SmsTransaction]) -> TransactionListResponse:
    return TransactionListResponse(transactions=[to_item(r) for r in rows])


def _parse_id(transaction_id: str) -> uuid.UUID:
    try:
        return uuid.UUID(transaction_id)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid transaction ID format")


def _pending(repo: TransactionRepository, transaction_id: uuid.UUID) -> SmsTransaction:
    row = repo.get_by_id(transaction_id)
    if row is None:
        raise TransactionNotFoundError(f"Transaction {transaction_id} not found")
    if row.status != STATUS_PENDING_REVIEW:
        raise InvalidReviewActionError(f"Transaction {transaction_id} is {row.status}, not pending review")
    return row


def _resolve_category(categorizer: Categorizer, value: Optional[str], counterparty: str) -> str:
    if not value:
        return categorizer.categorize(counterparty)
    return categorizer.get_by_name(value).display_name


@router.get("/transactions", response_model=TransactionListResponse)
def list_transactions(
    limit: int = Query(50, ge=1, le=500, description="Maximum number of transactions"),
    db: Session = Depends(get_db),
):
    """Most recent recorded transactions, debits negative"""
    return _items(TransactionRepository(db).get_recent(limit))


@router.get("/transactions/search", response_model=TransactionListResponse)
def search_transactions(
    q: str = Query(..., min_length=1, description="Substring of counterparty or description"),
    db: Session = Depends(get_db),
):
    return _items(TransactionRepository(db).search(q))


@router.get("/transactions/pending", response_model=TransactionListResponse)
def list_pending(db: Session = Depends(get_db)):
    """Review queue of transactions captured in manual mode"""
    return _items(TransactionRepository(db).get_by_status(STATUS_PENDING_REVIEW))


@router.post("/transactions", response_model=TransactionItem, status_code=201)
def create_manual_transaction(
    request_body: ManualTransactionRequest,
    request: Request,
    db: Session = Depends(get_db),
    engine: TransactionEngine = Depends(get_engine),
):
    """Manual entry: stored directly, never subject to duplicate detection"""
    request_id = get_request_id(request)
    observed_at = to_utc_naive(request_body.observed_at or datetime.now(timezone.utc))
    category = _resolve_category(engine.categorizer, request_body.category, request_body.counterparty)

    try:
        row = TransactionRepository(db).create_manual_transaction(
            amount=request_body.amount,
            direction=Direction(request_body.direction),
            counterparty=request_body.counterparty.strip(),
            category=category,
            observed_at=observed_at,
            description=request_body.description,
        )
        db.commit()
    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    record_transaction(row.direction, row.category, row.status)
    return to_item(row)


@router.post("/transactions/{transaction_id}/approve", response_model=TransactionItem)
def approve_transaction(
    transaction_id: str,
    request: Request,
    request_body: Optional[ApproveRequest] = None,
    db: Session = Depends(get_db),
    engine: TransactionEngine = Depends(get_engine),
):
    """
    Accept a pending transaction, optionally with user edits.

    The row goes straight to recorded; it is not re-run through the engine, so
    it cannot be caught by duplicate detection on the way back.
    """
    txn_id = _parse_id(transaction_id)
    request_id = get_request_id(request)
    repo = TransactionRepository(db)

    try:
        row = _pending(repo, txn_id)
        edits = request_body.model_dump(exclude_none=True) if request_body else {}
        if "category" in edits:
            edits["category"] = _resolve_category(
                engine.categorizer, edits["category"], edits.get("counterparty", row.counterparty)
            )
        repo.apply_edits(row, edits)
        repo.mark_status(row, STATUS_RECORDED)
        db.commit()

    except TransactionNotFoundError as e:
        db.rollback()
        raise HTTPException(status_code=404, detail=str(e))

    except InvalidReviewActionError as e:
        db.rollback()
        logging.warning(f"Invalid review action: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=409, detail=str(e))

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    record_transaction(row.direction, row.category, row.status)
    return to_item(row)


@router.post("/transactions/{transaction_id}/ignore", response_model=TransactionItem)
def ignore_transaction(
    transaction_id: str,
    request: Request,
    db: Session = Depends(get_db),
):
    """Drop a pending transaction from the review queue; it is kept but never counted"""
    txn_id = _parse_id(transaction_id)
    request_id = get_request_id(request)
    repo = TransactionRepository(db)

    try:
        row = repo.mark_status(_pending(repo, txn_id), STATUS_IGNORED)
        db.commit()

    except TransactionNotFoundError as e:
        db.rollback()
        raise HTTPException(status_code=404, detail=str(e))

    except InvalidReviewActionError as e:
        db.rollback()
        logging.warning(f"Invalid review action: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=409, detail=str(e))

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    return to_item(row)
