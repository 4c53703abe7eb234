"""POST /v1/messages - SMS ingestion endpoints"""

import logging
import time
from datetime import datetime, timedelta, timezone

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from sms_gateway.api.dependencies import get_engine, get_notifier, get_request_id
from sms_gateway.api.v1.schemas import ExtractedTransactionSchema, MessageRequest, MessageResponse
from sms_gateway.config import settings
from sms_gateway.domain.duplicates import is_manual_sender, is_persisted_duplicate
from sms_gateway.domain.engine import TransactionEngine
from sms_gateway.domain.models import ExtractedTransaction, InboundMessage, Verdict
from sms_gateway.infrastructure.clients.notifier import ReviewNotifier
from sms_gateway.infrastructure.database.models import STATUS_PENDING_REVIEW, STATUS_RECORDED
from sms_gateway.infrastructure.database.repositories import TransactionRepository
from sms_gateway.infrastructure.database.session import get_db
from sms_gateway.infrastructure.observability.logging import log_ingestion
from sms_gateway.infrastructure.observability.metrics import (
    record_classification,
    record_persisted_duplicate,
    record_transaction,
)
from sms_gateway.utils.date_utils import to_utc_naive, window_start

router = APIRouter()


def _transaction_schema(transaction: ExtractedTransaction) -> ExtractedTransactionSchema:
    return ExtractedTransactionSchema(
        signed_amount=transaction.signed_amount,
        amount=transaction.amount,
        direction=transaction.direction.value,
        counterparty=transaction.counterparty,
        category=transaction.category,
        fingerprint=transaction.fingerprint,
        reference=transaction.reference,
        source_sender=transaction.source_sender,
        observed_at=transaction.observed_at,
    )


def _received_at(request_body: MessageRequest) -> datetime:
    return to_utc_naive(request_body.received_at or datetime.now(timezone.utc))


def _is_stored_duplicate(repo: TransactionRepository, engine: TransactionEngine, transaction: ExtractedTransaction) -> bool:
    """Second duplicate layer: compare against what storage saw in the last couple of minutes"""
    if is_manual_sender(transaction.source_sender):
        return False
    window = settings.persisted_duplicate_window_seconds
    fallback_window = settings.fallback_duplicate_window_seconds
    recent = repo.find_received_since(
        window_start(transaction.observed_at, window),
        until=transaction.observed_at + timedelta(seconds=window),
    )
    similar = repo.find_similar(
        transaction.source_sender,
        transaction.amount,
        transaction.counterparty,
        window_start(transaction.observed_at, fallback_window),
    )
    return is_persisted_duplicate(
        transaction,
        recent,
        similar=similar,
        reference_extractor=engine.reference_extractor,
        fallback_window=timedelta(seconds=fallback_window),
    )


@router.post("/messages", response_model=MessageResponse)
async def ingest_message(
    request_body: MessageRequest,
    background_tasks: BackgroundTasks,
    request: Request,
    db: Session = Depends(get_db),
    engine: TransactionEngine = Depends(get_engine),
    notifier: ReviewNotifier = Depends(get_notifier),
):
    """
    Classify one inbound SMS and store the resulting transaction.

    Flow:
    1. Run the engine (sender gate, classifier, extraction, receive-time cache)
    2. Check recently stored transactions for a persisted duplicate
    3. Store as recorded (automatic mode) or pending review (manual mode)
    4. In manual mode, notify the review surface in the background
    Rejections are regular 200 responses carrying the verdict.
    """
    start_time = time.time()
    request_id = get_request_id(request)
    result = None

    try:
        result = engine.classify(request_body.sender, request_body.body, _received_at(request_body))
        record_classification(result.verdict.value)

        if not isinstance(result, ExtractedTransaction):
            duration_ms = (time.time() - start_time) * 1000
            log_ingestion(request_id, request_body.sender, result.verdict.value, duration_ms)
            return MessageResponse(verdict=result.verdict.value, reason=result.reason)

        repo = TransactionRepository(db)
        if _is_stored_duplicate(repo, engine, result):
            record_persisted_duplicate()
            logging.info(
                "Duplicate of a stored transaction suppressed",
                extra={"request_id": request_id, "fingerprint": result.fingerprint},
            )
            return MessageResponse(
                verdict=Verdict.REJECTED_DUPLICATE.value,
                reason="persisted",
                transaction=_transaction_schema(result),
            )

        status = STATUS_RECORDED if settings.transaction_mode == "automatic" else STATUS_PENDING_REVIEW
        row = repo.create_transaction(result, status=status)
        db.commit()

        if status == STATUS_PENDING_REVIEW:
            background_tasks.add_task(
                notifier.notify,
                {
                    "transaction_id": str(row.id),
                    "amount": str(result.signed_amount),
                    "direction": result.direction.value,
                    "counterparty": result.counterparty,
                    "category": result.category,
                    "observed_at": result.observed_at.isoformat(),
                },
            )

        duration_ms = (time.time() - start_time) * 1000
        record_transaction(result.direction.value, result.category, status)
        log_ingestion(request_id, request_body.sender, status, duration_ms)

        return MessageResponse(
            verdict=Verdict.ACCEPTED.value,
            transaction_id=str(row.id),
            status=status,
            transaction=_transaction_schema(result),
        )

    except Exception as e:
        db.rollback()
        if isinstance(result, ExtractedTransaction):
            engine.release(result)
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/messages/preview", response_model=MessageResponse)
async def preview_message(
    request_body: MessageRequest,
    engine: TransactionEngine = Depends(get_engine),
):
    """Run the engine without the duplicate cache and without storing anything"""
    result = engine.extract(
        InboundMessage(sender=request_body.sender, body=request_body.body, received_at=_received_at(request_body))
    )
    if not isinstance(result, ExtractedTransaction):
        return MessageResponse(verdict=result.verdict.value, reason=result.reason)
    return MessageResponse(verdict=Verdict.ACCEPTED.value, transaction=_transaction_schema(result))
