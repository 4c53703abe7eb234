"""Data access layer for stored SMS transactions"""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from sms_gateway.domain.duplicates import AMOUNT_TOLERANCE
from sms_gateway.domain.models import Direction, ExtractedTransaction
from sms_gateway.infrastructure.database.models import (
    STATUS_IGNORED,
    STATUS_RECORDED,
    SmsTransaction,
)

MANUAL_ENTRY_SENDER = "Manual Entry"

EDITABLE_FIELDS = ("amount", "direction", "counterparty", "category", "description")


def signed_value(row: SmsTransaction) -> Decimal:
    """Stored amounts are magnitudes; debits read back negative"""
    amount = Decimal(row.amount)
    return -amount if row.direction == Direction.DEBIT.value else amount


class TransactionRepository:
    """Repository for SMS transactions"""

    def __init__(self, db: Session):
        self.db = db

    def create_transaction(
        self,
        transaction: ExtractedTransaction,
        status: str = STATUS_RECORDED,
        description: str = "",
    ) -> SmsTransaction:
        """Persist an engine extraction"""
        row = SmsTransaction(
            amount=transaction.amount,
            direction=transaction.direction.value,
            counterparty=transaction.counterparty,
            category=transaction.category,
            description=description,
            fingerprint=transaction.fingerprint,
            reference=transaction.reference,
            sms_sender=transaction.source_sender,
            sms_body=transaction.source_body,
            observed_at=transaction.observed_at,
            status=status,
        )
        self.db.add(row)
        self.db.flush()  # Get ID without committing
        return row

    def create_manual_transaction(
        self,
        amount: Decimal,
        direction: Direction,
        counterparty: str,
        category: str,
        observed_at: datetime,
        description: str = "",
    ) -> SmsTransaction:
        """Persist a user-entered transaction; it never takes part in duplicate detection"""
        row = SmsTransaction(
            amount=abs(amount),
            direction=direction.value,
            counterparty=counterparty,
            category=category,
            description=description,
            fingerprint=f"MANUAL-{uuid.uuid4().hex}",
            reference="",
            sms_sender=MANUAL_ENTRY_SENDER,
            sms_body=None,
            observed_at=observed_at,
            status=STATUS_RECORDED,
        )
        self.db.add(row)
        self.db.flush()
        return row

    def get_by_id(self, transaction_id: uuid.UUID) -> Optional[SmsTransaction]:
        return self.db.query(SmsTransaction).filter(SmsTransaction.id == transaction_id).first()

    def find_received_since(self, since: datetime, until: Optional[datetime] = None) -> List[SmsTransaction]:
        """Candidates for the persisted duplicate check; ignored rows never count"""
        query = self.db.query(SmsTransaction).filter(
            SmsTransaction.observed_at >= since,
            SmsTransaction.status != STATUS_IGNORED,
        )
        if until is not None:
            query = query.filter(SmsTransaction.observed_at <= until)
        return query.order_by(SmsTransaction.observed_at.desc()).all()

    def find_similar(
        self,
        sender: str,
        amount: Decimal,
        counterparty: str,
        since: datetime,
    ) -> List[SmsTransaction]:
        """Same sender, amount within 0.01 and counterparty, observed since the given time"""
        return (
            self.db.query(SmsTransaction)
            .filter(
                func.lower(SmsTransaction.sms_sender) == sender.lower(),
                func.lower(SmsTransaction.counterparty) == counterparty.lower(),
                SmsTransaction.amount >= abs(amount) - AMOUNT_TOLERANCE,
                SmsTransaction.amount <= abs(amount) + AMOUNT_TOLERANCE,
                SmsTransaction.observed_at >= since,
                SmsTransaction.status != STATUS_IGNORED,
            )
            .all()
        )

    def get_recent(self, limit: int = 50) -> List[SmsTransaction]:
        """Most recent recorded transactions"""
        return (
            self.db.query(SmsTransaction)
            .filter(SmsTransaction.status == STATUS_RECORDED)
            .order_by(SmsTransaction.observed_at.desc())
            .limit(limit)
            .all()
        )

    def get_by_status(self, status: str) -> List[SmsTransaction]:
        return (
            self.db.query(SmsTransaction)
            .filter(SmsTransaction.status == status)
            .order_by(SmsTransaction.observed_at.desc())
            .all()
        )

    def search(self, query: str) -> List[SmsTransaction]:
        """Case-insensitive substring search over counterparty and description"""
        pattern = f"%{query.lower()}%"
        return (
            self.db.query(SmsTransaction)
            .filter(
                SmsTransaction.status == STATUS_RECORDED,
                or_(
                    func.lower(SmsTransaction.counterparty).like(pattern),
                    func.lower(SmsTransaction.description).like(pattern),
                ),
            )
            .order_by(SmsTransaction.observed_at.desc())
            .all()
        )

    def get_categories(self) -> List[str]:
        rows = (
            self.db.query(SmsTransaction.category)
            .filter(SmsTransaction.status == STATUS_RECORDED)
            .distinct()
            .order_by(SmsTransaction.category.asc())
            .all()
        )
        return [category for (category,) in rows]

    def total_by_direction(self, direction: Direction, start: datetime, end: datetime) -> Decimal:
        total = (
            self.db.query(func.coalesce(func.sum(SmsTransaction.amount), 0))
            .filter(
                SmsTransaction.status == STATUS_RECORDED,
                SmsTransaction.direction == direction.value,
                SmsTransaction.observed_at >= start,
                SmsTransaction.observed_at <= end,
            )
            .scalar()
        )
        return Decimal(str(total)).quantize(Decimal("0.01"))

    def list_by_direction(self, direction: Direction, start: datetime, end: datetime) -> List[SmsTransaction]:
        return (
            self.db.query(SmsTransaction)
            .filter(
                SmsTransaction.status == STATUS_RECORDED,
                SmsTransaction.direction == direction.value,
                SmsTransaction.observed_at >= start,
                SmsTransaction.observed_at <= end,
            )
            .order_by(SmsTransaction.observed_at.desc())
            .all()
        )

    def mark_status(self, row: SmsTransaction, status: str) -> SmsTransaction:
        row.status = status
        self.db.flush()
        return row

    def apply_edits(self, row: SmsTransaction, edits: Dict[str, Any]) -> SmsTransaction:
        """Overwrite user-edited fields; None values are left untouched"""
        for field_name in EDITABLE_FIELDS:
            value = edits.get(field_name)
            if value is None:
                continue
            if field_name == "amount":
                value = abs(Decimal(value))
            elif field_name == "direction":
                value = Direction(value).value
            setattr(row, field_name, value)
        self.db.flush()
        return row

    def count_sms_bodies_older_than(self, cutoff: datetime) -> int:
        return (
            self.db.query(SmsTransaction)
            .filter(SmsTransaction.sms_body.isnot(None), SmsTransaction.observed_at < cutoff)
            .count()
        )

    def clear_sms_bodies_older_than(self, cutoff: datetime) -> int:
        """Drop raw SMS text while keeping amount, counterparty, date and category"""
        cleared = (
            self.db.query(SmsTransaction)
            .filter(SmsTransaction.sms_body.isnot(None), SmsTransaction.observed_at < cutoff)
            .update({SmsTransaction.sms_body: None}, synchronize_session=False)
        )
        return cleared
