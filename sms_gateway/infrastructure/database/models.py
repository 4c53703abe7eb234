"""SQLAlchemy ORM models for stored SMS transactions"""

import uuid
from sqlalchemy import Column, DateTime, Index, Numeric, Text, Uuid
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()

STATUS_RECORDED = "recorded"
STATUS_PENDING_REVIEW = "pending_review"
STATUS_IGNORED = "ignored"


class SmsTransaction(Base):
    """Transaction extracted from an SMS or entered manually"""

    __tablename__ = "sms_transaction"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    amount = Column(Numeric(14, 2), nullable=False)  # magnitude, sign comes from direction
    direction = Column(Text, nullable=False)
    counterparty = Column(Text, nullable=False)
    category = Column(Text, nullable=False, default="Other")
    description = Column(Text, nullable=False, default="")
    fingerprint = Column(Text, nullable=False, index=True)
    reference = Column(Text, nullable=False, default="")
    sms_sender = Column(Text, nullable=True)
    sms_body = Column(Text, nullable=True)  # cleared after the retention period
    observed_at = Column(DateTime, nullable=False, index=True)
    status = Column(Text, nullable=False, default=STATUS_RECORDED, index=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())

    __table_args__ = (Index("ix_sms_transaction_sender_observed", "sms_sender", "observed_at"),)
