"""Pydantic schemas for API request/response validation"""

from datetime import datetime
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

DirectionValue = Literal["debit", "credit"]


class MessageRequest(BaseModel):
    """Request body for POST /v1/messages"""

    sender: str = Field(..., description="SMS originator id, e.g. VM-HDFCBK")
    body: str = Field(..., description="Raw SMS text")
    received_at: Optional[datetime] = Field(None, description="Receive time, defaults to now")


class ExtractedTransactionSchema(BaseModel):
    """Engine output for an accepted message"""

    signed_amount: Decimal
    amount: Decimal
    direction: DirectionValue
    counterparty: str
    category: str
    fingerprint: str
    reference: str
    source_sender: str
    observed_at: datetime


class MessageResponse(BaseModel):
    """Response for POST /v1/messages and /v1/messages/preview"""

    verdict: str
    reason: str = ""
    transaction_id: Optional[str] = None
    status: Optional[str] = None
    transaction: Optional[ExtractedTransactionSchema] = None


class TransactionItem(BaseModel):
    """Stored transaction with the amount signed by direction"""

    transaction_id: str
    amount: Decimal
    direction: DirectionValue
    counterparty: str
    category: str
    description: str
    reference: str
    sms_sender: Optional[str] = None
    status: str
    observed_at: datetime


class TransactionListResponse(BaseModel):
    transactions: List[TransactionItem]


class ManualTransactionRequest(BaseModel):
    """Request body for POST /v1/transactions"""

    amount: Decimal = Field(..., gt=0, description="Magnitude of the transaction")
    direction: DirectionValue = "debit"
    counterparty: str = Field(..., min_length=1)
    category: Optional[str] = Field(None, description="Category id or name, derived from counterparty when omitted")
    description: str = ""
    observed_at: Optional[datetime] = None


class ApproveRequest(BaseModel):
    """Optional user edits applied when approving a pending transaction"""

    amount: Optional[Decimal] = Field(None, gt=0)
    direction: Optional[DirectionValue] = None
    counterparty: Optional[str] = Field(None, min_length=1)
    category: Optional[str] = None
    description: Optional[str] = None


class CategoryItem(BaseModel):
    id: str
    name: str


class CategoriesResponse(BaseModel):
    """Response for GET /v1/categories"""

    taxonomy: List[CategoryItem]
    in_use: List[str]


class MonthlySummaryResponse(BaseModel):
    """Response for GET /v1/summary/monthly"""

    year: int
    month: int
    total_spending: Decimal
    base_income: Decimal
    credited_income: Decimal
    total_income: Decimal
    income_transactions: List[TransactionItem]


class CleanupResponse(BaseModel):
    """Response for POST /v1/maintenance/cleanup"""

    cutoff: datetime
    eligible: int
    cleared: int
