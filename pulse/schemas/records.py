from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Stored records (immutable once created)

class TransactionRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    amount: float
    currency: str
    method: str
    item: str
    timestamp: datetime

    def to_event(self) -> Dict[str, Any]:
        """Payload broadcast to live subscribers as a ``tx`` event"""
        return self.model_dump(mode="json", include={"amount", "item", "method", "timestamp"})


class ReservationRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    phone: str
    persons: int
    date: str
    time: str
    table: str
    notes: str
    timestamp: datetime
    status: str

    def to_event(self) -> Dict[str, Any]:
        """Payload broadcast to live subscribers as a ``reservation`` event"""
        return self.model_dump(
            mode="json",
            include={"id", "name", "persons", "date", "time", "table", "timestamp"},
        )


# Inbound bodies

def _reject_bool(v):
    # JSON true/false would otherwise coerce to 1/0
    if isinstance(v, bool):
        raise ValueError("booleans are not numbers")
    return v


class TransactionIn(BaseModel):
    amount: float = Field(..., gt=0, allow_inf_nan=False, description="Sale amount")
    currency: Optional[str] = Field(None, description="ISO or local currency label")
    method: Optional[str] = Field(None, description="Payment method")
    item: Optional[str] = Field(None, description="Item label")

    @field_validator("amount", mode="before")
    @classmethod
    def _no_bool_amount(cls, v):
        return _reject_bool(v)


class ReservationIn(BaseModel):
    name: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=1)
    persons: int = Field(..., gt=0, description="Party size")
    date: Optional[str] = Field(None, description="YYYY-MM-DD, defaults to today (UTC)")
    time: str = Field(..., min_length=1, description="Zero-padded HH:MM")
    table: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("persons", mode="before")
    @classmethod
    def _no_bool_persons(cls, v):
        return _reject_bool(v)

    @field_validator("name", "phone", "time", mode="before")
    @classmethod
    def _strip(cls, v):
        # Terminals send phone numbers as JSON numbers
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            v = str(v)
        if isinstance(v, str):
            return v.strip()
        return v


# Aggregates

class SalesSummary(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    total_amount: float = Field(0, alias="totalAmount")
    transaction_count: int = Field(0, alias="transactionCount")
    date: str

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)
