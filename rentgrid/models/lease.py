"""
Lease and payment inputs.

Rows arrive from the lease and payment fetch collaborators with their stored
column names (lease_start_date, rent_cadence, rent, rent_due_day, ...) or in
camelCase from API payloads; both spellings validate into the same model.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Mapping, Optional, Type, TypeVar

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from rentgrid.dates import InvalidDateError, to_calendar_date, to_utc_instant

RowModel = TypeVar("RowModel", bound=BaseModel)


class Cadence(str, Enum):
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"


def _coerce_id(v: Any) -> Optional[str]:
    """Database ids may be ints or uuids; blanks mean no reference."""
    if v is None:
        return None
    s = str(v).strip()
    return s or None


def _validate_row(cls: Type[RowModel], row: Mapping[str, Any]) -> RowModel:
    """
    Validate a fetched row, surfacing bad dates as InvalidDateError.

    Any other field problem is raised as the pydantic ValidationError.
    """
    try:
        return cls.model_validate(row)
    except ValidationError as e:
        for item in e.errors():
            cause = (item.get("ctx") or {}).get("error")
            if isinstance(cause, InvalidDateError):
                raise cause from e
        raise


class Lease(BaseModel):
    """
    A lease as consumed by the period generator and payment allocation.

    Constructing it directly reports bad fields, dates included, as a pydantic
    ValidationError; Lease.from_row raises InvalidDateError for bad dates.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    id: str
    property_id: Optional[str] = Field(default=None, validation_alias=AliasChoices("property_id", "propertyId"))
    tenant_id: Optional[str] = Field(default=None, validation_alias=AliasChoices("tenant_id", "tenantId"))
    lease_start: date = Field(validation_alias=AliasChoices("lease_start", "lease_start_date", "leaseStart"))
    lease_end: Optional[date] = Field(
        default=None, validation_alias=AliasChoices("lease_end", "lease_end_date", "leaseEnd")
    )
    # Raw label; normalized by services.cadence before use.
    cadence: str = Field(default="", validation_alias=AliasChoices("cadence", "rent_cadence", "rentCadence"))
    rent_amount: Decimal = Field(gt=0, validation_alias=AliasChoices("rent_amount", "rent", "rentAmount"))
    due_day_of_month: int = Field(
        default=1,
        ge=1,
        le=31,
        validation_alias=AliasChoices("due_day_of_month", "rent_due_day", "dueDayOfMonth"),
        description="Contractual due day; only used for monthly cadence",
    )

    @field_validator("id", mode="before")
    @classmethod
    def coerce_lease_id(cls, v: Any) -> Optional[str]:
        return _coerce_id(v)

    @field_validator("property_id", "tenant_id", mode="before")
    @classmethod
    def coerce_references(cls, v: Any) -> Optional[str]:
        return _coerce_id(v)

    @field_validator("lease_start", "lease_end", mode="before")
    @classmethod
    def floor_to_utc_date(cls, v: Any) -> Any:
        if v is None or (isinstance(v, str) and not v.strip()):
            return None
        return to_calendar_date(v)

    @field_validator("cadence", mode="before")
    @classmethod
    def coerce_cadence(cls, v: Any) -> str:
        if v is None:
            return ""
        if isinstance(v, Enum):
            return str(v.value)
        return str(v)

    @field_validator("due_day_of_month", mode="before")
    @classmethod
    def default_due_day(cls, v: Any) -> Any:
        if v is None or v == "":
            return 1
        return v

    @model_validator(mode="after")
    def validate_range(self) -> "Lease":
        if self.lease_end is not None and self.lease_end < self.lease_start:
            raise ValueError("lease_end must be on or after lease_start")
        return self

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Lease":
        return _validate_row(cls, row)

    def covers(self, d: date) -> bool:
        """True when d falls in [lease_start, lease_end]; open-ended leases never end."""
        if d < self.lease_start:
            return False
        return self.lease_end is None or d <= self.lease_end


class Payment(BaseModel):
    """
    A received payment. Payments without lease_id fall back to property + tenant.

    Bad dates raise InvalidDateError through Payment.from_row and a pydantic
    ValidationError through direct construction.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    id: str
    lease_id: Optional[str] = Field(default=None, validation_alias=AliasChoices("lease_id", "leaseId"))
    property_id: Optional[str] = Field(default=None, validation_alias=AliasChoices("property_id", "propertyId"))
    tenant_id: Optional[str] = Field(default=None, validation_alias=AliasChoices("tenant_id", "tenantId"))
    payment_date: datetime = Field(validation_alias=AliasChoices("payment_date", "paymentDate"))
    amount: Decimal = Field(gt=0)
    payment_type: str = Field(default="rent", validation_alias=AliasChoices("payment_type", "type", "paymentType"))
    notes: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def coerce_payment_id(cls, v: Any) -> Optional[str]:
        return _coerce_id(v)

    @field_validator("lease_id", "property_id", "tenant_id", mode="before")
    @classmethod
    def coerce_references(cls, v: Any) -> Optional[str]:
        return _coerce_id(v)

    @field_validator("payment_date", mode="before")
    @classmethod
    def to_utc(cls, v: Any) -> datetime:
        return to_utc_instant(v)

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Payment":
        return _validate_row(cls, row)

    @property
    def paid_on(self) -> date:
        """UTC calendar date of the payment."""
        return to_calendar_date(self.payment_date)
