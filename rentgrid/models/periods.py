"""Derived billing periods and payment allocation results."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from rentgrid.models.lease import Cadence, Payment


class EngineMode(str, Enum):
    """Algorithm family used by the period generator and payment allocation."""

    LEGACY = "legacy"
    CORRECTED = "corrected"


class RentalPeriod(BaseModel):
    """
    One anchor date of the grid, evaluated for one lease.

    window_start/window_end bound the payments that belong to this period
    (inclusive on both ends). due_at is the end of the anchor day in UTC.
    """

    model_config = ConfigDict(frozen=True)

    anchor_date: date
    anchor_key: str
    month_key: str
    is_active: bool
    window_start: datetime
    window_end: datetime
    due_at: datetime
    expected_amount: Decimal
    cadence: Optional[Cadence] = None


class BucketedPayments(BaseModel):
    """Total and list of the payments that landed in one bucket."""

    model_config = ConfigDict(frozen=True)

    amount_paid: Decimal = Decimal("0")
    payments: Tuple[Payment, ...] = ()

    @classmethod
    def of(cls, payments: Tuple[Payment, ...]) -> "BucketedPayments":
        return cls(amount_paid=sum((p.amount for p in payments), Decimal("0")), payments=payments)


class MonthlyAllocation(BaseModel):
    """Monthly buckets keyed by anchor_key plus the payments no active anchor took."""

    model_config = ConfigDict(frozen=True)

    buckets: Dict[str, BucketedPayments] = Field(default_factory=dict)
    unassigned: Tuple[Payment, ...] = ()

    @property
    def amount_assigned(self) -> Decimal:
        return sum((b.amount_paid for b in self.buckets.values()), Decimal("0"))

    @property
    def amount_unassigned(self) -> Decimal:
        return sum((p.amount for p in self.unassigned), Decimal("0"))


class PeriodBalance(BaseModel):
    """A period with the payments allocated to it."""

    model_config = ConfigDict(frozen=True)

    period: RentalPeriod
    amount_paid: Decimal = Decimal("0")
    payments: Tuple[Payment, ...] = ()

    @property
    def anchor_key(self) -> str:
        return self.period.anchor_key


@dataclass(frozen=True)
class PaymentIndex:
    """
    Payment pool grouped once so many leases can share it.

    by_lease_id holds payments carrying a lease_id; by_property_tenant holds
    every payment with both property_id and tenant_id, keyed by that pair.
    """

    by_lease_id: Dict[str, Tuple[Payment, ...]] = field(default_factory=dict)
    by_property_tenant: Dict[Tuple[str, str], Tuple[Payment, ...]] = field(default_factory=dict)
    size: int = 0
