"""Domain models for leases, payments and derived billing periods."""

from rentgrid.models.lease import Cadence, Lease, Payment
from rentgrid.models.periods import (
    BucketedPayments,
    EngineMode,
    MonthlyAllocation,
    PaymentIndex,
    PeriodBalance,
    RentalPeriod,
)

__all__ = [
    "BucketedPayments",
    "Cadence",
    "EngineMode",
    "Lease",
    "MonthlyAllocation",
    "Payment",
    "PaymentIndex",
    "PeriodBalance",
    "RentalPeriod",
]
