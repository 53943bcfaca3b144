"""Period generation and payment allocation, bound to one engine mode."""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Sequence

from rentgrid.config import EngineSettings, load_settings
from rentgrid.dates import DateInput
from rentgrid.engine.payment_bucket import (
    allocate_monthly,
    bucket_for_window,
    bucket_monthly,
    bucket_periods,
    build_index,
    payments_for_lease,
)
from rentgrid.engine.periods import generate_periods
from rentgrid.models import (
    BucketedPayments,
    EngineMode,
    Lease,
    MonthlyAllocation,
    Payment,
    PaymentIndex,
    PeriodBalance,
    RentalPeriod,
)


class RentEngine:
    """Holds the mode resolved at startup so callers never pass it per request."""

    def __init__(self, mode: EngineMode = EngineMode.CORRECTED) -> None:
        self.mode = EngineMode(mode)

    @classmethod
    def from_settings(cls, settings: Optional[EngineSettings] = None) -> "RentEngine":
        if settings is None:
            settings = load_settings()
        return cls(settings.mode)

    def generate(self, lease: Lease, anchor_grid: Iterable[DateInput]) -> List[RentalPeriod]:
        return generate_periods(lease, anchor_grid, self.mode)

    def bucket_for_window(
        self,
        lease: Lease,
        window_start: DateInput,
        window_end: DateInput,
        payments: Iterable[Payment],
    ) -> BucketedPayments:
        return bucket_for_window(lease, window_start, window_end, payments, self.mode)

    def bucket_monthly(
        self, lease: Lease, periods: Sequence[RentalPeriod], payments: Iterable[Payment]
    ) -> Dict[str, BucketedPayments]:
        return bucket_monthly(lease, periods, payments, self.mode)

    def allocate_monthly(
        self, lease: Lease, periods: Sequence[RentalPeriod], payments: Iterable[Payment]
    ) -> MonthlyAllocation:
        return allocate_monthly(lease, periods, payments, self.mode)

    def bucket_periods(
        self, lease: Lease, periods: Sequence[RentalPeriod], payments: Iterable[Payment]
    ) -> List[PeriodBalance]:
        return bucket_periods(lease, periods, payments, self.mode)

    def build_index(self, payments: Iterable[Payment]) -> PaymentIndex:
        return build_index(payments)

    def payments_for_lease(self, lease: Lease, index: PaymentIndex) -> List[Payment]:
        return payments_for_lease(lease, index, self.mode)

    def balances(
        self, lease: Lease, anchor_grid: Iterable[DateInput], index: PaymentIndex
    ) -> List[PeriodBalance]:
        """Periods for one lease with its share of an indexed payment pool."""
        periods = self.generate(lease, anchor_grid)
        return self.bucket_periods(lease, periods, self.payments_for_lease(lease, index))


__all__ = [
    "RentEngine",
    "allocate_monthly",
    "bucket_for_window",
    "bucket_monthly",
    "bucket_periods",
    "build_index",
    "generate_periods",
    "payments_for_lease",
]
