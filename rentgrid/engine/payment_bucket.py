"""
Payment allocation.

Assigns payments from a shared pool to the periods of one lease. A payment
belongs to a lease when its lease_id equals the lease id; only payments with
no lease_id fall back to matching on property_id + tenant_id. A payment that
names a lease is never reconsidered under the fallback, so it cannot be
counted for two leases sharing a property and tenant.

Weekly and biweekly periods take payments by window containment of the payment
UTC instant, bounds inclusive. Monthly periods take payments by the calendar
month of the payment, assigned to that month's single active anchor.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Sequence, Tuple

from rentgrid.dates import DateInput, month_key, to_utc_instant
from rentgrid.models import (
    BucketedPayments,
    Cadence,
    EngineMode,
    Lease,
    MonthlyAllocation,
    Payment,
    PaymentIndex,
    PeriodBalance,
    RentalPeriod,
)
from rentgrid.services.cadence import normalize_cadence

logger = logging.getLogger(__name__)


def _fallback_matches(lease: Lease, payment: Payment) -> bool:
    if not lease.property_id or not lease.tenant_id:
        return False
    return payment.property_id == lease.property_id and payment.tenant_id == lease.tenant_id


def payment_matches_lease(lease: Lease, payment: Payment, mode: EngineMode = EngineMode.CORRECTED) -> bool:
    """Apply exactly one matching clause: lease id when present, else property + tenant."""
    if mode == EngineMode.LEGACY:
        return payment.lease_id == lease.id or _fallback_matches(lease, payment)
    if payment.lease_id:
        return payment.lease_id == lease.id
    return _fallback_matches(lease, payment)


def bucket_for_window(
    lease: Lease,
    window_start: DateInput,
    window_end: DateInput,
    payments: Iterable[Payment],
    mode: EngineMode = EngineMode.CORRECTED,
) -> BucketedPayments:
    """Sum the lease's payments dated inside [window_start, window_end]."""
    mode = EngineMode(mode)
    start = to_utc_instant(window_start)
    end = to_utc_instant(window_end)
    matched = tuple(
        p
        for p in payments
        if payment_matches_lease(lease, p, mode) and start <= to_utc_instant(p.payment_date) <= end
    )
    bucket = BucketedPayments.of(matched)
    logger.debug(
        "[bucket] lease=%s window=%s..%s mode=%s matched=%d amount=%s",
        lease.id,
        start.isoformat(),
        end.isoformat(),
        mode.value,
        len(matched),
        bucket.amount_paid,
    )
    return bucket


def active_by_month(periods: Iterable[RentalPeriod]) -> Dict[str, str]:
    """month_key -> anchor_key of the active period in that month."""
    return {p.month_key: p.anchor_key for p in periods if p.is_active}


def allocate_monthly(
    lease: Lease,
    periods: Sequence[RentalPeriod],
    payments: Iterable[Payment],
    mode: EngineMode = EngineMode.CORRECTED,
) -> MonthlyAllocation:
    """
    Assign each matching payment to the active anchor of its own payment month.

    Every period gets a bucket, empty when nothing lands there. Matching
    payments dated in a month without an active anchor in view are reported
    as unassigned rather than moved to a neighbouring month.
    """
    mode = EngineMode(mode)
    payments = list(payments)
    if mode == EngineMode.LEGACY:
        return MonthlyAllocation(
            buckets={
                p.anchor_key: bucket_for_window(lease, p.window_start, p.window_end, payments, mode)
                for p in periods
            }
        )

    active = active_by_month(periods)
    assigned: Dict[str, List[Payment]] = {p.anchor_key: [] for p in periods}
    unassigned: List[Payment] = []
    for payment in payments:
        if not payment_matches_lease(lease, payment, mode):
            continue
        mk = month_key(payment.payment_date)
        anchor_key = active.get(mk)
        if anchor_key is None:
            logger.debug("[bucket] lease=%s payment=%s month=%s has no active anchor in view", lease.id, payment.id, mk)
            unassigned.append(payment)
            continue
        assigned[anchor_key].append(payment)
        logger.debug(
            "[bucket] lease=%s payment=%s amount=%s month=%s -> %s", lease.id, payment.id, payment.amount, mk, anchor_key
        )

    return MonthlyAllocation(
        buckets={key: BucketedPayments.of(tuple(items)) for key, items in assigned.items()},
        unassigned=tuple(unassigned),
    )


def bucket_monthly(
    lease: Lease,
    periods: Sequence[RentalPeriod],
    payments: Iterable[Payment],
    mode: EngineMode = EngineMode.CORRECTED,
) -> Dict[str, BucketedPayments]:
    """anchor_key -> bucket for a monthly lease; see allocate_monthly."""
    return allocate_monthly(lease, periods, payments, mode).buckets


def bucket_periods(
    lease: Lease,
    periods: Sequence[RentalPeriod],
    payments: Iterable[Payment],
    mode: EngineMode = EngineMode.CORRECTED,
) -> List[PeriodBalance]:
    """
    Allocate payments to every period of one lease, dispatching on cadence.

    Monthly leases use month assignment; everything else buckets each period
    by its own window.
    """
    mode = EngineMode(mode)
    payments = list(payments)
    if normalize_cadence(lease.cadence) == Cadence.MONTHLY:
        buckets = bucket_monthly(lease, periods, payments, mode)
    else:
        buckets = {
            p.anchor_key: bucket_for_window(lease, p.window_start, p.window_end, payments, mode) for p in periods
        }
    return [
        PeriodBalance(
            period=p,
            amount_paid=buckets[p.anchor_key].amount_paid,
            payments=buckets[p.anchor_key].payments,
        )
        for p in periods
    ]


def build_index(payments: Iterable[Payment]) -> PaymentIndex:
    """Group the pool by lease_id and by (property_id, tenant_id) in one pass."""
    by_lease_id: Dict[str, List[Payment]] = {}
    by_property_tenant: Dict[Tuple[str, str], List[Payment]] = {}
    size = 0
    for payment in payments:
        size += 1
        if payment.lease_id:
            by_lease_id.setdefault(payment.lease_id, []).append(payment)
        if payment.property_id and payment.tenant_id:
            by_property_tenant.setdefault((payment.property_id, payment.tenant_id), []).append(payment)
    return PaymentIndex(
        by_lease_id={k: tuple(v) for k, v in by_lease_id.items()},
        by_property_tenant={k: tuple(v) for k, v in by_property_tenant.items()},
        size=size,
    )


def payments_for_lease(
    lease: Lease,
    index: PaymentIndex,
    mode: EngineMode = EngineMode.CORRECTED,
) -> List[Payment]:
    """Payments of the pool that belong to this lease, lease-id matches first."""
    mode = EngineMode(mode)
    result: List[Payment] = list(index.by_lease_id.get(lease.id, ()))
    if not lease.property_id or not lease.tenant_id:
        return result
    for payment in index.by_property_tenant.get((lease.property_id, lease.tenant_id), ()):
        if mode == EngineMode.LEGACY:
            # Old behaviour: only skips payments already taken by lease id.
            if payment.lease_id != lease.id:
                result.append(payment)
        elif not payment.lease_id:
            result.append(payment)
    return result
