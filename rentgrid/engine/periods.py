"""
Rental period generation.

One RentalPeriod per anchor date of the caller's weekly grid, in grid order.
Which anchors are billable depends on the lease cadence:

- weekly: every anchor inside the lease range;
- biweekly: every other anchor, counted in 14-day steps from the first
  billing weekday on/after lease start;
- monthly: exactly one anchor per calendar month, chosen against the
  contractual due day.

Weekly and biweekly periods collect payments from the trailing 7 days ending
on the anchor. Monthly periods collect payments from the whole calendar month.
"""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional, Set, Tuple

from rentgrid.dates import (
    DateInput,
    closest_to,
    day_key,
    days_in_month,
    end_of_day,
    end_of_month,
    first_weekday_on_or_after,
    month_key,
    start_of_day,
    start_of_month,
    to_calendar_date,
)
from rentgrid.models import Cadence, EngineMode, Lease, RentalPeriod
from rentgrid.services.cadence import normalize_cadence

logger = logging.getLogger(__name__)

BIWEEKLY_STEP_DAYS = 14
TRAILING_WINDOW_DAYS = 6


def select_monthly_anchor(month_anchors: List[date], due_day: int) -> date:
    """
    Pick the billable anchor of one calendar month.

    Precedence: an anchor on the due day; else the latest anchor before the
    due day; else (every anchor is after the due day) the anchor closest to it.
    """
    if not month_anchors:
        raise ValueError("month_anchors must not be empty")
    for a in month_anchors:
        if a.day == due_day:
            return a
    on_or_before = [a for a in month_anchors if a.day <= due_day]
    if on_or_before:
        return max(on_or_before)
    first = month_anchors[0]
    target = date(first.year, first.month, min(due_day, days_in_month(first.year, first.month)))
    return closest_to(target, month_anchors)


def _month_overlaps_lease(lease: Lease, year: int, month: int) -> bool:
    month_first = date(year, month, 1)
    month_last = date(year, month, days_in_month(year, month))
    if month_last < lease.lease_start:
        return False
    return lease.lease_end is None or month_first <= lease.lease_end


def _group_by_month(anchors: Iterable[date]) -> Dict[Tuple[int, int], List[date]]:
    by_month: Dict[Tuple[int, int], List[date]] = {}
    for a in anchors:
        by_month.setdefault((a.year, a.month), []).append(a)
    return by_month


def _biweekly_reference(lease: Lease, anchors: List[date]) -> Optional[date]:
    """Earliest grid date on/after lease start that sits on the lease's 14-day rhythm."""
    first_occurrence = first_weekday_on_or_after(lease.lease_start, anchors[0].weekday())
    for a in sorted(anchors):
        if a >= lease.lease_start and (a - first_occurrence).days % BIWEEKLY_STEP_DAYS == 0:
            return a
    return None


def _on_step(anchor: date, reference: date) -> bool:
    offset = (anchor - reference).days
    return offset >= 0 and offset % BIWEEKLY_STEP_DAYS == 0


def _active_anchors(lease: Lease, cadence: Optional[Cadence], anchors: List[date]) -> Set[date]:
    if cadence == Cadence.WEEKLY:
        return {a for a in anchors if lease.covers(a)}

    if cadence == Cadence.BIWEEKLY:
        reference = _biweekly_reference(lease, anchors)
        if reference is None:
            return set()
        return {a for a in anchors if lease.covers(a) and _on_step(a, reference)}

    if cadence == Cadence.MONTHLY:
        active: Set[date] = set()
        for (year, month), month_anchors in _group_by_month(anchors).items():
            if not _month_overlaps_lease(lease, year, month):
                continue
            chosen = select_monthly_anchor(month_anchors, lease.due_day_of_month)
            logger.debug(
                "[periods] lease=%s month=%04d-%02d due_day=%d anchors=%s active=%s",
                lease.id,
                year,
                month,
                lease.due_day_of_month,
                [a.isoformat() for a in month_anchors],
                chosen.isoformat(),
            )
            active.add(chosen)
        return active

    return set()


def _legacy_monthly_occurrence(anchor: date, due_day: int) -> date:
    """Billing weekday of the anchor's whole calendar month closest to the due day."""
    first = first_weekday_on_or_after(date(anchor.year, anchor.month, 1), anchor.weekday())
    last_day = days_in_month(anchor.year, anchor.month)
    occurrences = []
    d = first
    while d.month == anchor.month:
        occurrences.append(d)
        d += timedelta(days=7)
    target = date(anchor.year, anchor.month, min(due_day, last_day))
    return closest_to(target, occurrences)


def _legacy_active_anchors(lease: Lease, cadence: Optional[Cadence], anchors: List[date]) -> Set[date]:
    active: Set[date] = set()
    for a in anchors:
        if not lease.covers(a):
            continue
        if cadence == Cadence.WEEKLY:
            active.add(a)
        elif cadence == Cadence.BIWEEKLY:
            if _on_step(a, first_weekday_on_or_after(lease.lease_start, a.weekday())):
                active.add(a)
        elif cadence == Cadence.MONTHLY:
            if a == _legacy_monthly_occurrence(a, lease.due_day_of_month):
                active.add(a)
    return active


def _build_period(lease: Lease, cadence: Optional[Cadence], anchor: date, is_active: bool) -> RentalPeriod:
    if cadence == Cadence.MONTHLY:
        window_start = start_of_month(anchor)
        window_end = end_of_month(anchor)
    else:
        window_start = start_of_day(anchor - timedelta(days=TRAILING_WINDOW_DAYS))
        window_end = end_of_day(anchor)
    return RentalPeriod(
        anchor_date=anchor,
        anchor_key=day_key(anchor),
        month_key=month_key(anchor),
        is_active=is_active,
        window_start=window_start,
        window_end=window_end,
        due_at=end_of_day(anchor),
        expected_amount=lease.rent_amount,
        cadence=cadence,
    )


def generate_periods(
    lease: Lease,
    anchor_grid: Iterable[DateInput],
    mode: EngineMode = EngineMode.CORRECTED,
) -> List[RentalPeriod]:
    """
    Evaluate every anchor of the grid for this lease.

    Returns one period per anchor in the order supplied. Anchors that cannot be
    read as dates raise InvalidDateError before any period is built.
    """
    mode = EngineMode(mode)
    anchors = [to_calendar_date(a) for a in anchor_grid]
    if not anchors:
        return []

    cadence = normalize_cadence(lease.cadence)
    if mode == EngineMode.LEGACY:
        active = _legacy_active_anchors(lease, cadence, anchors)
    else:
        active = _active_anchors(lease, cadence, anchors)

    logger.debug(
        "[periods] lease=%s cadence=%r->%s mode=%s range=%s..%s grid=%s..%s anchors=%d active=%d",
        lease.id,
        lease.cadence,
        cadence.value if cadence else None,
        mode.value,
        lease.lease_start.isoformat(),
        lease.lease_end.isoformat() if lease.lease_end else "open",
        anchors[0].isoformat(),
        anchors[-1].isoformat(),
        len(anchors),
        len(active),
    )
    return [_build_period(lease, cadence, a, a in active) for a in anchors]
