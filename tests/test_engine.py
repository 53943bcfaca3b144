import logging
from datetime import date, timedelta
from decimal import Decimal

import pytest

from rentgrid import InvalidDateError, Lease, Payment, RentEngine
from rentgrid.models import EngineMode


def _grid(first: date, count: int) -> list:
    return [(first + timedelta(days=7 * i)).isoformat() for i in range(count)]


def _leases():
    return [
        Lease(id="weekly", property_id="p1", tenant_id="t1", lease_start="2024-07-15",
              lease_end="2024-09-30", cadence="Weekly", rent_amount=500),
        Lease(id="monthly", property_id="p2", tenant_id="t2", lease_start="2024-07-01",
              cadence="monthly", rent_amount=2000, due_day_of_month=15),
        # Same property and tenant as "weekly" but a different lease.
        Lease(id="parking", property_id="p1", tenant_id="t1", lease_start="2024-07-01",
              cadence="monthly", rent_amount=75, due_day_of_month=1),
    ]


def _pool():
    return [
        Payment(id="w1", lease_id="weekly", property_id="p1", tenant_id="t1", payment_date="2024-07-19", amount=500),
        Payment(id="w2", property_id="p1", tenant_id="t1", payment_date="2024-07-25", amount=500),
        Payment(id="m1", lease_id="monthly", payment_date="2024-07-10", amount=1000),
        Payment(id="m2", property_id="p2", tenant_id="t2", payment_date="2024-07-28", amount=1000),
        Payment(id="k1", lease_id="parking", property_id="p1", tenant_id="t1", payment_date="2024-07-02", amount=75),
    ]


def test_balances_for_every_lease_from_shared_index() -> None:
    engine = RentEngine()
    index = engine.build_index(_pool())
    grid = _grid(date(2024, 7, 5), 4)  # Jul 5 .. Jul 26

    weekly = engine.balances(_leases()[0], grid, index)
    assert {b.anchor_key: b.amount_paid for b in weekly if b.amount_paid} == {
        "2024-07-19": Decimal("500"),
        "2024-07-26": Decimal("500"),
    }
    assert [b.period.is_active for b in weekly] == [False, False, True, True]

    monthly = engine.balances(_leases()[1], grid, index)
    assert {b.anchor_key: b.amount_paid for b in monthly if b.amount_paid} == {"2024-07-12": Decimal("2000")}

    # w2 has no lease id and matches the parking lease's property and tenant
    # too; shared property/tenant leases are exactly what lease_id resolves.
    parking = engine.balances(_leases()[2], grid, index)
    assert {b.anchor_key: b.amount_paid for b in parking if b.amount_paid} == {"2024-07-05": Decimal("575")}


def test_legacy_engine_counts_payment_for_both_leases() -> None:
    lease = _leases()[2]
    grid = _grid(date(2024, 7, 5), 4)
    corrected = RentEngine(EngineMode.CORRECTED)
    legacy = RentEngine("legacy")
    pool = _pool()
    corrected_total = sum(b.amount_paid for b in corrected.bucket_periods(lease, corrected.generate(lease, grid), pool))
    legacy_total = sum(b.amount_paid for b in legacy.bucket_periods(lease, legacy.generate(lease, grid), pool))
    assert corrected_total == Decimal("575")
    assert legacy_total > corrected_total


def test_engine_methods_bind_mode() -> None:
    lease = _leases()[1]
    grid = ["2024-08-02", "2024-08-09"]
    assert [p.is_active for p in RentEngine(EngineMode.LEGACY).generate(lease, grid)] == [False, False]
    corrected = RentEngine(EngineMode.CORRECTED)
    periods = corrected.generate(lease, grid)
    assert [p.is_active for p in periods] == [False, True]
    allocation = corrected.allocate_monthly(lease, periods, _pool())
    assert allocation.amount_assigned == Decimal("0")
    assert {p.id for p in allocation.unassigned} == {"m1", "m2"}
    assert corrected.bucket_monthly(lease, periods, _pool()) == allocation.buckets


def test_engine_bucket_for_window() -> None:
    engine = RentEngine()
    bucket = engine.bucket_for_window(_leases()[0], "2024-07-20", "2024-07-26T23:59:59Z", _pool())
    assert [p.id for p in bucket.payments] == ["w2"]


def test_engine_propagates_invalid_dates() -> None:
    with pytest.raises(InvalidDateError):
        RentEngine().generate(_leases()[0], ["2024-07-19", "2024-13-40"])
    with pytest.raises(InvalidDateError):
        RentEngine().bucket_for_window(_leases()[0], "garbage", "2024-07-26", [])


def test_debug_logging_names_the_lease(caplog) -> None:
    with caplog.at_level(logging.DEBUG, logger="rentgrid"):
        RentEngine().generate(_leases()[1], _grid(date(2024, 7, 5), 4))
    assert any("[periods] lease=monthly" in r.getMessage() for r in caplog.records)
