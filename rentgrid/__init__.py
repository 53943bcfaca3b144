"""Rent period generation and payment allocation for weekly, biweekly and monthly leases."""

from rentgrid.dates import InvalidDateError
from rentgrid.engine import RentEngine
from rentgrid.models import Cadence, EngineMode, Lease, Payment, RentalPeriod
from rentgrid.services import normalize_cadence

__all__ = [
    "Cadence",
    "EngineMode",
    "InvalidDateError",
    "Lease",
    "Payment",
    "RentEngine",
    "RentalPeriod",
    "normalize_cadence",
]
