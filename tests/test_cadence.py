import pytest

from rentgrid.models import Cadence
from rentgrid.services.cadence import normalize_cadence


@pytest.mark.parametrize("raw", ["weekly", "WEEKLY", "Weekly", "week", "every week", "every_week", "  Every-Week "])
def test_weekly_spellings(raw) -> None:
    assert normalize_cadence(raw) == Cadence.WEEKLY


@pytest.mark.parametrize(
    "raw", ["biweekly", "BIWEEKLY", "bi-weekly", "bi_weekly", "bi weekly", "every 2 weeks", "fortnight", "Fortnightly"]
)
def test_biweekly_spellings(raw) -> None:
    assert normalize_cadence(raw) == Cadence.BIWEEKLY


@pytest.mark.parametrize("raw", ["monthly", "MONTHLY", "Month", "every month", "every-month", "mo", "MTH"])
def test_monthly_spellings(raw) -> None:
    assert normalize_cadence(raw) == Cadence.MONTHLY


@pytest.mark.parametrize("raw", ["Monthly rent", "per month", "montly/month", "twice a month"])
def test_anything_mentioning_month_is_monthly(raw) -> None:
    assert normalize_cadence(raw) == Cadence.MONTHLY


@pytest.mark.parametrize("raw", [None, "", "   ", "invalid", "quarterly", "daily", 12])
def test_unrecognized_is_none(raw) -> None:
    assert normalize_cadence(raw) is None


def test_enum_passes_through() -> None:
    assert normalize_cadence(Cadence.BIWEEKLY) is Cadence.BIWEEKLY


def test_biweekly_is_not_mistaken_for_weekly() -> None:
    # Strict matching is whole-label, so "bi weekly" never lands on the weekly set.
    assert normalize_cadence("bi-weekly") != Cadence.WEEKLY
