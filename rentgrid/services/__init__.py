"""Input services."""

from rentgrid.services.cadence import normalize_cadence

__all__ = [
    "normalize_cadence",
]
