"""
Cadence normalization.

Lease rows carry free-text cadence labels ("Monthly", "bi-weekly",
"every month", "mo", ...). Everything downstream works on the three
canonical Cadence values; None means no cadence signal at all and the
period generator bills nothing for it.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Optional

from rentgrid.models.lease import Cadence

logger = logging.getLogger(__name__)

_WEEKLY = frozenset({"weekly", "week", "every week"})
_BIWEEKLY = frozenset({"biweekly", "bi weekly", "every 2 weeks", "fortnight", "fortnightly"})
_MONTHLY = frozenset({"monthly", "month", "every month", "mo", "mth"})

_SEPARATORS = re.compile(r"[-_\s]+")


def _clean(raw: Any) -> str:
    return _SEPARATORS.sub(" ", str(raw).strip().lower()).strip()


def normalize_cadence(raw: Any) -> Optional[Cadence]:
    """Map a raw cadence label to weekly, biweekly or monthly; None if unrecognized."""
    if raw is None:
        return None
    if isinstance(raw, Cadence):
        return raw
    s = _clean(raw)
    if not s:
        return None
    if s in _WEEKLY:
        return Cadence.WEEKLY
    if s in _BIWEEKLY:
        return Cadence.BIWEEKLY
    if s in _MONTHLY:
        return Cadence.MONTHLY
    # Anything mentioning "month" bills monthly rather than not at all.
    if "month" in s:
        logger.debug("[cadence] loose monthly match raw=%r", raw)
        return Cadence.MONTHLY
    logger.debug("[cadence] unrecognized raw=%r", raw)
    return None
