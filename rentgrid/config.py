"""
Runtime settings.

Read once at process startup and handed to RentEngine; the engine functions
themselves never look at the environment.

USE_CORRECTED_LOGIC      true/false; unset means corrected
RENTGRID_DEBUG_PAYMENTS  true enables DEBUG logging for the rentgrid loggers
"""

from __future__ import annotations

import logging
import os
from typing import Mapping, Optional

from pydantic import BaseModel

from rentgrid.models import EngineMode

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}


class EngineSettings(BaseModel):
    mode: EngineMode = EngineMode.CORRECTED
    debug_payments: bool = False


def _env_flag(environ: Mapping[str, str], name: str, default: bool) -> bool:
    raw = (environ.get(name) or "").strip().lower()
    if not raw:
        return default
    if raw in _TRUTHY:
        return True
    if raw in _FALSY:
        return False
    raise ValueError(f"{name} must be true or false, got {raw!r}")


def load_settings(environ: Optional[Mapping[str, str]] = None) -> EngineSettings:
    env = os.environ if environ is None else environ
    corrected = _env_flag(env, "USE_CORRECTED_LOGIC", True)
    return EngineSettings(
        mode=EngineMode.CORRECTED if corrected else EngineMode.LEGACY,
        debug_payments=_env_flag(env, "RENTGRID_DEBUG_PAYMENTS", False),
    )


def configure_logging(settings: EngineSettings) -> None:
    """Raise the package loggers to DEBUG when payment debugging is on.

    With debugging off the level the host application set is left alone.
    """
    logger = logging.getLogger("rentgrid")
    if settings.debug_payments:
        logger.setLevel(logging.DEBUG)
        logger.info("[config] payment debug logging enabled mode=%s", settings.mode.value)
