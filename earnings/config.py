"""Runtime configuration read from ``TIPTRACK_*`` environment variables."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Mapping, Optional, Tuple

from .periods import WEEK_SCHEME_ANCHORED, WEEK_SCHEMES

logger = logging.getLogger(__name__)


def _decimal_env(env: Mapping[str, str], name: str, default: str) -> Decimal:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return Decimal(default)
    try:
        return Decimal(raw.strip())
    except InvalidOperation:
        logger.warning("Ignoring non-numeric %s=%r; using %s", name, raw, default)
        return Decimal(default)


@dataclass(frozen=True)
class Settings:
    data_dir: Path = Path("data")
    tax_threshold: Decimal = Decimal("1050")
    tax_rate: Decimal = Decimal("0.20")
    default_goal: Decimal = Decimal("500")
    week_scheme: str = WEEK_SCHEME_ANCHORED
    export_prefix: str = "tiptrack_export"
    ledger_key: str = "ledger.json"
    goal_key: str = "weekly_goal.txt"
    env_name: str = "prod"
    allowed_origins: Tuple[str, ...] = ()

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if env is None else env
        scheme = env.get("TIPTRACK_WEEK_SCHEME", WEEK_SCHEME_ANCHORED).strip().lower()
        if scheme not in WEEK_SCHEMES:
            logger.warning("Unknown week scheme %r; using %s", scheme, WEEK_SCHEME_ANCHORED)
            scheme = WEEK_SCHEME_ANCHORED
        default_goal = _decimal_env(env, "TIPTRACK_DEFAULT_GOAL", "500")
        if default_goal <= 0:
            default_goal = Decimal("500")
        origins = env.get("TIPTRACK_ALLOWED_ORIGINS", "")
        return cls(
            data_dir=Path(env.get("TIPTRACK_DATA_DIR", "data")),
            tax_threshold=_decimal_env(env, "TIPTRACK_TAX_THRESHOLD", "1050"),
            tax_rate=_decimal_env(env, "TIPTRACK_TAX_RATE", "0.20"),
            default_goal=default_goal,
            week_scheme=scheme,
            export_prefix=env.get("TIPTRACK_EXPORT_PREFIX", "tiptrack_export"),
            env_name=env.get("TIPTRACK_ENV", "prod").lower(),
            allowed_origins=tuple(
                origin.strip() for origin in origins.split(",") if origin.strip()
            ),
        )
