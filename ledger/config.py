"""Runtime settings read from the environment, plus logging setup."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import IO, List, Optional

_PKG_LOGGER_NAME = "ledger"
_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_configured = False


def _split_origins(raw: Optional[str]) -> List[str]:
    if not raw:
        return []
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


@dataclass(frozen=True)
class Settings:
    data_dir: Path = Path("data")
    env: str = "prod"
    allowed_origins: List[str] = field(default_factory=list)
    log_level: str = "INFO"

    @property
    def is_dev(self) -> bool:
        return self.env in {"dev", "development"}

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            data_dir=Path(os.getenv("BUDGETBUDDY_DATA_DIR", "data")),
            env=os.getenv("BUDGETBUDDY_ENV", "prod").strip().lower(),
            allowed_origins=_split_origins(os.getenv("BUDGETBUDDY_ALLOWED_ORIGINS")),
            log_level=os.getenv("BUDGETBUDDY_LOG_LEVEL", "INFO").strip().upper(),
        )


def configure_logging(level: str = "INFO", *, stream: Optional[IO[str]] = None) -> None:
    """Attach a single stream handler to the ``ledger`` logger; later calls only adjust the level."""
    global _configured
    root = logging.getLogger(_PKG_LOGGER_NAME)
    numeric = getattr(logging, level.upper(), None)
    root.setLevel(numeric if isinstance(numeric, int) else logging.INFO)
    if _configured:
        return
    handler = logging.StreamHandler(stream)
    handler.setFormatter(logging.Formatter(_LOG_FORMAT))
    root.addHandler(handler)
    _configured = True
