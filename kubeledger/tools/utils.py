"""Small shared utilities for KubeLedger.

Helpers for JSON I/O, Rich printing, timestamps and numeric bounds.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from rich.console import Console

logger = logging.getLogger("kubeledger")

# ---------------------------------------------------------------------------
# Rich console
# ---------------------------------------------------------------------------

console = Console(stderr=True)


def rprint(msg: str, *, style: str = "") -> None:
    """Print with Rich styling to stderr."""
    console.print(msg, style=style)


# ---------------------------------------------------------------------------
# JSON helpers
# ---------------------------------------------------------------------------

def write_json(data: Any, path: str | Path) -> Path:
    """Write *data* as pretty-printed JSON and return the resolved path."""
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    with open(p, "w", encoding="utf-8") as fh:
        json.dump(data, fh, indent=2, default=str)
    return p


def read_json(path: str | Path) -> Any:
    """Read JSON from *path* and return the parsed object."""
    with open(path, encoding="utf-8") as fh:
        return json.load(fh)


# ---------------------------------------------------------------------------
# Timestamp helpers
# ---------------------------------------------------------------------------

def utcnow_iso() -> str:
    """Return the current UTC time as an ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


# ---------------------------------------------------------------------------
# Numeric helpers
# ---------------------------------------------------------------------------

def clamp(value: float, lower: float, upper: float) -> float:
    """Bound *value* to ``[lower, upper]``."""
    return max(lower, min(upper, value))
