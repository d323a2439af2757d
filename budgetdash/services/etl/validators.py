from dataclasses import dataclass, asdict
from typing import Any

@dataclass
class RecordIssue:
    """One skipped input row and why. Collected, never raised."""
    message: str
    sheet: str | None = None
    row_num: int | None = None
    column: str | None = None
    customer: str | None = None
    raw_value: str | None = None

    def as_dict(self) -> dict:
        return {k: v for k, v in asdict(self).items() if v is not None}

def raw_text(v: Any, max_len: int = 255) -> str | None:
    # offending cell as text for the error report
    if v is None:
        return None
    return str(v)[:max_len]

def is_negative(v: float | None) -> bool:
    return v is not None and v < 0
