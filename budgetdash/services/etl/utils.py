import hashlib
import re
from typing import Any

_WS_RE = re.compile(r"\s+")

MONTH_NAMES = {
    "JANUARY": 1,
    "FEBRUARY": 2,
    "MARCH": 3,
    "APRIL": 4,
    "MAY": 5,
    "JUNE": 6,
    "JULY": 7,
    "AUGUST": 8,
    "SEPTEMBER": 9,
    "OCTOBER": 10,
    "NOVEMBER": 11,
    "DECEMBER": 12,
}

def file_sha256(path: str) -> str:
    h = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(1024 * 1024), b""):
            h.update(chunk)
    return h.hexdigest()

def _is_nan(v: Any) -> bool:
    return isinstance(v, float) and (v != v)

def norm_str(v: Any) -> str | None:
    if v is None or _is_nan(v):
        return None
    if isinstance(v, str):
        s = v.strip()
        return s if s else None
    return str(v).strip()

def clean_name(v: Any) -> str:
    """Display form of a name: trimmed, inner whitespace collapsed."""
    s = norm_str(v)
    if not s:
        return ""
    return _WS_RE.sub(" ", s)

def canonical_name(v: Any) -> str:
    """Identity form used for every name comparison (reps, customers, groups)."""
    return clean_name(v).upper()

def to_float(v: Any) -> float | None:
    if v is None or _is_nan(v) or isinstance(v, bool):
        return None
    if isinstance(v, (int, float)):
        return float(v)
    s = str(v).strip().replace(" ", "").replace(",", "")
    if not s or s.lower() in ("nan", "none", "-", "—"):
        return None
    try:
        return float(s)
    except ValueError:
        return None

def to_int(v: Any) -> int | None:
    f = to_float(v)
    if f is None or not f.is_integer():
        return None
    return int(f)

def to_month(v: Any) -> int | None:
    if isinstance(v, str):
        s = v.strip().upper()
        for name, num in MONTH_NAMES.items():
            if len(s) >= 3 and name.startswith(s):
                return num
    m = to_int(v)
    if m is None or not 1 <= m <= 12:
        return None
    return m

def header_key(v: Any) -> str:
    # "Sales Rep Name" / "salesrepname" / "sales_rep_name" -> "salesrepname"
    return re.sub(r"[^a-z]", "", str(v).lower()) if v is not None else ""

def header_to_index(header: list[Any]) -> dict[str, int]:
    m = {}
    for i, v in enumerate(header):
        k = header_key(v)
        if k and k not in m:
            m[k] = i
    return m
