"""Parser for sales-rep budget forms saved as standalone HTML.

The exported form embeds its state in a script block::

    <!-- IPD_BUDGET_SYSTEM_v1.0 :: TYPE=SALES_REP_BUDGET :: ... -->
    <script id="savedBudgetData">
      const budgetMetadata = {"division": "FP", "salesRep": "...", ...};
      const savedBudget = [{"customer": ..., "month": 1, "value": 500}, ...];
    </script>

Values are already in kilograms.
"""
import json
import math
import re
from dataclasses import dataclass, field
from typing import Any

from budgetdash.core.config import settings
from budgetdash.core.errors import ValidationError
from budgetdash.core.logging import logger
from budgetdash.services.etl.utils import canonical_name
from budgetdash.services.etl.validators import RecordIssue, is_negative

SIGNATURE_RE = re.compile(r"<!--\s*IPD_BUDGET_SYSTEM_v[\d.]+\s*::\s*TYPE=(SALES_REP_BUDGET|DIVISIONAL_BUDGET)\s*::")
SCRIPT_RE = re.compile(r"<script[^>]*id=[\"']savedBudgetData[\"'][^>]*>([\s\S]*?)</script>", re.IGNORECASE)
METADATA_RE = re.compile(r"const\s+budgetMetadata\s*=\s*(\{[\s\S]*?\});")
RECORDS_RE = re.compile(r"const\s+savedBudget\s*=\s*(\[[\s\S]*?\]);")
DRAFT_RE = re.compile(r"const\s+draftMetadata\s*=\s*(\{[^;]+\});")

SUPPORTED_VERSION = "1.0"
DATA_FORMAT = "budget_import"


@dataclass
class ParsedBudget:
    division: str
    sales_rep: str
    year: int
    records: list[dict] = field(default_factory=list)
    issues: list[RecordIssue] = field(default_factory=list)
    total_records: int = 0


def _load_json(raw: str, what: str):
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        raise ValidationError(f"Failed to parse {what} from file: {e.msg}") from e


def _extract(html: str) -> tuple[Any, Any]:
    m = SCRIPT_RE.search(html)
    scope = m.group(1) if m else html
    meta_m = METADATA_RE.search(scope)
    data_m = RECORDS_RE.search(scope)
    if not (meta_m and data_m) and m:
        # older exports put the assignments outside the tagged script
        meta_m = METADATA_RE.search(html)
        data_m = RECORDS_RE.search(html)
    if not (meta_m and data_m):
        raise ValidationError(
            "Invalid HTML file format. Missing budget metadata or saved budget data. "
            "Please re-export using the 'Save Final' button."
        )
    return _load_json(meta_m.group(1), "budget metadata"), _load_json(data_m.group(1), "budget data")


def _check_signature(html: str) -> None:
    m = SIGNATURE_RE.search(html)
    if not m:
        logger.warning("budget_html_signature_missing")
    elif m.group(1) != "SALES_REP_BUDGET":
        raise ValidationError("Wrong file type. This is a divisional budget file, not a sales rep budget.")


def _check_draft(html: str) -> None:
    m = DRAFT_RE.search(html)
    if not m:
        return
    try:
        draft = json.loads(m.group(1))
    except json.JSONDecodeError:
        logger.debug("budget_html_draft_unparsed")
        return
    if isinstance(draft, dict) and draft.get("isDraft") is True:
        raise ValidationError("Cannot upload a draft file. Complete the budget and use 'Save Final' first.")


def _check_metadata(meta: Any) -> None:
    if not isinstance(meta, dict):
        raise ValidationError("File validation failed: metadata is not an object")
    problems = []
    if not isinstance(meta.get("division"), str) or not meta["division"].strip():
        problems.append("Invalid or missing division")
    if not isinstance(meta.get("salesRep"), str) or not meta["salesRep"].strip():
        problems.append("Invalid or missing sales rep name")
    year = meta.get("budgetYear")
    if isinstance(year, bool) or not isinstance(year, int) or not 2020 <= year <= 2100:
        problems.append("Invalid or missing budget year (must be between 2020-2100)")
    if meta.get("version") != SUPPORTED_VERSION:
        problems.append("Unsupported file version. Please re-export from the system.")
    if meta.get("dataFormat") != DATA_FORMAT:
        problems.append("Invalid data format. This file may not be a budget export.")
    if problems:
        raise ValidationError("File validation failed:\n" + "\n".join(problems), errors=problems)


def _is_text(v: Any) -> bool:
    return isinstance(v, str) and bool(v.strip())


def _is_number(v: Any) -> bool:
    return isinstance(v, (int, float)) and not isinstance(v, bool) and math.isfinite(v)


def validate_record(record: Any) -> list[str]:
    if not isinstance(record, dict):
        return ["Record is not an object"]
    problems = []
    if not _is_text(record.get("customer")):
        problems.append("Missing or invalid customer name")
    if not _is_text(record.get("country")):
        problems.append("Missing or invalid country")
    if not _is_text(record.get("productGroup")):
        problems.append("Missing or invalid product group")
    month = record.get("month")
    if not _is_number(month) or month != int(month) or not 1 <= month <= 12:
        problems.append("Invalid month (must be 1-12)")
    value = record.get("value")
    if value is None:
        problems.append("Missing value")
    elif not _is_number(value):
        problems.append("Invalid value (must be a number)")
    elif is_negative(value):
        problems.append("Negative values not allowed")
    elif value == 0:
        problems.append("Zero values not allowed")
    elif value > settings.MAX_RECORD_VALUE:
        problems.append("Value too large (max 1 billion KGS)")
    return problems


def parse_budget_html(
    html: str,
    expected_division: str | None = None,
    expected_sales_rep: str | None = None,
) -> ParsedBudget:
    _check_signature(html)
    meta, data = _extract(html)
    _check_draft(html)
    _check_metadata(meta)

    if expected_division and canonical_name(expected_division) != canonical_name(meta["division"]):
        raise ValidationError(
            f"Division mismatch: you are in {expected_division} but this file is for {meta['division']}"
        )
    if expected_sales_rep and canonical_name(expected_sales_rep) != canonical_name(meta["salesRep"]):
        raise ValidationError(
            f"Sales rep mismatch: selected {expected_sales_rep} but this file is for {meta['salesRep']}"
        )

    if not isinstance(data, list):
        raise ValidationError("Invalid budget data format. Expected an array of records.")
    if not data:
        raise ValidationError("No budget data found in file. The file appears to be empty.")
    if len(data) > settings.MAX_BUDGET_RECORDS:
        raise ValidationError(f"Too many records ({len(data)}). Maximum allowed is {settings.MAX_BUDGET_RECORDS}.")

    parsed = ParsedBudget(
        division=meta["division"].strip(),
        sales_rep=meta["salesRep"].strip(),
        year=meta["budgetYear"],
        total_records=len(data),
    )
    for i, record in enumerate(data, start=1):
        problems = validate_record(record)
        if problems:
            customer = record.get("customer") if isinstance(record, dict) else None
            parsed.issues.append(RecordIssue(
                message="; ".join(problems),
                row_num=i,
                customer=customer if isinstance(customer, str) else None,
            ))
            continue
        parsed.records.append({
            "customer": record["customer"],
            "country": record["country"],
            "productGroup": record["productGroup"],
            "month": int(record["month"]),
            "value": float(record["value"]),
        })

    if len(parsed.issues) / len(data) > settings.MAX_INVALID_RATIO:
        raise ValidationError(
            f"Too many invalid records ({len(parsed.issues)} out of {len(data)}). Please check your file and try again.",
            errors=[e.as_dict() for e in parsed.issues[:10]],
        )
    if parsed.issues:
        logger.warning("budget_html_records_skipped", skipped=len(parsed.issues), total=len(data))
    return parsed
