"""Saving a sales rep's yearly budget.

A save replaces every BUDGET fact of (division, sales rep, year). Each
record becomes a KGS fact; AMOUNT and MORM facts are derived from the
previous year's per-kg pricing of the product group when it exists.
"""
import datetime as dt
import re
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from budgetdash.core.config import settings
from budgetdash.core.enums import Division, RecordType, ValueType
from budgetdash.core.errors import StoreUnavailableError, ValidationError
from budgetdash.core.logging import logger
from budgetdash.crud.facts import dedupe_facts, delete_budget_scope, fact_values, upsert_facts
from budgetdash.crud.pricing import pricing_map
from budgetdash.services.aggregation import validate_year
from budgetdash.services.etl.utils import canonical_name, clean_name, to_float
from budgetdash.services.etl.validators import RecordIssue


@dataclass
class BudgetSaveResult:
    division: str
    sales_rep: str
    year: int
    records_deleted: int = 0
    records_processed: int = 0
    records_inserted: dict[str, int] = field(default_factory=dict)
    totals: dict[str, float] = field(default_factory=dict)
    pricing_year: int = 0
    skipped_records: int = 0
    errors: list[dict] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def sanitize_records(records: list[dict]) -> tuple[list[dict], list[RecordIssue]]:
    valid: list[dict] = []
    issues: list[RecordIssue] = []
    for i, rec in enumerate(records, start=1):
        customer = clean_name(rec.get("customer"))
        country = clean_name(rec.get("country"))
        group = clean_name(rec.get("productGroup"))
        month = rec.get("month")
        raw_value: Any = rec.get("value")
        value = to_float(raw_value)

        if not customer:
            issues.append(RecordIssue(f"Missing customer name at row {i}", row_num=i, column="customer"))
        elif not country:
            issues.append(RecordIssue(f'Missing country for customer "{customer}"', row_num=i, column="country", customer=customer))
        elif not group:
            issues.append(RecordIssue(f'Missing product group for "{customer}"', row_num=i, column="productGroup", customer=customer))
        elif isinstance(month, bool) or not isinstance(month, int) or not 1 <= month <= 12:
            issues.append(RecordIssue(f'Invalid month value "{month}" for "{customer}"', row_num=i, column="month", customer=customer))
        elif value is None:
            issues.append(RecordIssue(f'Invalid value "{raw_value}" for "{customer}" - {group} - Month {month}', row_num=i, column="value", customer=customer))
        elif value < 0:
            issues.append(RecordIssue(f'Negative value ({value}) not allowed for "{customer}" - {group}', row_num=i, column="value", customer=customer))
        elif value == 0:
            issues.append(RecordIssue(f'Zero value not allowed for "{customer}" - {group} - Month {month}', row_num=i, column="value", customer=customer))
        elif value > settings.MAX_RECORD_VALUE:
            issues.append(RecordIssue(f"Value {value:,.0f} exceeds the per-record limit", row_num=i, column="value", customer=customer))
        else:
            valid.append({"customer": customer, "country": country, "productGroup": group, "month": month, "value": value})
    return valid, issues


def _upload_name(division: Division, sales_rep: str, year: int) -> str:
    rep = re.sub(r"[^a-zA-Z0-9]", "_", sales_rep)
    ts = dt.datetime.now(dt.timezone.utc).strftime("%Y-%m-%dT%H-%M-%S")
    return f"LIVE_BUDGET_{division.value}_{rep}_{year}_{ts}.json"


def save_sales_rep_budget(
    db: Session,
    division,
    year,
    sales_rep: str,
    records: list[dict],
    filename: str | None = None,
) -> BudgetSaveResult:
    div = Division.parse(division)
    year = validate_year(year)
    rep = clean_name(sales_rep)
    if not rep:
        raise ValidationError("salesRep is required")

    valid, issues = sanitize_records(records)
    if not valid:
        msg = "All records were invalid. Please review the data and try again." if issues else "No budget records to save."
        raise ValidationError(msg, errors=[e.as_dict() for e in issues[:10]])

    result = BudgetSaveResult(
        division=div.value,
        sales_rep=rep,
        year=year,
        pricing_year=year - settings.PRICING_YEAR_OFFSET,
        records_processed=len(valid),
        skipped_records=len(issues),
        errors=[e.as_dict() for e in issues[:10]],
    )
    uploaded = filename or _upload_name(div, rep, year)
    inserted = {vt.value: 0 for vt in ValueType}
    totals = {"mt": 0.0, "amount": 0.0, "morm": 0.0}
    missing_pricing: set[str] = set()

    try:
        prices = pricing_map(db, div, result.pricing_year)
        result.records_deleted = delete_budget_scope(db, div, rep, year)

        rows = []
        for rec in valid:
            base = dict(
                division=div,
                year=year,
                month=rec["month"],
                sales_rep=rep,
                customer=rec["customer"],
                country=rec["country"],
                product_group=rec["productGroup"],
                record_type=RecordType.BUDGET,
                uploaded_filename=uploaded,
            )
            kgs = rec["value"]
            rows.append(fact_values(value_type=ValueType.KGS, value=kgs, **base))

            price = prices.get(canonical_name(rec["productGroup"]))
            if price is None or price.asp is None or price.morm is None:
                missing_pricing.add(rec["productGroup"])
            if price is not None and price.asp is not None:
                rows.append(fact_values(value_type=ValueType.AMOUNT, value=kgs * price.asp, **base))
            if price is not None and price.morm is not None:
                rows.append(fact_values(value_type=ValueType.MORM, value=kgs * price.morm, **base))

        # the same tuple twice in one upload: last one wins
        rows = dedupe_facts(rows)
        for row in rows:
            inserted[row["value_type"]] += 1
            if row["value_type"] == ValueType.KGS.value:
                totals["mt"] += row["value"] / 1000
            else:
                totals[row["value_type"].lower()] += row["value"]
        upsert_facts(db, rows, commit=False)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("budget_save_failed", division=div.value, sales_rep=rep, year=year)
        raise StoreUnavailableError(f"Could not save budget: {e.__class__.__name__}") from e

    if missing_pricing:
        result.warnings.append(
            f"Missing pricing data for {len(missing_pricing)} product group(s). Amount/MoRM rows were skipped."
        )
    result.records_inserted = {k.lower(): v for k, v in inserted.items()}
    result.records_inserted["total"] = sum(inserted.values())
    result.totals = totals

    logger.info(
        "budget_saved",
        division=div.value,
        sales_rep=rep,
        year=year,
        deleted=result.records_deleted,
        inserted=result.records_inserted["total"],
        skipped=result.skipped_records,
    )
    return result
