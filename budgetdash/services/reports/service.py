from dataclasses import asdict

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from budgetdash.core.enums import Division, RecordType, Unit, ValueType
from budgetdash.core.errors import StoreUnavailableError, ValidationError
from budgetdash.core.logging import logger
from budgetdash.crud.facts import query_facts
from budgetdash.crud.merge_rules import list_rules, normalize_originals, snapshot
from budgetdash.db.models.facts import SalesFact
from budgetdash.services.aggregation import (
    AggregatedRow,
    FactRecord,
    MergeRuleSnapshot,
    aggregate,
    customer_totals,
    monthly_totals,
    validate_year,
)
from budgetdash.services.etl.utils import canonical_name, clean_name
from budgetdash.services.units import convert_rows, target_unit


def _to_record(f: SalesFact) -> FactRecord:
    return FactRecord(
        division=f.division,
        year=f.year,
        month=f.month,
        sales_rep=f.sales_rep,
        customer=f.customer,
        country=f.country,
        product_group=f.product_group,
        value_type=f.value_type,
        record_type=f.record_type,
        value=f.value,
    )


def load_snapshot(
    db: Session,
    division: Division,
    year: int,
    value_type: ValueType,
    record_type: RecordType,
    sales_rep: str | None = None,
) -> tuple[list[FactRecord], list[MergeRuleSnapshot]]:
    """Facts and active merge rules, read in the caller's transaction."""
    try:
        facts = [
            _to_record(f)
            for f in query_facts(db, division, year, value_type=value_type, record_type=record_type, sales_rep=sales_rep)
        ]
        rules = [snapshot(r) for r in list_rules(db, division, sales_rep=sales_rep, active=True)]
    except SQLAlchemyError as e:
        logger.exception("store_read_failed", division=division.value, year=year)
        raise StoreUnavailableError(f"Sales data store unavailable: {e.__class__.__name__}") from e
    return facts, rules


def customer_report(
    db: Session,
    division,
    year,
    value_type,
    record_type,
    sales_rep: str | None = None,
    unit: Unit | None = None,
) -> list[AggregatedRow]:
    div = Division.parse(division)
    year = validate_year(year)
    vt = ValueType.parse(value_type)
    rt = RecordType.parse(record_type)
    target_unit(vt.base_unit, unit)

    facts, rules = load_snapshot(db, div, year, vt, rt, sales_rep=sales_rep)
    rows = aggregate(div, year, vt, rt, facts, rules)
    logger.info(
        "customer_report",
        division=div.value,
        year=year,
        value_type=vt.value,
        record_type=rt.value,
        facts=len(facts),
        rules=len(rules),
        rows=len(rows),
    )
    return convert_rows(rows, unit)


def monthly_series(db: Session, division, year, value_type, record_type, sales_rep=None, unit=None):
    return monthly_totals(customer_report(db, division, year, value_type, record_type, sales_rep=sales_rep, unit=unit))


def budget_summary(db: Session, division, year, sales_rep: str | None = None) -> dict:
    div = Division.parse(division)
    year = validate_year(year)
    try:
        totals_q = (
            query_facts(db, div, year, record_type=RecordType.BUDGET, sales_rep=sales_rep)
            .with_entities(SalesFact.value_type, func.count(SalesFact.id), func.coalesce(func.sum(SalesFact.value), 0.0))
            .group_by(SalesFact.value_type)
            .all()
        )
    except SQLAlchemyError as e:
        raise StoreUnavailableError(f"Sales data store unavailable: {e.__class__.__name__}") from e

    totals = {"mt": 0.0, "amount": 0.0, "morm": 0.0}
    records = 0
    for value_type, count, total in totals_q:
        records += count
        if value_type == ValueType.KGS.value:
            totals["mt"] += float(total) / 1000
        else:
            totals[value_type.lower()] = float(total)

    kgs_rows = customer_report(db, div, year, ValueType.KGS, RecordType.BUDGET, sales_rep=sales_rep, unit=Unit.MT)
    return {
        "division": div.value,
        "year": year,
        "sales_rep": clean_name(sales_rep) or None,
        "records": records,
        "totals": totals,
        "customers": [asdict(t) for t in customer_totals(kgs_rows)],
    }


def preview_merge_impact(
    db: Session,
    division,
    sales_rep: str,
    year,
    value_type,
    record_type,
    merged_customer_name: str,
    original_customers: list[str],
    months: list[int] | None = None,
) -> dict:
    """What a prospective merge rule would fold together, before saving it."""
    div = Division.parse(division)
    year = validate_year(year)
    vt = ValueType.parse(value_type)
    rt = RecordType.parse(record_type)
    months = sorted(set(months or []))
    if any(m < 1 or m > 12 for m in months):
        raise ValidationError("months must be between 1 and 12")

    wanted = {canonical_name(n) for n in normalize_originals(original_customers)}
    facts, _ = load_snapshot(db, div, year, vt, rt, sales_rep=sales_rep)

    total = 0.0
    found: dict[str, str] = {}
    for f in facts:
        if months and f.month not in months:
            continue
        key = canonical_name(f.customer)
        if key in wanted:
            total += f.value
            found[key] = min(found.get(key, clean_name(f.customer)), clean_name(f.customer))

    try:
        merged_exists = (
            db.query(SalesFact.id)
            .filter(
                SalesFact.division == div.value,
                func.upper(func.trim(SalesFact.customer)) == canonical_name(merged_customer_name),
            )
            .first()
            is not None
        )
    except SQLAlchemyError as e:
        raise StoreUnavailableError(f"Sales data store unavailable: {e.__class__.__name__}") from e

    return {
        "total_originals_value": total,
        "unique_originals_count": len(found),
        "originals_found": sorted(found.values()),
        "merged_exists_in_data": merged_exists,
        "unit": vt.base_unit.value,
    }
