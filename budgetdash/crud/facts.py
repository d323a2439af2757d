from typing import Iterable

from sqlalchemy import func
from sqlalchemy.orm import Session
from sqlalchemy.dialects import postgresql, sqlite

from budgetdash.core.enums import Division, RecordType, ValueType
from budgetdash.db.models.facts import SalesFact, FACT_KEY_COLUMNS
from budgetdash.schemas.facts import FactIn
from budgetdash.services.etl.utils import canonical_name, clean_name


def _insert(db: Session):
    # PostgreSQL in production, SQLite in tests; both support ON CONFLICT
    if db.get_bind().dialect.name == "sqlite":
        return sqlite.insert
    return postgresql.insert


def fact_values(
    division: Division,
    year: int,
    month: int,
    sales_rep: str,
    customer: str,
    country: str,
    product_group: str,
    value_type: ValueType,
    record_type: RecordType,
    value: float,
    material: str = "",
    process: str = "",
    import_run_id: int | None = None,
    uploaded_filename: str | None = None,
) -> dict:
    return dict(
        division=division.value,
        year=year,
        month=month,
        sales_rep=clean_name(sales_rep),
        customer=clean_name(customer),
        country=clean_name(country),
        product_group=clean_name(product_group),
        value_type=value_type.value,
        record_type=record_type.value,
        value=float(value),
        unit=value_type.base_unit.value,
        material=clean_name(material),
        process=clean_name(process),
        import_run_id=import_run_id,
        uploaded_filename=uploaded_filename,
    )


def fact_key(row: dict) -> tuple:
    return tuple(row[c] for c in FACT_KEY_COLUMNS)


def dedupe_facts(rows: Iterable[dict]) -> list[dict]:
    by_key: dict[tuple, dict] = {}
    for row in rows:
        by_key[fact_key(row)] = row
    return list(by_key.values())


def upsert_facts(db: Session, rows: Iterable[dict], commit: bool = True) -> int:
    """Insert facts; an existing row with the same key tuple is replaced.

    Duplicate keys inside ``rows`` collapse to the last one, since one
    INSERT .. ON CONFLICT statement may not touch the same row twice.
    """
    rows = list(dedupe_facts(rows))
    if not rows:
        return 0
    insert = _insert(db)
    for chunk_start in range(0, len(rows), 1000):
        chunk = rows[chunk_start:chunk_start + 1000]
        stmt = insert(SalesFact).values(chunk)
        stmt = stmt.on_conflict_do_update(
            index_elements=list(FACT_KEY_COLUMNS),
            set_=dict(
                value=stmt.excluded.value,
                unit=stmt.excluded.unit,
                material=stmt.excluded.material,
                process=stmt.excluded.process,
                import_run_id=stmt.excluded.import_run_id,
                uploaded_filename=stmt.excluded.uploaded_filename,
                updated_at=func.now(),
            ),
        )
        db.execute(stmt)
    if commit:
        db.commit()
    return len(rows)


def upsert_fact(db: Session, data: FactIn) -> None:
    upsert_facts(db, [fact_values(
        division=data.division,
        year=data.year,
        month=data.month,
        sales_rep=data.sales_rep,
        customer=data.customer,
        country=data.country,
        product_group=data.product_group,
        value_type=data.value_type,
        record_type=data.record_type,
        value=data.value,
        material=data.material,
        process=data.process,
    )])


def query_facts(
    db: Session,
    division: Division,
    year: int,
    value_type: ValueType | None = None,
    record_type: RecordType | None = None,
    sales_rep: str | None = None,
):
    q = db.query(SalesFact).filter(SalesFact.division == division.value, SalesFact.year == year)
    if value_type is not None:
        q = q.filter(SalesFact.value_type == value_type.value)
    if record_type is not None:
        q = q.filter(SalesFact.record_type.in_([t.value for t in record_type.includes]))
    if sales_rep:
        q = q.filter(func.upper(func.trim(SalesFact.sales_rep)) == canonical_name(sales_rep))
    return q


def delete_budget_scope(db: Session, division: Division, sales_rep: str, year: int) -> int:
    """Drop every BUDGET fact of one rep/year; caller commits."""
    return (
        query_facts(db, division, year, record_type=RecordType.BUDGET, sales_rep=sales_rep)
        .delete(synchronize_session=False)
    )


def delete_import_facts(db: Session, import_run_id: int) -> int:
    return (
        db.query(SalesFact)
        .filter(SalesFact.import_run_id == import_run_id)
        .delete(synchronize_session=False)
    )
