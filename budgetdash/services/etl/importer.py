from __future__ import annotations

from pathlib import Path

from sqlalchemy.orm import Session

from budgetdash.core.config import settings
from budgetdash.core.enums import Division, RecordType, ValueType
from budgetdash.core.logging import logger
from budgetdash.crud.facts import delete_import_facts, fact_values, upsert_facts
from budgetdash.db.models.import_run import ImportRun
from budgetdash.services.etl.parsers.actuals import parse_actuals
from budgetdash.services.etl.validators import RecordIssue


def upload_path(division: str, file_hash: str) -> Path:
    return Path(settings.UPLOAD_DIR) / f"{division}_{file_hash}.xlsx"


def _file_path(run: ImportRun) -> Path:
    return upload_path(run.division, run.file_hash)


def run_import(db: Session, run: ImportRun) -> tuple[list[RecordIssue], int]:
    """Load one uploaded workbook into ``sales_fact``.

    Rows from a previous attempt of the same run are dropped first; rows
    whose key tuple already exists (from any upload) are replaced.
    """
    path = _file_path(run)
    if not path.exists():
        return [RecordIssue(f"Uploaded file missing: {path.name}")], 0

    division = Division.parse(run.division)
    df, errors = parse_actuals(str(path), division)
    logger.info("import_parsed", import_run_id=run.id, rows=len(df), errors=len(errors))

    delete_import_facts(db, run.id)
    rows = [
        fact_values(
            division=division,
            year=int(r.year),
            month=int(r.month),
            sales_rep=r.sales_rep,
            customer=r.customer,
            country=r.country,
            product_group=r.product_group,
            value_type=ValueType(r.value_type),
            record_type=RecordType(r.record_type),
            value=float(r.value),
            material=r.material,
            process=r.process,
            import_run_id=run.id,
            uploaded_filename=run.file_name,
        )
        for r in df.itertuples(index=False)
    ]
    loaded = upsert_facts(db, rows, commit=False)
    db.commit()
    return errors, loaded
