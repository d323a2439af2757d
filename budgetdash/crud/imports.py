import datetime as dt

from sqlalchemy.orm import Session

from budgetdash.crud.facts import delete_import_facts
from budgetdash.db.models.import_run import ImportRun
from budgetdash.db.models.import_error import ImportRowError
from budgetdash.services.etl.validators import RecordIssue

RUNNING = ("queued", "running")


def get_import_run(db: Session, import_run_id: int) -> ImportRun | None:
    return db.get(ImportRun, import_run_id)


def get_or_create_import_run(
    db: Session,
    division: str,
    file_name: str,
    file_hash: str,
    kind: str = "actual_xlsx",
    uploaded_by: str | None = None,
) -> tuple[ImportRun, bool]:
    """One run per (division, file content); re-uploading the same bytes reuses it."""
    run = (
        db.query(ImportRun)
        .filter(ImportRun.division == division, ImportRun.file_hash == file_hash)
        .one_or_none()
    )
    if run:
        return run, False
    run = ImportRun(
        division=division,
        kind=kind,
        file_name=file_name,
        file_hash=file_hash,
        uploaded_by=uploaded_by,
        status="queued",
    )
    db.add(run)
    db.commit()
    db.refresh(run)
    return run, True


def set_import_status(
    db: Session,
    import_run_id: int,
    status: str,
    started_at: dt.datetime | None = None,
    finished_at: dt.datetime | None = None,
    rows_loaded: int | None = None,
) -> ImportRun:
    run = db.query(ImportRun).filter(ImportRun.id == import_run_id).one()
    run.status = status
    if started_at is not None:
        run.started_at = started_at
    if finished_at is not None:
        run.finished_at = finished_at
    if rows_loaded is not None:
        run.rows_loaded = rows_loaded
    db.commit()
    return run


def start_import_run(db: Session, run: ImportRun, now: dt.datetime) -> None:
    """Mark running and drop row errors of an earlier attempt."""
    db.query(ImportRowError).filter(ImportRowError.import_run_id == run.id).delete()
    set_import_status(db, run.id, "running", started_at=now)


def finish_import_run(db: Session, run: ImportRun, errors: list[RecordIssue], rows_loaded: int, now: dt.datetime) -> str:
    for er in errors:
        db.add(ImportRowError(
            import_run_id=run.id,
            sheet=er.sheet,
            row_num=er.row_num,
            column=er.column,
            customer=er.customer,
            raw_value=er.raw_value,
            message=er.message,
        ))
    run.errors_count = len(errors)
    status = "success_with_errors" if errors else "success"
    set_import_status(db, run.id, status, finished_at=now, rows_loaded=rows_loaded)
    return status


def delete_import_run(db: Session, run: ImportRun) -> int:
    """Remove a finished run with its facts and row errors; returns facts deleted."""
    deleted = delete_import_facts(db, run.id)
    db.delete(run)
    db.commit()
    return deleted


def list_imports(db: Session, division: str) -> list[ImportRun]:
    return db.query(ImportRun).filter(ImportRun.division == division).order_by(ImportRun.id.desc()).all()


def list_import_errors(db: Session, import_run_id: int) -> list[ImportRowError]:
    return (
        db.query(ImportRowError)
        .filter(ImportRowError.import_run_id == import_run_id)
        .order_by(ImportRowError.id)
        .all()
    )
