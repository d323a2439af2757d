import datetime as dt
from sqlalchemy.orm import Session

import budgetdash.db.models  # noqa: F401  (mapper registry)
from budgetdash.worker.celery_app import celery_app
from budgetdash.core.logging import bind_log_context, logger
from budgetdash.db.session import SessionLocal
from budgetdash.crud.imports import finish_import_run, get_import_run, set_import_status, start_import_run
from budgetdash.services.etl.importer import run_import


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


@celery_app.task(name="imports.run_import", bind=True)
def run_import_task(self, import_run_id: int):
    """Load one uploaded actuals workbook; the ImportRun row carries the outcome."""
    bind_log_context(task_id=self.request.id, import_run_id=import_run_id)
    db: Session = SessionLocal()
    try:
        run = get_import_run(db, import_run_id)
        if not run:
            logger.error("import_run_missing")
            return

        start_import_run(db, run, _utcnow())
        errors, rows_loaded = run_import(db, run)
        status = finish_import_run(db, run, errors, rows_loaded, _utcnow())

        logger.info(
            "import_finished",
            division=run.division,
            status=status,
            rows_loaded=rows_loaded,
            errors=len(errors),
        )
        return {"status": status, "rows_loaded": rows_loaded, "errors": len(errors)}

    except Exception:
        logger.exception("import_failed")
        # the failed transaction must be rolled back before the status write
        db.rollback()
        try:
            set_import_status(db, import_run_id, "failed", finished_at=_utcnow())
        except Exception:
            logger.exception("import_failed_status_update_failed")
        raise

    finally:
        db.close()
