from fastapi import APIRouter, Depends, UploadFile, File, HTTPException, Query
from sqlalchemy.orm import Session
from pathlib import Path
import uuid

from budgetdash.core.deps import get_db, require_roles, VIEW_ROLES, EDIT_ROLES
from budgetdash.core.enums import Division
from budgetdash.core.config import settings
from budgetdash.core.logging import logger
from budgetdash.schemas.imports import ImportRunOut, ImportErrorOut
from budgetdash.services.etl.utils import file_sha256
from budgetdash.services.etl.importer import upload_path
from budgetdash.services.files import ensure_dirs, save_upload
from budgetdash.crud.imports import (
    RUNNING,
    delete_import_run as remove_import_run,
    get_import_run,
    get_or_create_import_run,
    list_import_errors,
    list_imports,
)
from budgetdash.worker.tasks import run_import_task

router = APIRouter()


@router.get("", response_model=list[ImportRunOut])
def get_imports(
    division: str = Query(...),
    db: Session = Depends(get_db),
    _user=Depends(require_roles(*VIEW_ROLES)),
):
    return list_imports(db, Division.parse(division).value)


@router.get("/{import_run_id}/errors", response_model=list[ImportErrorOut])
def get_errors(
    import_run_id: int,
    db: Session = Depends(get_db),
    _user=Depends(require_roles(*VIEW_ROLES)),
):
    return list_import_errors(db, import_run_id)


@router.delete("/{import_run_id}")
def delete_import_run(
    import_run_id: int,
    db: Session = Depends(get_db),
    _user=Depends(require_roles(*EDIT_ROLES)),
):
    run = get_import_run(db, import_run_id)
    if not run:
        raise HTTPException(status_code=404, detail="Import run not found")
    if run.status in RUNNING:
        raise HTTPException(status_code=409, detail="Import is running; cannot delete")

    file_path = upload_path(run.division, run.file_hash)
    deleted = remove_import_run(db, run)

    if file_path.exists():
        file_path.unlink()

    logger.info("import_deleted", import_run_id=import_run_id, facts_deleted=deleted)
    return {"status": "ok", "facts_deleted": deleted}


@router.post("/upload", response_model=ImportRunOut)
def upload_excel(
    division: str = Query(..., description="Division code (1 file = 1 division)"),
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    user=Depends(require_roles(*EDIT_ROLES)),
):
    div = Division.parse(division)

    if not file.filename or not file.filename.lower().endswith(".xlsx"):
        raise HTTPException(status_code=400, detail="Only .xlsx supported")

    ensure_dirs()

    # unique tmp name so parallel uploads do not overwrite each other
    tmp_path = Path(settings.UPLOAD_DIR) / f"tmp_{div.value}_{uuid.uuid4().hex}_{Path(file.filename).name}"
    save_upload(file, tmp_path)

    file_hash = file_sha256(str(tmp_path))
    final_path = upload_path(div.value, file_hash)
    if final_path.exists():
        final_path.unlink()
    tmp_path.replace(final_path)

    run, created = get_or_create_import_run(db, div.value, file.filename, file_hash, uploaded_by=user.login)

    # idempotent: the same file was already imported
    if run.status in ("success", "success_with_errors") and not created:
        return run

    run_import_task.delay(run.id)
    db.refresh(run)
    return run
