from pathlib import Path
import shutil
from fastapi import UploadFile
from budgetdash.core.config import settings
from budgetdash.core.errors import ValidationError

def _max_html_bytes() -> int:
    return settings.MAX_HTML_UPLOAD_MB * 1024 * 1024

def ensure_dirs():
    Path(settings.UPLOAD_DIR).mkdir(parents=True, exist_ok=True)
    Path(settings.EXPORT_DIR).mkdir(parents=True, exist_ok=True)

def save_upload(file: UploadFile, dest_path: Path) -> None:
    dest_path.parent.mkdir(parents=True, exist_ok=True)
    with dest_path.open("wb") as f:
        shutil.copyfileobj(file.file, f)

def read_html_upload(file: UploadFile) -> str:
    name = (file.filename or "").lower()
    if not name.endswith((".html", ".htm")):
        raise ValidationError("Only .html budget files are supported")
    raw = file.file.read(_max_html_bytes() + 1)
    if len(raw) > _max_html_bytes():
        raise ValidationError(f"File too large (max {settings.MAX_HTML_UPLOAD_MB} MB)")
    try:
        return raw.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise ValidationError("File is not UTF-8 encoded HTML") from e
