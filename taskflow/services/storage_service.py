# taskflow/services/storage_service.py
from pathlib import Path
from werkzeug.utils import secure_filename
from flask import current_app

from ..errors import ValidationError


def _ensure_base() -> Path:
    # Fallback to <instance>/uploads if UPLOAD_FOLDER not configured yet
    base = current_app.config.get("UPLOAD_FOLDER")
    if not base:
        base = Path(current_app.instance_path) / "uploads"
    else:
        base = Path(base)
    base.mkdir(parents=True, exist_ok=True)
    return base

def allowed_ext(filename: str) -> bool:
    exts = current_app.config.get("ALLOWED_EXTENSIONS") or {"pdf", "png", "jpg", "jpeg"}
    suffix = Path(filename).suffix.lower().lstrip(".")
    return bool(suffix) and suffix in exts

def attachment_kind(mimetype: str | None) -> str:
    mimetype = mimetype or ""
    if mimetype.startswith("image/"):
        return "image"
    if mimetype == "application/pdf":
        return "pdf"
    return "other"

def save_upload(file_storage, subdir: str = "") -> str:
    """
    Saves file to UPLOAD_FOLDER / subdir / <safe_name>, returns relative path from base.
    """
    base = _ensure_base()
    safe_name = secure_filename(file_storage.filename or "")
    if not safe_name:
        raise ValidationError("Empty filename.")

    target_dir = base / subdir if subdir else base
    target_dir.mkdir(parents=True, exist_ok=True)

    dest = target_dir / safe_name
    file_storage.save(dest)

    # Return path relative to base for storage in DB
    return dest.relative_to(base).as_posix()

def task_subdir(task_id: int, comment_id: int | None = None) -> str:
    if comment_id is not None:
        return f"{task_id}/comments/{comment_id}"
    return f"{task_id}/task"

def store_attachments(files, task_id: int, comment_id: int | None = None) -> list[dict]:
    """Save uploaded files for a task (or one of its comments).

    Returns the ``{"path", "name", "kind"}`` list kept on the owning row.
    Empty file inputs are ignored; an unsupported extension rejects the batch
    before anything is written.
    """
    files = [f for f in (files or []) if f and f.filename]
    for f in files:
        if not allowed_ext(f.filename):
            raise ValidationError(
                f"Unsupported file: {f.filename}",
                {"allowed": sorted(current_app.config.get("ALLOWED_EXTENSIONS") or [])},
            )

    saved = []
    for f in files:
        path = save_upload(f, subdir=task_subdir(task_id, comment_id))
        saved.append({"path": path, "name": f.filename, "kind": attachment_kind(f.mimetype)})
    return saved
