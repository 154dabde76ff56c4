# workhub_api/services/storage.py
import os
import logging

from flask import current_app
from werkzeug.utils import secure_filename

from workhub_api.common.errors import APIError

log = logging.getLogger(__name__)


def uploads_root() -> str:
    root = current_app.config["UPLOADS_ROOT"]
    os.makedirs(root, exist_ok=True)
    return root


def file_size(f) -> int:
    stream = f.stream
    pos = stream.tell()
    stream.seek(0, os.SEEK_END)
    size = stream.tell()
    stream.seek(pos)
    return size


def save_upload(f, subdir: str, stem: str, max_bytes: int | None = None) -> str:
    """
    Save a werkzeug FileStorage under UPLOADS_ROOT/<subdir>/<stem>.<ext>.
    Returns the path relative to UPLOADS_ROOT (what the DB stores).
    """
    fname = secure_filename(f.filename or "")
    if not fname:
        raise APIError("BAD_FILE", f"Invalid file for {stem}", 400)
    if max_bytes is not None and file_size(f) > max_bytes:
        raise APIError("FILE_TOO_LARGE", f"{stem} exceeds {max_bytes // (1024 * 1024)} MB", 400)

    ext = os.path.splitext(fname)[1].lower()
    rel_dir = "/".join(p for p in (secure_filename(x) for x in subdir.split("/")) if p) or "misc"
    abs_dir = os.path.join(uploads_root(), rel_dir)
    os.makedirs(abs_dir, exist_ok=True)

    rel_path = f"{rel_dir}/{secure_filename(stem)}{ext}"
    f.save(os.path.join(uploads_root(), rel_path))
    log.info("Stored upload %s", rel_path)
    return rel_path


def remove_upload(rel_path: str | None):
    if not rel_path:
        return
    path = os.path.join(uploads_root(), rel_path)
    if os.path.isfile(path):
        os.remove(path)
