import os
import uuid
from typing import Optional

from flask import current_app
from werkzeug.utils import secure_filename

from scisubmit.errors import NotFound, ValidationError
from scisubmit.utils.logging_utils import get_logger

logger = get_logger("storage")


class FileStore:
    """
    Local-disk store. Callers only ever hold the relative path returned by
    :meth:`save`; :meth:`delete` never raises.
    """

    def __init__(self, root: str):
        self.root = os.path.abspath(root)

    def save(self, data: bytes, suggested_name: str, folder: str = "docs") -> str:
        filename = secure_filename(suggested_name or "") or "upload"
        parts = [secure_filename(part) for part in (folder or "").split("/")]
        parts = [part for part in parts if part] or ["docs"]
        relative = os.path.join(*parts, f"{uuid.uuid4().hex}_{filename}")
        target = self.absolute(relative)
        os.makedirs(os.path.dirname(target), exist_ok=True)
        with open(target, "wb") as handle:
            handle.write(data)
        logger.info("stored %s (%d bytes)", relative, len(data))
        return relative

    def absolute(self, path: str) -> str:
        full = os.path.abspath(os.path.join(self.root, path))
        if os.path.commonpath([full, self.root]) != self.root:
            raise ValidationError("Invalid file path")
        return full

    def exists(self, path: Optional[str]) -> bool:
        if not path:
            return False
        try:
            return os.path.isfile(self.absolute(path))
        except ValidationError:
            return False

    def delete(self, path: Optional[str]) -> bool:
        if not path:
            return False
        try:
            os.remove(self.absolute(path))
        except FileNotFoundError:
            logger.warning("delete skipped, %s already gone", path)
            return False
        except (OSError, ValidationError) as exc:
            logger.error("could not delete %s: %s", path, exc)
            return False
        logger.info("deleted %s", path)
        return True

    def require(self, path: Optional[str]) -> str:
        """Absolute path of an existing stored file, else ``NotFound``."""
        if not self.exists(path):
            raise NotFound("File not found")
        return self.absolute(path)


def get_file_store() -> FileStore:
    return FileStore(current_app.config["UPLOAD_FOLDER"])


def allowed_file(filename: Optional[str]) -> bool:
    if not filename or "." not in filename:
        return False
    extension = filename.rsplit(".", 1)[1].lower()
    return extension in current_app.config.get("ALLOWED_EXTENSIONS", set())
