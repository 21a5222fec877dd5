import base64
import binascii
import logging
import os
import re
import shutil
import uuid
from pathlib import Path
from typing import BinaryIO, Optional

from ..models.db_models import Attachment

logger = logging.getLogger(__name__)

# URL prefix the application mounts the upload directory under
UPLOADS_ROUTE = "/uploads"

DATA_URL_REGEX = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?:;[\w=-]+)*;base64,(?P<data>.*)$", re.DOTALL)


class StorageError(Exception):
    """Raised when an uploaded file cannot be decoded or stored."""
    pass


def infer_format(filename: Optional[str], content_type: Optional[str] = None) -> str:
    """
    Guesses a short format label for an attachment: the file extension when
    there is one, otherwise the content-type subtype, otherwise 'file'.
    """
    ext = os.path.splitext(filename or "")[1].lstrip(".").lower()
    if ext:
        return ext
    if content_type and "/" in content_type:
        return content_type.split("/", 1)[1].split(";")[0].strip().lower() or "file"
    return "file"


class FileStorage:
    """
    Stores uploads on local disk under `upload_dir` and hands back public URLs
    served from UPLOADS_ROUTE.
    """
    def __init__(self, upload_dir: str, public_base_url: str = ""):
        self.upload_dir = Path(upload_dir)
        self.public_base_url = public_base_url.rstrip("/")

    def _url_for(self, relative_path: str) -> str:
        return f"{self.public_base_url}{UPLOADS_ROUTE}/{relative_path}"

    def _target(self, folder: str, extension: str) -> tuple:
        directory = self.upload_dir / folder
        directory.mkdir(parents=True, exist_ok=True)
        unique_filename = f"{uuid.uuid4()}{extension}"
        return directory / unique_filename, f"{folder}/{unique_filename}"

    def save_attachment(self, fileobj: BinaryIO, filename: Optional[str], content_type: Optional[str] = None) -> Attachment:
        """Copies an uploaded file into the notes folder."""
        file_format = infer_format(filename, content_type)
        extension = os.path.splitext(filename or "")[1].lower()
        file_path, relative_path = self._target("notes", extension)
        try:
            with open(file_path, "wb") as buffer:
                shutil.copyfileobj(fileobj, buffer)
        except OSError as e:
            logger.error(f"Could not write attachment '{filename}' to {file_path}.", exc_info=True)
            raise StorageError("Could not store the uploaded file.") from e

        logger.info(f"Stored attachment '{filename}' as {relative_path} ({file_format}).")
        return Attachment(format=file_format, url=self._url_for(relative_path))

    def save_base64_pdf(self, file_base64: str) -> str:
        """
        Decodes a data URL (or bare base64 string) holding a PDF, stores it in
        the papers folder and returns its public URL.
        """
        if not file_base64 or not file_base64.strip():
            raise StorageError("Please select a file")

        mime, payload = None, file_base64.strip()
        match = DATA_URL_REGEX.match(payload)
        if match:
            mime, payload = match.group("mime"), match.group("data")

        try:
            content = base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as e:
            raise StorageError("File is not valid base64 data.") from e

        if mime not in (None, "application/pdf") or not content.startswith(b"%PDF"):
            raise StorageError("Only PDF files can be uploaded.")

        file_path, relative_path = self._target("papers", ".pdf")
        try:
            file_path.write_bytes(content)
        except OSError as e:
            logger.error(f"Could not write paper to {file_path}.", exc_info=True)
            raise StorageError("Could not store the uploaded file.") from e

        logger.info(f"Stored paper PDF as {relative_path} ({len(content)} bytes).")
        return self._url_for(relative_path)

    def delete(self, url: str) -> bool:
        """
        Removes a previously stored file given its public URL. URLs that do not
        point into the upload directory are ignored.
        """
        prefix = f"{self.public_base_url}{UPLOADS_ROUTE}/"
        if not url.startswith(prefix):
            logger.warning(f"Refusing to delete '{url}': not a stored upload.")
            return False

        root = self.upload_dir.resolve()
        file_path = (root / url[len(prefix):]).resolve()
        if root not in file_path.parents:
            logger.warning(f"Refusing to delete '{url}': path escapes the upload directory.")
            return False

        try:
            file_path.unlink()
        except FileNotFoundError:
            logger.warning(f"Stored file for '{url}' was already gone.")
            return False
        return True
