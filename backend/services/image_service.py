"""Storage of uploaded images under UPLOAD_DIR."""

import logging
import os
import random
import re
import uuid
from pathlib import Path
from typing import BinaryIO, Optional

from config import MAX_UPLOAD_SIZE, UPLOAD_DIR
from services.exceptions import BadRequestError, NotFoundError, PayloadTooLargeError, ServiceError


logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {".png", ".jpg", ".jpeg", ".webp", ".gif"}
PUBLIC_PREFIX = "/uploads"
DEFAULT_FOLDER = "default"

_SEGMENT_RE = re.compile(r"^[A-Za-z0-9_-]+$")
_CHUNK_SIZE = 64 * 1024


def clean_folder(folder: str) -> list[str]:
    """Split a client-supplied folder into safe path segments.

    Any segment outside ``[A-Za-z0-9_-]`` (``..``, absolute paths, dots)
    rejects the whole folder.
    """
    segments = [segment for segment in folder.strip("/").split("/") if segment]
    if not segments or not all(_SEGMENT_RE.match(segment) for segment in segments):
        raise BadRequestError("Invalid upload folder")
    return segments


class ImageService:
    def __init__(self, upload_dir: Optional[str] = None, max_size: Optional[int] = None):
        self.upload_dir = Path(upload_dir or UPLOAD_DIR)
        self.max_size = max_size or MAX_UPLOAD_SIZE

    def save(self, folder: str, filename: Optional[str], stream: BinaryIO) -> str:
        """Write the upload to ``<upload_dir>/<folder>/<uuid><ext>`` and return its public URL."""
        segments = clean_folder(folder)
        if segments[0] == DEFAULT_FOLDER:
            raise BadRequestError("The default image folder is reserved")
        extension = Path(filename or "").suffix.lower()
        if extension not in ALLOWED_EXTENSIONS:
            raise BadRequestError(
                f"Unsupported image type. Allowed: {', '.join(sorted(ALLOWED_EXTENSIONS))}"
            )

        target_dir = self.upload_dir.joinpath(*segments)
        target_dir.mkdir(parents=True, exist_ok=True)
        stored_name = f"{uuid.uuid4().hex}{extension}"
        target = target_dir / stored_name

        written = 0
        try:
            with open(target, "wb") as out:
                while True:
                    chunk = stream.read(_CHUNK_SIZE)
                    if not chunk:
                        break
                    written += len(chunk)
                    if written > self.max_size:
                        raise PayloadTooLargeError(
                            f"Image exceeds the maximum size of {self.max_size} bytes"
                        )
                    out.write(chunk)
        except PayloadTooLargeError:
            target.unlink(missing_ok=True)
            raise

        logger.info("Stored upload %s (%s bytes)", target, written)
        return "/".join([PUBLIC_PREFIX, *segments, stored_name])

    def random_default_filepath(self, image_type: str) -> str:
        """Public path of a random image file in ``<upload_dir>/default/<image_type>``.

        Dotfiles, subdirectories and non-image files are not candidates.
        """
        segments = clean_folder(image_type)
        directory = self.upload_dir.joinpath(DEFAULT_FOLDER, *segments)
        try:
            entries = sorted(
                entry.name
                for entry in os.scandir(directory)
                if entry.is_file()
                and not entry.name.startswith(".")
                and Path(entry.name).suffix.lower() in ALLOWED_EXTENSIONS
            )
        except OSError:
            logger.exception("Could not read default image directory %s", directory)
            raise ServiceError("Error processing request.")
        if not entries:
            raise NotFoundError(f"No default images for type {image_type}")

        return "/".join([PUBLIC_PREFIX, DEFAULT_FOLDER, *segments, random.choice(entries)])
