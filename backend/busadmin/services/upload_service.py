"""
Bus Admin Backend — Upload Store
==================================

What:  Validates, stores, resolves and releases bus image files.
How:   Checks extension, declared content type and size, writes accepted
       files under a generated unique name with aiofiles, and computes the
       public URL the record will carry.
Who:   Constructed by AppContext; used by BusService and the /uploads route.
When:  On create/update with an image, on record deletion and on failure
       paths that must not leave orphan files.

Validation Rules:
    1. Extension must be one of .jpeg, .jpg, .png (case-insensitive)
    2. Declared content type must be image/jpeg, image/jpg or image/png
    3. Size must be between 1 byte and max_file_size (5,000,000 by default)

File Naming:
    <epoch-milliseconds>-<8 random hex chars><original extension>
    e.g. 1718030400123-9f86d081.jpg, stored flat in upload_dir and served
    at /uploads/<name>.

Compensating Deletes:
    discard()/discard_url() never raise. They return a CleanupResult the
    caller inspects; a crash between storing a file and discarding it can
    still leave an orphan.
"""

import logging
import secrets
import time
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

import aiofiles
import aiofiles.os

from busadmin.exceptions import FileStorageError, ValidationError

logger = logging.getLogger(__name__)

UPLOAD_FIELD = "busImage"
UPLOAD_URL_PREFIX = "/uploads"

ALLOWED_EXTENSIONS = {".png", ".jpg", ".jpeg"}
ALLOWED_CONTENT_TYPES = {"image/png", "image/jpeg", "image/jpg"}


@dataclass(frozen=True)
class ImageUpload:
    """An image received in a multipart request, before validation."""

    filename: str
    content_type: Optional[str]
    content: bytes
    content_length: Optional[int] = None


@dataclass(frozen=True)
class StoredImage:
    """An accepted image written to the upload directory."""

    filename: str
    path: Path
    url: str


@dataclass(frozen=True)
class CleanupResult:
    """
    Outcome of a best-effort delete.

    outcome:
        removed  the file existed and was deleted
        missing  nothing to delete (already gone)
        skipped  the reference is not a stored upload (placeholder/foreign URL)
        failed   the delete raised; `error` holds the reason
    """

    outcome: str
    target: str
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.outcome != "failed"


class UploadStore:
    """Server-local image store backing the /uploads URL space."""

    def __init__(
        self,
        upload_dir: str,
        max_file_size: int = 5_000_000,
        public_base_url: str = "",
    ):
        self.upload_dir = Path(upload_dir).resolve()
        self.max_file_size = max_file_size
        self.public_base_url = public_base_url.rstrip("/")
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        logger.info("UploadStore initialized with upload_dir=%s", self.upload_dir)

    # ── Validation ────────────────────────────────────────────────────────

    def validate_extension(self, filename: str) -> str:
        """
        Returns: Normalized extension (lowercase with dot).
        Raises:  ValidationError if the extension is not allowed.
        """
        ext = Path(filename).suffix.lower()
        if ext not in ALLOWED_EXTENSIONS:
            raise ValidationError(
                message=(
                    f"File type '{ext or filename}' is not supported. "
                    f"Allowed types: {', '.join(sorted(ALLOWED_EXTENSIONS))}"
                ),
                field=UPLOAD_FIELD,
                context={"extension": ext, "allowed": sorted(ALLOWED_EXTENSIONS)},
            )
        return ext

    def validate_content_type(self, content_type: Optional[str]) -> str:
        """Checks the content type declared by the client for the file part."""
        normalized = (content_type or "").split(";")[0].strip().lower()
        if normalized not in ALLOWED_CONTENT_TYPES:
            raise ValidationError(
                message="Only .png, .jpg and .jpeg format allowed!",
                field=UPLOAD_FIELD,
                context={"content_type": normalized, "allowed": sorted(ALLOWED_CONTENT_TYPES)},
            )
        return normalized

    def validate_size(self, content_length: Optional[int], actual_size: int) -> None:
        """
        Rejects empty files and files above max_file_size.

        Args:
            content_length: Size reported by the multipart part (may be None)
            actual_size: Number of bytes actually read
        """
        if actual_size == 0:
            raise ValidationError(
                message="Uploaded image is empty.",
                field=UPLOAD_FIELD,
            )

        reported = max(content_length or 0, actual_size)
        if reported > self.max_file_size:
            raise ValidationError(
                message=(
                    f"File size exceeds maximum of {self.max_file_size} bytes. "
                    "Please upload a smaller image."
                ),
                field=UPLOAD_FIELD,
                context={"max_size": self.max_file_size, "actual_size": reported},
            )

    # ── Naming & URLs ─────────────────────────────────────────────────────

    def _generate_filename(self, extension: str) -> str:
        return f"{int(time.time() * 1000)}-{secrets.token_hex(4)}{extension}"

    def url_for(self, filename: str) -> str:
        return f"{self.public_base_url}{UPLOAD_URL_PREFIX}/{filename}"

    def resolve(self, filename: str) -> Path:
        """
        Absolute path of a stored file name.

        Raises ValidationError if the name would escape upload_dir.
        """
        candidate = (self.upload_dir / filename).resolve()
        if candidate.parent != self.upload_dir:
            raise ValidationError(message="Invalid file path", context={"path": filename})
        return candidate

    def path_for_url(self, url: Optional[str]) -> Optional[Path]:
        """
        Path of the stored file an image URL refers to.

        Returns None for the placeholder and for anything outside the
        /uploads URL space, so callers never delete files they do not own.
        """
        if not url:
            return None
        local = url
        if self.public_base_url and local.startswith(self.public_base_url):
            local = local[len(self.public_base_url):]
        prefix = f"{UPLOAD_URL_PREFIX}/"
        if not local.startswith(prefix):
            return None
        name = local[len(prefix):]
        if not name:
            return None
        try:
            return self.resolve(name)
        except ValidationError:
            return None

    def list_files(self) -> List[str]:
        """Names of all files currently held by the store, sorted."""
        return sorted(p.name for p in self.upload_dir.iterdir() if p.is_file())

    # ── Storage ───────────────────────────────────────────────────────────

    async def store_file(self, content: bytes, extension: str) -> StoredImage:
        """
        Write validated file content to disk.

        Raises:
            FileStorageError if the write fails.
        """
        filename = self._generate_filename(extension)
        path = self.upload_dir / filename
        try:
            async with aiofiles.open(path, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error("Failed to store file at %s: %s", path, str(e))
            raise FileStorageError(
                message="Failed to save uploaded image. Please try again.",
                context={"path": str(path), "os_error": str(e)},
            )

        logger.info("File stored: %s (%d bytes)", filename, len(content))
        return StoredImage(filename=filename, path=path, url=self.url_for(filename))

    async def validate_and_store(self, upload: ImageUpload) -> StoredImage:
        """
        Full pipeline: extension → content type → size → write.

        Nothing is written unless every check passes.
        """
        ext = self.validate_extension(upload.filename)
        self.validate_content_type(upload.content_type)
        self.validate_size(upload.content_length, len(upload.content))
        return await self.store_file(upload.content, ext)

    # ── Release ───────────────────────────────────────────────────────────

    async def discard(self, path: Path) -> CleanupResult:
        """Best-effort delete of a stored file. Never raises."""
        target = str(path)
        try:
            if not await aiofiles.os.path.exists(path):
                logger.debug("Cleanup: file already gone: %s", path.name)
                return CleanupResult(outcome="missing", target=target)
            await aiofiles.os.remove(path)
        except OSError as e:
            logger.warning("Failed to clean up file %s: %s", target, str(e))
            return CleanupResult(outcome="failed", target=target, error=str(e))

        logger.info("Cleaned up file: %s", path.name)
        return CleanupResult(outcome="removed", target=target)

    async def discard_url(self, url: Optional[str]) -> CleanupResult:
        """Release the file behind an image URL, if this store owns it."""
        path = self.path_for_url(url)
        if path is None:
            return CleanupResult(outcome="skipped", target=url or "")
        return await self.discard(path)
