"""
Local filesystem blob store.

WHAT: Store uploaded attachments on disk and hand back a public URL
WHY: Attachments are served as static files next to the API
HOW: Write under STORAGE_DIR, URL = STORAGE_PUBLIC_BASE_URL + relative path
"""

from pathlib import Path

from ..utils.logger import get_logger

logger = get_logger(__name__)


class LocalBlobStore:
    """BlobStore implementation backed by a directory."""

    def __init__(self, root: str, public_base_url: str):
        self.root = Path(root).resolve()
        self.public_base_url = public_base_url.rstrip("/")

    def _target(self, path: str) -> Path:
        target = (self.root / path.lstrip("/")).resolve()
        if self.root not in target.parents:
            raise ValueError(f"Blob path escapes storage root: {path}")
        return target

    def upload(self, data: bytes, path: str, *, upsert: bool = True) -> str:
        target = self._target(path)
        if target.exists() and not upsert:
            raise FileExistsError(f"Blob already exists: {path}")

        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)

        relative = target.relative_to(self.root).as_posix()
        logger.info(f"Stored blob {relative} ({len(data)} bytes)")
        return f"{self.public_base_url}/{relative}"
