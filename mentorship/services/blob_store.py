# mentorship/services/blob_store.py
import json
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Iterator, Optional, Tuple
import logging

from mentorship.errors import BlobNotFound, StorageError, ValidationError

logger = logging.getLogger(__name__)


class BlobStore:
    """Local filesystem store for submitted files, addressed by generated id"""

    def __init__(self, upload_dir: str = "uploads", max_file_size: int = 10 * 1024 * 1024):  # 10MB default
        self.upload_dir = Path(upload_dir)
        self.blob_dir = self.upload_dir / "blobs"
        self.max_file_size = max_file_size
        self.is_ready = False

    def open(self):
        """Create the storage directories and mark the store ready"""
        try:
            self.blob_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(f"Cannot prepare blob directory {self.blob_dir}: {e}") from e
        self.is_ready = True
        logger.info(f"Blob store ready at {self.blob_dir}")

    def close(self):
        self.is_ready = False

    def _require_ready(self):
        if not self.is_ready:
            raise StorageError("Blob store is not ready")

    def _data_path(self, blob_id: str) -> Path:
        # Ids are generated by put(); reject anything that could escape the directory
        if not blob_id or "/" in blob_id or "\\" in blob_id or ".." in blob_id:
            raise BlobNotFound(f"Blob {blob_id!r} not found")
        return self.blob_dir / blob_id

    def _meta_path(self, blob_id: str) -> Path:
        return self.blob_dir / f"{blob_id}.json"

    def validate_upload(self, filename: Optional[str], size: int):
        """
        Validate an uploaded file before it is stored

        Args:
            filename: Client supplied file name
            size: Size of the payload in bytes

        Raises:
            ValidationError: when the name is missing or the file is empty or too large
        """
        if not filename:
            raise ValidationError("File must have a filename")
        if size <= 0:
            raise ValidationError("File is empty")
        if size > self.max_file_size:
            raise ValidationError(
                f"File size exceeds maximum allowed size of {self.max_file_size / (1024*1024):.1f}MB"
            )

    def put(self, data: bytes, content_type: str, metadata: Optional[Dict[str, str]] = None) -> str:
        """
        Store bytes and return the generated blob id

        Args:
            data: File contents
            content_type: MIME type recorded for later downloads
            metadata: Free-form string metadata kept beside the blob

        Returns:
            The new blob id
        """
        self._require_ready()
        blob_id = uuid.uuid4().hex
        try:
            self._data_path(blob_id).write_bytes(data)
            self._meta_path(blob_id).write_text(
                json.dumps({"content_type": content_type, "metadata": metadata or {}}),
                encoding="utf-8",
            )
        except OSError as e:
            logger.error(f"Error storing blob {blob_id}: {str(e)}")
            for path in (self._data_path(blob_id), self._meta_path(blob_id)):
                path.unlink(missing_ok=True)
            raise StorageError(f"Error storing file: {str(e)}") from e

        logger.info(f"Blob stored successfully: {blob_id} ({len(data)} bytes)")
        return blob_id

    def get(self, blob_id: str) -> Tuple[bytes, str]:
        """Return the blob contents and its content type"""
        self._require_ready()
        path = self._data_path(blob_id)
        if not path.exists():
            raise BlobNotFound(f"Blob {blob_id} not found")
        try:
            data = path.read_bytes()
            content_type = "application/octet-stream"
            meta_path = self._meta_path(blob_id)
            if meta_path.exists():
                content_type = json.loads(meta_path.read_text(encoding="utf-8")).get(
                    "content_type", content_type
                )
        except (OSError, ValueError) as e:
            raise StorageError(f"Error reading blob {blob_id}: {str(e)}") from e
        return data, content_type

    def delete(self, blob_id: str):
        """
        Delete a blob

        Raises:
            BlobNotFound: when nothing is stored under blob_id
            StorageError: when the file exists but cannot be removed
        """
        self._require_ready()
        path = self._data_path(blob_id)
        if not path.exists():
            logger.warning(f"Blob not found for deletion: {blob_id}")
            raise BlobNotFound(f"Blob {blob_id} not found")
        try:
            path.unlink()
            self._meta_path(blob_id).unlink(missing_ok=True)
        except OSError as e:
            logger.error(f"Error deleting blob {blob_id}: {str(e)}")
            raise StorageError(f"Error deleting blob {blob_id}: {str(e)}") from e
        logger.info(f"Blob deleted successfully: {blob_id}")

    def exists(self, blob_id: str) -> bool:
        self._require_ready()
        try:
            return self._data_path(blob_id).exists()
        except BlobNotFound:
            return False

    def list_blobs(self) -> Iterator[Tuple[str, datetime]]:
        """Yield (blob_id, last modified UTC) for every stored blob"""
        self._require_ready()
        for path in self.blob_dir.iterdir():
            if path.is_file() and path.suffix != ".json":
                modified = datetime.fromtimestamp(path.stat().st_mtime, tz=timezone.utc)
                yield path.name, modified.replace(tzinfo=None)

    def get_storage_stats(self) -> dict:
        """Total number and size of stored blobs"""
        total_size = 0
        file_count = 0
        if self.is_ready:
            for path in self.blob_dir.iterdir():
                if path.is_file() and path.suffix != ".json":
                    total_size += path.stat().st_size
                    file_count += 1
        return {
            "ready": self.is_ready,
            "total_files": file_count,
            "total_size_bytes": total_size,
            "total_size_mb": round(total_size / (1024 * 1024), 2),
            "upload_directory": str(self.upload_dir),
        }
