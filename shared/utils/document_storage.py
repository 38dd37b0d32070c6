import logging
import os
from datetime import datetime, timedelta, timezone
from urllib.parse import urlencode

from jose import jwt

from shared.core.config import settings

logger = logging.getLogger(__name__)

SIGNED_URL_PURPOSE = "document_download"


class DocumentStorage:
    """Bucket-style blob store backed by a directory on local disk.

    Keys are relative paths inside the bucket (``<user_id>/<name>.pdf``).
    Private objects are only reachable through expiring signed URLs served
    by the parking service download endpoint.
    """

    def __init__(self, base_dir: str, bucket: str):
        self.bucket = bucket
        self.root = os.path.abspath(os.path.join(base_dir, bucket))

    def _resolve(self, path: str) -> str:
        full_path = os.path.abspath(os.path.join(self.root, path))
        if os.path.commonpath([full_path, self.root]) != self.root:
            raise ValueError(f"Path escapes bucket: {path}")
        return full_path

    def put(self, key: str, content: bytes, content_type: str) -> dict:
        full_path = self._resolve(key)
        if os.path.exists(full_path):
            # no upsert
            raise FileExistsError(key)

        os.makedirs(os.path.dirname(full_path), exist_ok=True)
        with open(full_path, "wb") as f:
            f.write(content)

        logger.info("Stored %s (%d bytes, %s) in bucket %s",
                    key, len(content), content_type, self.bucket)
        return {"path": key, "url": f"{self.bucket}/{key}"}

    def delete(self, path: str):
        full_path = self._resolve(path)
        os.remove(full_path)
        logger.info("Removed %s from bucket %s", path, self.bucket)

    def exists(self, path: str) -> bool:
        try:
            return os.path.isfile(self._resolve(path))
        except ValueError:
            return False

    def local_path(self, path: str) -> str:
        return self._resolve(path)

    def signed_url(self, path: str, expires_in: int = 3600) -> str:
        expires = datetime.now(timezone.utc) + timedelta(seconds=expires_in)
        token = jwt.encode(
            {
                "path": path,
                "bucket": self.bucket,
                "purpose": SIGNED_URL_PURPOSE,
                "exp": expires,
            },
            settings.JWT_SECRET,
            algorithm=settings.JWT_ALGORITHM,
        )
        query = urlencode({"token": token})
        return f"{settings.PUBLIC_BASE_URL}/api/parking/documents/download?{query}"

    def path_from_signed_token(self, token: str) -> str:
        """Return the object path for a signed URL token.

        Raises ``jose.JWTError`` for expired or tampered tokens and
        ``ValueError`` when the token was not issued for this bucket.
        """
        payload = jwt.decode(token, settings.JWT_SECRET,
                             algorithms=[settings.JWT_ALGORITHM])
        if payload.get("purpose") != SIGNED_URL_PURPOSE or payload.get("bucket") != self.bucket:
            raise ValueError("Token was not issued for this bucket")
        return payload["path"]


document_storage = DocumentStorage(settings.UPLOAD_DIR, settings.DOCUMENTS_BUCKET)
