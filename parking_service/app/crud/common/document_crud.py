import logging
import os
import re
import secrets
import time
from datetime import datetime, timezone
from typing import Optional

from shared.core.config import settings
from shared.utils.document_storage import document_storage

logger = logging.getLogger(__name__)

PDF_CONTENT_TYPE = "application/pdf"
PDF_MAGIC = b"%PDF"
MAX_FILENAME_LENGTH = 100


class DocumentService:
    """PDF schedule documents attached to reservations.

    Every method reports failures in its return value and logs them; none of
    them raise, so callers decide which HTTP error a failure maps to.
    """

    @staticmethod
    def validate_pdf(filename: Optional[str], content_type: Optional[str], content: bytes) -> dict:
        if not filename:
            return {"valid": False, "error": "No file provided"}

        if (content_type or "").lower() != PDF_CONTENT_TYPE:
            return {"valid": False, "error": "Only PDF files are allowed"}

        if len(content) > settings.MAX_DOCUMENT_SIZE:
            limit_mb = settings.MAX_DOCUMENT_SIZE / (1024 * 1024)
            return {"valid": False, "error": f"File size must be less than {limit_mb:g}MB"}

        if len(filename) > MAX_FILENAME_LENGTH:
            return {"valid": False, "error": f"Filename must be less than {MAX_FILENAME_LENGTH} characters"}

        if content[:4] != PDF_MAGIC:
            return {"valid": False, "error": "Invalid PDF file format"}

        return {"valid": True}

    @staticmethod
    def build_storage_key(user_id, filename: str) -> str:
        safe_name = re.sub(r"[^A-Za-z0-9._-]", "_", os.path.basename(filename))
        return f"{user_id}/{int(time.time() * 1000)}_{secrets.token_hex(4)}_{safe_name}"

    @staticmethod
    def upload_pdf(
        content: bytes,
        filename: str,
        content_type: Optional[str],
        user_id,
        reservation_id=None
    ) -> dict:
        validation = DocumentService.validate_pdf(filename, content_type, content)
        if not validation["valid"]:
            return {"success": False, "error": validation["error"]}

        key = DocumentService.build_storage_key(user_id, filename)
        try:
            stored = document_storage.put(key, content, PDF_CONTENT_TYPE)
        except (OSError, ValueError) as e:
            logger.error(f"Document upload failed for user {user_id}: {e}")
            return {"success": False, "error": "Failed to store document"}

        logger.info(f"Uploaded schedule document {key} "
                    f"(reservation {reservation_id or 'n/a'})")
        return {
            "success": True,
            "data": {
                "path": stored["path"],
                "filename": filename,
                "size": len(content),
                "content_type": PDF_CONTENT_TYPE,
                "uploaded_at": datetime.now(timezone.utc).isoformat(),
            }
        }

    @staticmethod
    def delete_pdf(path: Optional[str]) -> dict:
        if not path:
            return {"success": False, "error": "No document path"}

        try:
            document_storage.delete(path)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to delete document {path}: {e}")
            return {"success": False, "error": str(e)}
        return {"success": True}

    @staticmethod
    def get_signed_url(path: Optional[str], expires_in: int = None) -> dict:
        expires_in = expires_in or settings.SIGNED_URL_EXPIRE_SECONDS
        if not path or not document_storage.exists(path):
            logger.error(f"Cannot sign URL, document {path} is missing")
            return {"success": False, "error": "Document not found in storage"}

        return {
            "success": True,
            "url": document_storage.signed_url(path, expires_in),
            "expires_in": expires_in,
        }
