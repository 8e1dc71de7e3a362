"""
Storage Service
Supabase Storage integration for avatars, banners, badges and certificate art
"""

import logging
import secrets
import time
from pathlib import Path
from typing import Optional

import httpx
from fastapi import UploadFile

from app.config import settings
from app.services.image_optimizer import image_optimizer

logger = logging.getLogger(__name__)


class StorageService:
    """
    Supabase Storage helper

    Uploads never raise: any failure is logged and yields None, which
    callers treat as "keep the previous asset".
    """

    @staticmethod
    def is_configured() -> bool:
        return bool(settings.SUPABASE_URL and settings.SUPABASE_KEY)

    @staticmethod
    def generate_object_name(filename: str) -> str:
        """<random token>_<epoch millis>.<original extension>"""
        extension = Path(filename or "").suffix.lstrip(".").lower() or "bin"
        return f"{secrets.token_hex(8)}_{int(time.time() * 1000)}.{extension}"

    @staticmethod
    def public_url(path: str) -> str:
        base = settings.SUPABASE_URL.rstrip("/")
        return f"{base}/storage/v1/object/public/{settings.STORAGE_BUCKET}/{path}"

    @staticmethod
    async def upload_image(filename: str, content: bytes, content_type: Optional[str]) -> Optional[str]:
        """Upload an image and return its public URL, or None on any failure"""
        if not StorageService.is_configured():
            logger.warning("Upload skipped: Supabase Storage is not configured")
            return None

        content_type = (content_type or "").lower()
        if content_type not in settings.allowed_image_types:
            logger.warning("Upload rejected: content type %r is not allowed", content_type)
            return None

        if not content or len(content) > settings.MAX_UPLOAD_SIZE:
            logger.warning("Upload rejected: size %d outside 1..%d bytes", len(content or b""), settings.MAX_UPLOAD_SIZE)
            return None

        if not image_optimizer.is_image(content):
            logger.warning("Upload rejected: %s is not a readable image", filename)
            return None

        content, content_type = image_optimizer.optimize(content, content_type)

        path = StorageService.generate_object_name(filename)
        base = settings.SUPABASE_URL.rstrip("/")
        url = f"{base}/storage/v1/object/{settings.STORAGE_BUCKET}/{path}"

        headers = {
            "Authorization": f"Bearer {settings.SUPABASE_KEY}",
            "apikey": settings.SUPABASE_KEY,
            "Content-Type": content_type
        }

        try:
            async with httpx.AsyncClient(timeout=30) as client:
                resp = await client.post(url, headers=headers, content=content)
        except httpx.HTTPError as e:
            logger.error("Storage upload failed for %s: %s", path, e)
            return None

        if resp.status_code not in (200, 201):
            logger.error("Storage upload failed for %s: %s %s", path, resp.status_code, resp.text)
            return None

        return StorageService.public_url(path)

    @staticmethod
    async def upload_file(file: Optional[UploadFile]) -> Optional[str]:
        """Upload a multipart file field; None when absent, empty or failed"""
        if file is None or not file.filename:
            return None
        content = await file.read()
        if not content:
            return None
        return await StorageService.upload_image(file.filename, content, file.content_type)


storage_service = StorageService()
