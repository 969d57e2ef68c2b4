"""
Storage for uploaded product images.

Images are written to the uploads directory as '<epoch-ms>-<filename>' and
referenced by their public path only. Their content is never inspected.
"""

import logging
import re
import time
from pathlib import Path
from typing import Optional

from fastapi import UploadFile

from .. import config

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r'[^A-Za-z0-9._-]+')


class ImageStore:
    """Saves uploads under a directory served at config.UPLOADS_URL_PREFIX."""

    def __init__(self, upload_dir: Path, url_prefix: str = config.UPLOADS_URL_PREFIX):
        self.upload_dir = Path(upload_dir)
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        self.url_prefix = url_prefix.rstrip('/')

    async def save(self, upload: Optional[UploadFile]) -> Optional[str]:
        """
        Persist an uploaded image.

        Args:
            upload: Multipart file, or None when no image was sent

        Returns:
            Public URL path of the stored image, or None
        """
        if upload is None or not upload.filename:
            return None

        filename = f"{int(time.time() * 1000)}-{safe_filename(upload.filename)}"
        target = self.upload_dir / filename

        content = await upload.read()
        target.write_bytes(content)

        logger.info(f"Stored image {filename} ({len(content)} bytes)")
        return f"{self.url_prefix}/{filename}"

    def discard(self, image_url: Optional[str]) -> None:
        """Delete an image stored by save(), e.g. when its command is rejected."""
        if not image_url or not image_url.startswith(self.url_prefix + '/'):
            return

        target = self.upload_dir / Path(image_url).name
        if target.exists():
            target.unlink()
            logger.info(f"Discarded image {target.name}")


def safe_filename(name: str) -> str:
    """Strip directories and unusual characters from an uploaded name."""
    base = Path(name).name
    cleaned = _UNSAFE_CHARS.sub('_', base).strip('._')
    return cleaned or 'image'
