"""
Image Optimization Service
Validate uploaded images, then downscale and strip metadata
"""

import logging
from io import BytesIO
from typing import Tuple

from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)


class ImageOptimizer:
    """Keeps the original format so the stored extension stays truthful"""

    MAX_DIMENSION = 2048  # Max width or height

    @staticmethod
    def is_image(image_bytes: bytes) -> bool:
        """True when Pillow can identify and verify the bytes"""
        try:
            with Image.open(BytesIO(image_bytes)) as img:
                img.verify()
            return True
        except (UnidentifiedImageError, OSError, SyntaxError, ValueError):
            return False

    @staticmethod
    def optimize(image_bytes: bytes, content_type: str = "image/png") -> Tuple[bytes, str]:
        """
        Downscale to MAX_DIMENSION and re-encode without metadata

        Animated images are returned untouched. If anything fails the
        original bytes are returned.

        Returns:
            Tuple of (optimized_bytes, content_type)
        """
        try:
            img = Image.open(BytesIO(image_bytes))
            fmt = img.format or "PNG"
            if getattr(img, "is_animated", False):
                return image_bytes, content_type

            img.thumbnail((ImageOptimizer.MAX_DIMENSION, ImageOptimizer.MAX_DIMENSION), Image.Resampling.LANCZOS)

            output = BytesIO()
            if fmt == "JPEG":
                if img.mode not in ("RGB", "L"):
                    img = img.convert("RGB")
                img.save(output, format="JPEG", quality=90, optimize=True)
            else:
                img.save(output, format=fmt, optimize=True)

            optimized = output.getvalue()
            if len(optimized) >= len(image_bytes):
                return image_bytes, content_type
            return optimized, content_type
        except Exception as e:
            logger.debug("Image optimization skipped: %s", e)
            return image_bytes, content_type


# Singleton
image_optimizer = ImageOptimizer()
