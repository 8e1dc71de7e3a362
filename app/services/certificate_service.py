"""
Certificate Service
Renders issued certificates as downloadable PDF documents
"""

import logging
import re
import textwrap
from io import BytesIO
from typing import Optional, Tuple

import httpx
import img2pdf
from PIL import Image, ImageDraw, ImageFont

from app.schemas.award import Certificate

logger = logging.getLogger(__name__)

CANVAS_SIZE = (1600, 1131)
TEXT_COLOR = (33, 37, 41)
ACCENT_COLOR = (52, 73, 94)
FONT_CANDIDATES = ("DejaVuSans.ttf", "Arial.ttf", "arial.ttf")


class CertificateService:
    """Certificate document rendering"""

    @staticmethod
    def _load_font(font_size: int) -> ImageFont.ImageFont:
        for candidate in FONT_CANDIDATES:
            try:
                return ImageFont.truetype(candidate, font_size)
            except OSError:
                continue
        return ImageFont.load_default()

    @staticmethod
    def _draw_centered(draw: ImageDraw.ImageDraw, text: str, font: ImageFont.ImageFont, y: int, width: int, fill) -> int:
        """Draw one line centered horizontally; returns the y below it"""
        bbox = draw.textbbox((0, 0), text, font=font)
        text_width = bbox[2] - bbox[0]
        text_height = bbox[3] - bbox[1]
        draw.text(((width - text_width) // 2, y), text, fill=fill, font=font)
        return y + text_height + int(text_height * 0.6)

    @staticmethod
    async def _fetch_artwork(url: Optional[str]) -> Optional[Image.Image]:
        if not url:
            return None
        try:
            async with httpx.AsyncClient(timeout=10) as client:
                response = await client.get(url)
            if response.status_code != 200:
                logger.warning("Certificate artwork %s returned %s", url, response.status_code)
                return None
            artwork = Image.open(BytesIO(response.content))
            artwork.load()
            return artwork
        except (httpx.HTTPError, OSError) as e:
            logger.warning("Certificate artwork %s could not be loaded: %s", url, e)
            return None

    @staticmethod
    def render(certificate: Certificate, owner_name: str, artwork: Optional[Image.Image] = None) -> bytes:
        """Draw the certificate text over the artwork (or a blank canvas) and convert to PDF"""
        image = artwork if artwork is not None else Image.new("RGB", CANVAS_SIZE, "white")
        if image.mode != "RGB":
            image = image.convert("RGB")

        width, height = image.size
        draw = ImageDraw.Draw(image)
        title_font = CertificateService._load_font(max(24, width // 28))
        name_font = CertificateService._load_font(max(28, width // 22))
        body_font = CertificateService._load_font(max(16, width // 55))

        y = height // 4
        y = CertificateService._draw_centered(draw, certificate.title, title_font, y, width, ACCENT_COLOR)
        y = CertificateService._draw_centered(draw, owner_name, name_font, y + height // 20, width, TEXT_COLOR)

        for line in textwrap.wrap(certificate.content, width=70):
            y = CertificateService._draw_centered(draw, line, body_font, y, width, TEXT_COLOR)

        issued = f"{certificate.organization.value} - {certificate.issued_at.strftime('%B %d, %Y')}"
        CertificateService._draw_centered(draw, issued, body_font, height - height // 6, width, ACCENT_COLOR)

        img_buffer = BytesIO()
        image.save(img_buffer, format="PNG")
        return img2pdf.convert(img_buffer.getvalue())

    @staticmethod
    async def generate_certificate_pdf(certificate: Certificate, owner_name: str) -> Tuple[bytes, str]:
        """
        Build the PDF for an issued certificate

        Returns:
            Tuple of (pdf bytes, download filename)
        """
        artwork = await CertificateService._fetch_artwork(certificate.file_url)
        pdf_bytes = CertificateService.render(certificate, owner_name, artwork)
        slug = re.sub(r"[^a-z0-9]+", "-", (certificate.workshop_title or certificate.title).lower()).strip("-")
        return pdf_bytes, f"certificate-{slug or certificate.id}.pdf"


# Create singleton instance
certificate_service = CertificateService()
