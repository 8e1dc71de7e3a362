"""Tests for the object upload helper."""

import re
from io import BytesIO

import httpx
import pytest
from PIL import Image

from app.config import settings
from app.services.storage_service import storage_service

RealAsyncClient = httpx.AsyncClient


def png_bytes(size=(32, 32)):
    buffer = BytesIO()
    Image.new("RGB", size, "red").save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def configured(monkeypatch):
    monkeypatch.setattr(settings, "SUPABASE_URL", "https://project.supabase.co")
    monkeypatch.setattr(settings, "SUPABASE_KEY", "service-key")
    monkeypatch.setattr(settings, "STORAGE_BUCKET", "uploads")


@pytest.fixture
def storage_backend(monkeypatch):
    """Route the storage client through an httpx MockTransport"""
    state = {"status": 200, "requests": []}

    def handler(request: httpx.Request) -> httpx.Response:
        state["requests"].append(request)
        return httpx.Response(state["status"], json={"Key": "uploads/object"})

    def client_factory(*args, **kwargs):
        return RealAsyncClient(transport=httpx.MockTransport(handler))

    monkeypatch.setattr("app.services.storage_service.httpx.AsyncClient", client_factory)
    return state


def test_object_name_keeps_extension():
    name = storage_service.generate_object_name("My Banner.PNG")
    assert re.fullmatch(r"[0-9a-f]{16}_\d{13}\.png", name)


@pytest.mark.asyncio
async def test_upload_returns_public_url(configured, storage_backend):
    url = await storage_service.upload_image("banner.png", png_bytes(), "image/png")

    assert url.startswith("https://project.supabase.co/storage/v1/object/public/uploads/")
    assert url.endswith(".png")
    request = storage_backend["requests"][0]
    assert request.method == "POST"
    assert request.headers["Authorization"] == "Bearer service-key"


@pytest.mark.asyncio
async def test_non_2xx_returns_none(configured, storage_backend):
    storage_backend["status"] = 500
    assert await storage_service.upload_image("banner.png", png_bytes(), "image/png") is None


@pytest.mark.asyncio
async def test_disallowed_type_is_rejected_without_request(configured, storage_backend):
    assert await storage_service.upload_image("notes.pdf", b"%PDF-1.4", "application/pdf") is None
    assert storage_backend["requests"] == []


@pytest.mark.asyncio
async def test_oversized_upload_is_rejected(configured, storage_backend, monkeypatch):
    monkeypatch.setattr(settings, "MAX_UPLOAD_SIZE", 10)
    assert await storage_service.upload_image("banner.png", png_bytes(), "image/png") is None
    assert storage_backend["requests"] == []


@pytest.mark.asyncio
async def test_bytes_that_are_not_an_image_are_rejected(configured, storage_backend):
    assert await storage_service.upload_image("fake.png", b"not an image", "image/png") is None


@pytest.mark.asyncio
async def test_unconfigured_storage_returns_none(monkeypatch, storage_backend):
    monkeypatch.setattr(settings, "SUPABASE_URL", None)
    assert await storage_service.upload_image("banner.png", png_bytes(), "image/png") is None
    assert storage_backend["requests"] == []


@pytest.mark.asyncio
async def test_network_error_returns_none(configured, monkeypatch):
    def handler(request):
        raise httpx.ConnectError("unreachable", request=request)

    monkeypatch.setattr(
        "app.services.storage_service.httpx.AsyncClient",
        lambda *args, **kwargs: RealAsyncClient(transport=httpx.MockTransport(handler))
    )
    assert await storage_service.upload_image("banner.png", png_bytes(), "image/png") is None
