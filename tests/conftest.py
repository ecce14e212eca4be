import io
from unittest.mock import AsyncMock

import pytest
from PIL import Image


def _make_png(color: tuple[int, int, int] = (255, 0, 0), size: tuple[int, int] = (4, 4)) -> bytes:
    """Encode a solid-colour RGB image as PNG bytes."""
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def png_bytes():
    """Factory: png_bytes(color, size) -> PNG-encoded solid image."""
    return _make_png


@pytest.fixture
def sample_image_bytes():
    """Minimal valid PNG for testing (1x1 white pixel)."""
    import base64
    return base64.b64decode(
        "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR4"
        "nGP4z8BQDwAEgAF/pooBPQAAAABJRU5ErkJggg=="
    )


@pytest.fixture
def red_image():
    return Image.new("RGB", (4, 4), (255, 0, 0))


@pytest.fixture
def fake_fetcher():
    """Network collaborator stand-in; set .fetch.return_value / side_effect per test."""
    fetcher = AsyncMock()
    fetcher.fetch = AsyncMock(return_value=_make_png())
    fetcher.close = AsyncMock()
    return fetcher


@pytest.fixture(autouse=True)
def _isolated_config(tmp_path, monkeypatch):
    """Keep tests away from the real ~/.pixcache and any PIXCACHE_* settings."""
    import pixcache.config.settings as settings

    monkeypatch.setattr(settings, "USER_CONFIG_PATH", tmp_path / "no-user" / "config.yaml")
    monkeypatch.setattr(settings, "find_project_config", lambda: None)
    for env_key in settings.CacheConfig.env_names():
        monkeypatch.delenv(env_key, raising=False)


@pytest.fixture
def cmyk_jpeg_bytes():
    """4x4 JPEG stored in CMYK, a mode PNG cannot hold."""
    buf = io.BytesIO()
    Image.new("CMYK", (4, 4), (0, 255, 255, 0)).save(buf, format="JPEG")
    return buf.getvalue()
