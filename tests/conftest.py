"""Shared pytest fixtures for richlinks tests."""

import io
import sys
from pathlib import Path

import httpx
import pytest
from PIL import Image

# Add the package to the path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path):
    """Keep tests away from the real user config."""
    config_home = tmp_path / "xdg-config"
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_home))
    monkeypatch.delenv("RICHLINKS_USER_AGENT", raising=False)
    return config_home


@pytest.fixture
def png_bytes() -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (40, 20), (200, 30, 30)).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def image_client_factory(png_bytes):
    """Build AsyncClients whose transport serves the test PNG (or a 404)."""

    def _factory(routes: dict[str, tuple[int, bytes, str]] | None = None) -> httpx.AsyncClient:
        table = routes if routes is not None else {"/img.png": (200, png_bytes, "image/png")}

        def handler(request: httpx.Request) -> httpx.Response:
            status, body, content_type = table.get(request.url.path, (404, b"", "text/plain"))
            return httpx.Response(status, content=body, headers={"content-type": content_type})

        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    return _factory
