"""Shared test fixtures for the devserver test suite.

Provides settings pointing at a temporary template, a fixed host address
resolver and a TestClient for the application.
"""

from __future__ import annotations

from pathlib import Path

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from devserver.config.settings import ServerConfig, Settings
from devserver.domain.models import InfoSnapshot
from devserver.endpoint.server import create_app

TEMPLATE = """<html>
<head><title>{{ WelcomeMsg }}</title></head>
<body>
<p id="time">{{ Time }}</p>
<p id="host">{{ HostIP }}</p>
</body>
</html>
"""


# ---------------------------------------------------------------------------
# Settings Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def template_file(tmp_path: Path) -> Path:
    """An index.html template in a temporary directory."""
    path = tmp_path / "index.html"
    path.write_text(TEMPLATE, encoding="utf-8")
    return path


@pytest.fixture
def settings(template_file: Path) -> Settings:
    """Default settings with the template pointed at ``template_file``."""
    return Settings(server=ServerConfig(template_path=template_file))


# ---------------------------------------------------------------------------
# Application Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def host_ip() -> str:
    """Address reported as the host outbound IP (TEST-NET-1)."""
    return "192.0.2.10"


@pytest.fixture
def app(settings: Settings, host_ip: str) -> FastAPI:
    """The application with a fixed outbound address."""
    return create_app(settings, resolve_ip=lambda: host_ip)


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    """A test client for ``app``."""
    return TestClient(app)


@pytest.fixture
def sample_snapshot(host_ip: str) -> InfoSnapshot:
    return InfoSnapshot(
        welcome_message="Not Welcome - Develop Server",
        current_time="12:34:56",
        host_ip=host_ip,
    )
