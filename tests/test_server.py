"""
Transport selection, startup logging and database failure handling.
"""

import asyncio
import logging
import socket
import ssl
import time

import httpx
import pytest
import uvicorn
from fastapi.testclient import TestClient

from appserver import server as server_module
from appserver.db.session import Database
from appserver.main import create_application
from appserver.server import TLSMaterial, create_server, load_tls_material, wait_for_listeners

pytestmark = pytest.mark.transport


@pytest.fixture
def served(monkeypatch):
    """Replace the real listener loop, recording which servers were started."""
    started = []

    async def fake_serve(self, sockets=None):
        started.append(self)

    monkeypatch.setattr(uvicorn.Server, "serve", fake_serve)
    return started


@pytest.fixture
def cert_dir(tmp_path, tls_pair):
    cert_pem, key_pem = tls_pair
    directory = tmp_path / "cert"
    directory.mkdir()
    (directory / "server.crt").write_bytes(cert_pem)
    (directory / "server.key").write_bytes(key_pem)
    return directory


@pytest.fixture
def started_servers(monkeypatch):
    """Record the servers create_server starts, letting them really listen."""
    servers = []
    real_start = server_module._start

    def recording_start(server):
        servers.append(server)
        return real_start(server)

    monkeypatch.setattr(server_module, "_start", recording_start)
    return servers


def free_port() -> int:
    with socket.socket() as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


async def until_started(server: uvicorn.Server, timeout: float = 10.0) -> None:
    deadline = time.monotonic() + timeout
    while not server.started:
        assert time.monotonic() < deadline, "listener did not start"
        await asyncio.sleep(0.05)


def startup_lines(caplog):
    return [
        r.getMessage()
        for r in caplog.records
        if r.name == "appserver.server" and r.getMessage().startswith("server is started")
    ]


class TestLoadTlsMaterial:
    def test_no_cert_dir(self, tmp_path):
        assert load_tls_material(tmp_path / "cert") is None

    def test_loads_the_pair(self, cert_dir):
        assert load_tls_material(cert_dir) == TLSMaterial(
            certfile=cert_dir / "server.crt",
            keyfile=cert_dir / "server.key",
        )

    def test_unreadable_material_raises(self, cert_dir):
        (cert_dir / "server.key").unlink()
        with pytest.raises(OSError):
            load_tls_material(cert_dir)

    def test_garbage_material_raises(self, cert_dir):
        (cert_dir / "server.crt").write_bytes(b"not a certificate")
        with pytest.raises(ssl.SSLError):
            load_tls_material(cert_dir)


class TestCreateServer:
    async def test_plain_http(self, settings, served, caplog):
        caplog.set_level(logging.INFO, logger="appserver")

        handle = await create_server("127.0.0.1", 8123, settings)
        await wait_for_listeners()

        assert isinstance(handle, uvicorn.Server)
        assert served == [handle]
        assert handle.config.host == "127.0.0.1"
        assert handle.config.port == 8123
        assert handle.config.ssl_certfile is None
        assert startup_lines(caplog) == ["server is started on 127.0.0.1:8123 in test mode"]

    async def test_https_when_cert_dir_exists(self, settings, served, cert_dir, caplog):
        caplog.set_level(logging.INFO, logger="appserver")

        handle = await create_server("127.0.0.1", 8443, settings)
        await wait_for_listeners()

        assert handle is None
        assert len(served) == 1
        config = served[0].config
        assert config.ssl_certfile == str(cert_dir / "server.crt")
        assert config.ssl_keyfile == str(cert_dir / "server.key")
        assert config.port == 8443
        assert startup_lines(caplog) == [
            "server is started on 127.0.0.1:8443(https) in test mode"
        ]

    async def test_broken_cert_dir_aborts_startup(self, settings, served, cert_dir, caplog):
        caplog.set_level(logging.INFO, logger="appserver")
        (cert_dir / "server.crt").unlink()

        with pytest.raises(OSError):
            await create_server("127.0.0.1", 8443, settings)

        assert served == []
        assert not server_module._listeners
        assert startup_lines(caplog) == []

    async def test_environment_label(self, make_settings, served, caplog):
        caplog.set_level(logging.INFO, logger="appserver")

        await create_server("localhost", 3000, make_settings(app_env="development"))
        await wait_for_listeners()

        assert startup_lines(caplog) == ["server is started on localhost:3000 in development mode"]


class TestLoopback:
    async def test_plain_http_listener(self, settings, started_servers):
        port = free_port()
        handle = await create_server("127.0.0.1", port, settings)
        try:
            await until_started(handle)
            async with httpx.AsyncClient() as client:
                response = await client.get(f"http://127.0.0.1:{port}/api/v1/health")
        finally:
            handle.should_exit = True
            await wait_for_listeners()

        assert started_servers == [handle]
        assert response.status_code == 200

    async def test_https_listener(self, settings, cert_dir, started_servers):
        port = free_port()
        assert await create_server("127.0.0.1", port, settings) is None
        server = started_servers[0]
        context = ssl.create_default_context(cafile=str(cert_dir / "server.crt"))
        try:
            await until_started(server)
            async with httpx.AsyncClient(verify=context) as client:
                response = await client.get(f"https://127.0.0.1:{port}/api/v1/health")
        finally:
            server.should_exit = True
            await wait_for_listeners()

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestDatabaseErrors:
    def test_connection_error_is_logged_and_server_keeps_running(
        self, make_settings, tmp_path, caplog
    ):
        caplog.set_level(logging.INFO, logger="appserver")
        bad_url = f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'nested' / 'db.sqlite'}"
        app = create_application(make_settings(database_url=bad_url))

        with TestClient(app) as client:
            response = client.get("/api/v1/health")
            ready = client.get("/api/v1/health/ready")

        assert response.status_code == 200
        assert ready.json()["database"] is False
        assert ready.json()["status"] == "degraded"
        assert app.state.database.connected is False
        assert any(
            r.levelno == logging.ERROR and "Database connection error" in r.getMessage()
            for r in caplog.records
        )

    def test_healthy_database(self, client):
        response = client.get("/api/v1/health/ready")
        assert response.json()["database"] is True
        assert response.json()["status"] == "ready"

    def test_slow_database_does_not_hold_startup(self, make_settings, monkeypatch, caplog):
        caplog.set_level(logging.WARNING, logger="appserver")

        async def hanging_connect(self):
            await asyncio.sleep(3600)

        monkeypatch.setattr(Database, "connect", hanging_connect)
        app = create_application(make_settings(database_startup_timeout=0.1))

        began = time.monotonic()
        with TestClient(app) as client:
            startup = time.monotonic() - began
            response = client.get("/api/v1/health")
            connecting = app.state.database_connect
            assert not connecting.done()

        assert startup < 5
        assert response.status_code == 200
        assert connecting.cancelled()
        assert any("Database still connecting" in r.getMessage() for r in caplog.records)
