"""
Server bootstrap: build the application and bind a listener.

HTTPS is chosen when a certificate directory exists in the working
directory, plain HTTP otherwise.
"""

import asyncio
import logging
import ssl
from dataclasses import dataclass
from pathlib import Path

import uvicorn

from appserver.core.config import Settings, get_settings
from appserver.main import create_application

logger = logging.getLogger(__name__)

CERT_FILE = "server.crt"
KEY_FILE = "server.key"

# Keeps listener tasks alive, the event loop only holds weak references
_listeners: set[asyncio.Task] = set()


@dataclass(frozen=True)
class TLSMaterial:
    """Paths of a certificate/key pair that loads into a server TLS context."""

    certfile: Path
    keyfile: Path


def load_tls_material(cert_dir: str | Path = "cert") -> TLSMaterial | None:
    """
    Check that ``server.crt`` and ``server.key`` in ``cert_dir`` form a usable pair.

    The pair is loaded once here so unreadable or mismatched material fails
    before a listener task exists. uvicorn loads it again by path.

    Returns:
        The TLS material, or None when ``cert_dir`` does not exist

    Raises:
        OSError: If the directory exists but a file cannot be read
        ssl.SSLError: If the files are not a matching PEM certificate and key
    """
    directory = Path(cert_dir)
    if not directory.exists():
        return None

    certfile = directory / CERT_FILE
    keyfile = directory / KEY_FILE
    ssl.create_default_context(ssl.Purpose.CLIENT_AUTH).load_cert_chain(certfile, keyfile)
    return TLSMaterial(certfile=certfile, keyfile=keyfile)


def _start(server: uvicorn.Server) -> asyncio.Task:
    task = asyncio.create_task(server.serve(), name="appserver-listener")
    _listeners.add(task)
    task.add_done_callback(_listeners.discard)
    return task


async def create_server(
    hostname: str,
    port: int,
    settings: Settings | None = None,
) -> uvicorn.Server | None:
    """
    Build the application and start listening on ``hostname:port``.

    The listener runs as a task on the current event loop.

    Args:
        hostname: Interface to bind
        port: Port to bind
        settings: Configuration snapshot, the cached environment settings if omitted

    Returns:
        The uvicorn server for plain HTTP, None when listening over HTTPS

    Raises:
        OSError: If the certificate directory exists but its files are unusable
    """
    settings = settings or get_settings()
    app = create_application(settings)

    tls = load_tls_material(settings.cert_dir)

    config = uvicorn.Config(
        app,
        host=hostname,
        port=port,
        access_log=False,  # AccessLogMiddleware owns access logging
        log_level="debug" if settings.debug else "info",
        ssl_certfile=str(tls.certfile) if tls else None,
        ssl_keyfile=str(tls.keyfile) if tls else None,
    )
    server = uvicorn.Server(config)
    _start(server)

    if tls:
        logger.info(
            "server is started on %s:%s(https) in %s mode", hostname, port, settings.app_env
        )
        return None

    logger.info("server is started on %s:%s in %s mode", hostname, port, settings.app_env)
    return server


async def wait_for_listeners() -> None:
    """Block until every listener started by ``create_server`` has exited."""
    while _listeners:
        await asyncio.gather(*list(_listeners))
