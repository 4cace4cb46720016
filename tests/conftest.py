"""
pytest configuration and fixtures.

Every test gets its own file-backed SQLite database, build directory and
certificate directory under ``tmp_path``.
"""

import datetime
import ipaddress

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.x509.oid import NameOID
from fastapi.testclient import TestClient

from appserver.core.config import AuthSettings, Settings
from appserver.db.session import Database
from appserver.main import create_application

SESSION_KEYS = ["test-session-key-one", "test-session-key-two"]


@pytest.fixture
def make_settings(tmp_path):
    """Factory building isolated settings; keyword arguments override fields."""

    def _make(**overrides) -> Settings:
        values = {
            "database_url": f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
            "static_dir": str(tmp_path / "dist"),
            "cert_dir": str(tmp_path / "cert"),
            "app_env": "test",
        }
        values.update(overrides)
        return Settings(_env_file=None, **values)

    return _make


@pytest.fixture
def settings(make_settings):
    """Settings without the auth section."""
    return make_settings()


@pytest.fixture
def auth_settings(make_settings):
    """Settings with session authentication enabled."""
    return make_settings(auth=AuthSettings(keys=SESSION_KEYS))


@pytest.fixture
def client(settings):
    """Test client for an application without authentication."""
    with TestClient(create_application(settings)) as c:
        yield c


@pytest.fixture
def auth_app(auth_settings):
    return create_application(auth_settings)


@pytest.fixture
def auth_client(auth_app):
    """Test client for an application with session authentication."""
    with TestClient(auth_app) as c:
        yield c


@pytest.fixture
def test_user():
    """Sample credentials."""
    return {"username": "alice", "password": "S3cure-Passw0rd!"}


@pytest.fixture
def registered_user(auth_client, test_user):
    """Register ``test_user`` and log the client back out."""
    response = auth_client.post("/register", json=test_user)
    assert response.status_code == 200
    auth_client.post("/logout")
    return test_user


@pytest.fixture
async def database(settings):
    """Connected database for strategy-level tests."""
    db = Database(settings.database_url)
    await db.connect()
    yield db
    await db.dispose()


@pytest.fixture
def dist_dir(tmp_path):
    """Build directory with an index page and one asset."""
    dist = tmp_path / "dist"
    dist.mkdir()
    (dist / "index.html").write_text("<html>index</html>")
    (dist / "app.js").write_text("console.log('app');")
    return dist


@pytest.fixture(scope="session")
def tls_pair():
    """Self-signed certificate and key for 127.0.0.1, as PEM bytes."""
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "localhost")])
    now = datetime.datetime.now(datetime.timezone.utc)
    cert = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - datetime.timedelta(minutes=5))
        .not_valid_after(now + datetime.timedelta(days=1))
        .add_extension(
            x509.SubjectAlternativeName(
                [
                    x509.DNSName("localhost"),
                    x509.IPAddress(ipaddress.IPv4Address("127.0.0.1")),
                ]
            ),
            critical=False,
        )
        .sign(key, hashes.SHA256())
    )
    cert_pem = cert.public_bytes(serialization.Encoding.PEM)
    key_pem = key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.TraditionalOpenSSL,
        encryption_algorithm=serialization.NoEncryption(),
    )
    return cert_pem, key_pem
