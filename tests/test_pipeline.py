"""
Middleware stage selection and ordering.
"""

import pytest
from fastapi.testclient import TestClient

from appserver.auth import Authenticator
from appserver.core.config import AuthSettings
from appserver.core.pipeline import build_pipeline
from appserver.core.sessions import SessionStore
from appserver.db.session import Database
from appserver.main import create_application

pytestmark = pytest.mark.pipeline


def stage_names(pipeline):
    return [stage.name for stage in pipeline]


@pytest.fixture
def auth_parts(settings):
    database = Database(settings.database_url)
    return SessionStore(["k"]), Authenticator(database)


class TestBuildPipeline:
    def test_minimal(self, settings):
        assert stage_names(build_pipeline(settings)) == [
            "access_log",
            "body_parser",
            "static_fallback",
        ]

    def test_everything_enabled(self, make_settings, auth_parts):
        settings = make_settings(cors=True, serve_static=True, auth=AuthSettings(keys=["k"]))

        assert stage_names(build_pipeline(settings, *auth_parts)) == [
            "access_log",
            "cors",
            "static",
            "body_parser",
            "session",
            "authentication",
            "auth_gate",
            "static_fallback",
        ]

    def test_auth_without_cors_or_static(self, auth_settings, auth_parts):
        assert stage_names(build_pipeline(auth_settings, *auth_parts)) == [
            "access_log",
            "body_parser",
            "session",
            "authentication",
            "auth_gate",
            "static_fallback",
        ]

    def test_auth_requires_collaborators(self, auth_settings):
        with pytest.raises(ValueError):
            build_pipeline(auth_settings)

    def test_pipeline_is_immutable(self, settings):
        pipeline = build_pipeline(settings)
        assert isinstance(pipeline, tuple)
        with pytest.raises(AttributeError):
            pipeline[0].name = "other"

    def test_application_uses_pipeline_order(self, make_settings):
        app = create_application(make_settings(cors=True))
        assert [m.cls for m in app.user_middleware] == [
            stage.middleware.cls for stage in app.state.pipeline
        ]


class TestCors:
    def test_cors_headers_when_enabled(self, make_settings):
        with TestClient(create_application(make_settings(cors=True))) as client:
            response = client.get(
                "/api/v1/health", headers={"Origin": "http://frontend.example"}
            )

        assert response.headers["access-control-allow-origin"] == "http://frontend.example"
        assert response.headers["access-control-allow-credentials"] == "true"

    def test_no_cors_headers_when_disabled(self, client):
        response = client.get("/api/v1/health", headers={"Origin": "http://frontend.example"})
        assert "access-control-allow-origin" not in response.headers

    def test_configured_origins(self, make_settings):
        settings = make_settings(cors=True, cors_origins="http://a.example, http://b.example")
        with TestClient(create_application(settings)) as client:
            allowed = client.get("/api/v1/health", headers={"Origin": "http://b.example"})
            denied = client.get("/api/v1/health", headers={"Origin": "http://c.example"})

        assert allowed.headers["access-control-allow-origin"] == "http://b.example"
        assert "access-control-allow-origin" not in denied.headers


class TestStaticStages:
    def test_fallback_serves_build_dir_without_auth(self, client, dist_dir):
        response = client.get("/app.js")
        assert response.status_code == 200
        assert "console.log" in response.text

    def test_index_page(self, client, dist_dir):
        response = client.get("/")
        assert response.status_code == 200
        assert response.text == "<html>index</html>"

    def test_missing_asset_falls_through_to_routes(self, client, dist_dir):
        assert client.get("/api/v1/health").status_code == 200
        assert client.get("/missing.js").status_code == 404

    def test_missing_build_dir_is_harmless(self, client):
        assert client.get("/api/v1/health").status_code == 200

    def test_auth_gate_protects_fallback_assets(self, auth_client, registered_user, dist_dir):
        assert auth_client.get("/app.js").status_code == 401

        auth_client.post("/login", json=registered_user)
        assert auth_client.get("/app.js").status_code == 200

    def test_serve_static_bypasses_auth_gate(self, make_settings, dist_dir):
        settings = make_settings(serve_static=True, auth=AuthSettings(keys=["k"]))
        with TestClient(create_application(settings)) as client:
            assert client.get("/app.js").status_code == 200
            assert client.get("/api/v1/health").status_code == 401
