"""The application factory wires the database named in its settings."""
from fastapi.testclient import TestClient

from passvault.app.core.config import Settings
from passvault.app.main import create_app


def _settings(db_path) -> Settings:
    return Settings(
        DATABASE_URL=f"sqlite+aiosqlite:///{db_path}",
        SECRET_KEY="factory-secret",
        INTEGRITY_HASH_KEY="factory-integrity-key",
        CORS_ORIGINS="",
        LOG_LEVEL="WARNING",
    )


def _register(client: TestClient, login: str):
    return client.post(
        "/api/auth/register",
        json={"login": login, "master_password": "pw", "encryption_salt": "s"},
    )


class TestCreateApp:
    def test_uses_configured_database(self, tmp_path):
        db_path = tmp_path / "mine.db"

        with TestClient(create_app(_settings(db_path))) as client:
            assert _register(client, "zed").status_code == 201
            response = client.post("/api/auth/login", json={"login": "zed", "master_password": "pw"})
            assert response.status_code == 200

        assert db_path.exists()

    def test_apps_do_not_share_a_database(self, tmp_path):
        first = create_app(_settings(tmp_path / "first.db"))
        second = create_app(_settings(tmp_path / "second.db"))

        with TestClient(first) as client:
            assert _register(client, "zed").status_code == 201
        with TestClient(second) as client:
            assert _register(client, "zed").status_code == 201
            response = client.post("/api/auth/login", json={"login": "zed", "master_password": "pw"})
            assert response.status_code == 200

    def test_lifespan_creates_tables(self, tmp_path):
        app = create_app(_settings(tmp_path / "fresh.db"))

        with TestClient(app) as client:
            token = _register(client, "yan").json()["access_token"]
            response = client.get("/api/data/all", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 200
        assert response.json() == []
