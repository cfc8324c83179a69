import logging

from fastapi.testclient import TestClient

from simple_ksef.core.config import ServiceConfig
from simple_ksef.core.errors import DomainError, TokenValidationError
from simple_ksef import main


class TestMain:
    def test_health_check(self, client):
        r = client.get("/health")
        assert r.status_code == 200
        assert r.json() == {"status": "ok"}

    def test_v1_health_check(self, client):
        r = client.get("/api/v1/health")
        assert r.status_code == 200
        assert r.json() == {"status": "ok"}

    def test_domain_error_handler_returns_400(self, client):
        """
        Ensures DomainError is converted into a 400 response
        with a stable JSON payload.
        """

        # Add a test-only route to trigger the exception
        app = client.app

        @app.get("/_test/domain-error")
        def _raise_domain_error():
            raise DomainError("boom")

        r = client.get("/_test/domain-error")
        assert r.status_code == 400
        assert r.json() == {"detail": "boom"}

    def test_empty_token_validation_error_returns_400(self, client):
        app = client.app

        @app.get("/_test/token-error")
        def _raise_token_error():
            raise TokenValidationError([])

        r = client.get("/_test/token-error")
        assert r.status_code == 400
        assert r.json() == {"detail": []}

    def test_request_id_generated_and_echoed(self, client):
        r = client.get("/health")
        assert r.headers.get("x-request-id")

        r = client.get("/health", headers={"X-Request-ID": "abc-123"})
        assert r.headers["x-request-id"] == "abc-123"

    def test_unsafe_request_ids_replaced(self, client):
        for rid in ("x" * 500, "bad id!", "a;b"):
            r = client.get("/health", headers={"X-Request-ID": rid})
            assert r.headers["x-request-id"] != rid
            assert len(r.headers["x-request-id"]) == 32

    def test_access_log_written(self, client, caplog):
        with caplog.at_level(logging.INFO, logger="simple_ksef.api"):
            client.get("/health", headers={"X-Request-ID": "log-me"})

        [record] = [r for r in caplog.records if getattr(r, "request_id", None) == "log-me"]
        assert record.getMessage().startswith("GET /health -> 200")
        assert record.levelno == logging.INFO
        assert record.path == "/health"
        assert record.status_code == 200

    def test_openapi_contains_v1_routes(self, client):
        """
        Ensures the v1 router is actually mounted.
        """
        r = client.get("/openapi.json")
        assert r.status_code == 200

        schema = r.json()
        assert "/api/v1/taxpayer" in schema["paths"]
        assert "/api/v1/invoice" in schema["paths"]

    def test_openapi_metadata(self, client):
        """
        Guards against accidental API metadata regressions.
        """
        r = client.get("/openapi.json")
        schema = r.json()

        assert schema["info"]["title"] == "Simple KSeF API"
        assert schema["info"]["description"] == "API for issuing and managing KSeF invoices"
        assert schema["info"]["version"] == "0.1.0"

    def test_docs_served_outside_production(self, client):
        assert client.get("/api").status_code == 200

    def test_production_hides_openapi_and_docs(self):
        client = TestClient(main.create_app(ServiceConfig(environment="production")))

        assert client.get("/openapi.json").status_code == 404
        assert client.get("/api").status_code == 404
        assert client.get("/health").status_code == 200

    def test_create_app_registers_request_models(self, monkeypatch):
        seen = []
        monkeypatch.setattr(main, "register_models", lambda *models: seen.extend(models))

        main.create_app(ServiceConfig())

        assert set(seen) == set(main.REQUEST_MODELS)

    def test_run_uses_default_env(self, monkeypatch):
        calls = {}

        def fake_run(app_str, host, port, reload):
            calls["app_str"] = app_str
            calls["host"] = host
            calls["port"] = port
            calls["reload"] = reload

        # Patch uvicorn.run that is imported inside main.run()
        monkeypatch.setattr("uvicorn.run", fake_run, raising=True)

        # Ensure env vars are not set
        monkeypatch.delenv("PORT", raising=False)
        monkeypatch.delenv("RELOAD", raising=False)

        main.run()

        assert calls == {
            "app_str": "simple_ksef.main:app",
            "host": "0.0.0.0",
            "port": 8000,
            "reload": False,
        }

    def test_run_reads_env_vars(self, monkeypatch):
        calls = {}

        def fake_run(app_str, host, port, reload):
            calls["app_str"] = app_str
            calls["host"] = host
            calls["port"] = port
            calls["reload"] = reload

        monkeypatch.setattr("uvicorn.run", fake_run, raising=True)

        monkeypatch.setenv("PORT", "1234")
        monkeypatch.setenv("RELOAD", "true")

        main.run()

        assert calls["port"] == 1234
        assert calls["reload"] is True
