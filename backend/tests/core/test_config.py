from simple_ksef.core.config import ServiceConfig


class TestServiceConfig:
    def test_defaults(self, monkeypatch):
        for name in ("SIMPLE_KSEF_ENV", "SIMPLE_KSEF_LOG_LEVEL", "SIMPLE_KSEF_DOCS_PATH"):
            monkeypatch.delenv(name, raising=False)

        cfg = ServiceConfig.from_env()

        assert cfg == ServiceConfig(environment="development", log_level="INFO", docs_path="/api")
        assert not cfg.is_production

    def test_reads_env_vars(self, monkeypatch):
        monkeypatch.setenv("SIMPLE_KSEF_ENV", " Production ")
        monkeypatch.setenv("SIMPLE_KSEF_LOG_LEVEL", "debug")
        monkeypatch.setenv("SIMPLE_KSEF_DOCS_PATH", "/docs")

        cfg = ServiceConfig.from_env()

        assert cfg.is_production
        assert cfg.log_level == "DEBUG"
        assert cfg.docs_path == "/docs"

    def test_blank_values_fall_back(self, monkeypatch):
        monkeypatch.setenv("SIMPLE_KSEF_ENV", "")
        monkeypatch.setenv("SIMPLE_KSEF_LOG_LEVEL", "  ")

        cfg = ServiceConfig.from_env()

        assert cfg.environment == "development"
        assert cfg.log_level == "INFO"
