"""Unit tests for revenue_architect.config — Settings loading and defaults."""

from pathlib import Path


class TestSettingsDefaults:
    """Verify that Settings loads correct defaults when no env is set."""

    def test_default_ollama_model(self):
        from revenue_architect.config import Settings

        s = Settings()
        assert s.ollama_model == "mistral"

    def test_default_ollama_base_url(self):
        from revenue_architect.config import Settings

        s = Settings()
        assert s.ollama_base_url == "http://localhost:11434"

    def test_default_data_paths(self):
        from revenue_architect.config import Settings

        s = Settings()
        assert s.benchmarks_path == Path("data/benchmarks/saas-stages.json")
        assert s.sessions_dir == Path("data/sessions")

    def test_default_logging(self):
        from revenue_architect.config import Settings

        s = Settings()
        assert s.log_level == "INFO"
        assert s.log_format == "text"


class TestSettingsOverride:
    """Verify that Settings picks up environment variable overrides."""

    def test_override_ollama_model(self, monkeypatch):
        monkeypatch.setenv("OLLAMA_MODEL", "llama3.2")
        from revenue_architect.config import Settings

        s = Settings()
        assert s.ollama_model == "llama3.2"

    def test_override_benchmarks_path(self, monkeypatch):
        monkeypatch.setenv("BENCHMARKS_PATH", "/tmp/benchmarks.json")
        from revenue_architect.config import Settings

        s = Settings()
        assert s.benchmarks_path == Path("/tmp/benchmarks.json")

    def test_override_log_format(self, monkeypatch):
        monkeypatch.setenv("LOG_FORMAT", "json")
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")
        from revenue_architect.config import Settings

        s = Settings()
        assert s.log_format == "json"
        assert s.log_level == "DEBUG"


class TestSingletonSettings:
    """Verify the module-level settings instance is accessible."""

    def test_settings_instance_exists(self):
        from revenue_architect.config import settings

        assert settings is not None
        assert hasattr(settings, "benchmarks_path")
