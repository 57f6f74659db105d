import pytest
from pydantic import ValidationError

from dirbackup.config import Settings


class TestSettings:
    def test_defaults(self, monkeypatch):
        for name in ("DIRBACKUP_LOG_LEVEL", "DIRBACKUP_LOG_FORMAT", "DIRBACKUP_KEEP_N"):
            monkeypatch.delenv(name, raising=False)

        settings = Settings.from_env()

        assert settings.log_level == "WARNING"
        assert settings.log_format == "json"
        assert settings.keep_n is None

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("DIRBACKUP_LOG_LEVEL", "debug")
        monkeypatch.setenv("DIRBACKUP_LOG_FORMAT", "console")
        monkeypatch.setenv("DIRBACKUP_KEEP_N", "3")

        settings = Settings.from_env()

        assert settings.log_level == "DEBUG"
        assert settings.log_format == "console"
        assert settings.keep_n == 3

    @pytest.mark.parametrize(
        "name, value",
        [
            ("DIRBACKUP_LOG_LEVEL", "LOUD"),
            ("DIRBACKUP_KEEP_N", "0"),
            ("DIRBACKUP_KEEP_N", "many"),
        ],
    )
    def test_rejects_invalid_values(self, monkeypatch, name, value):
        monkeypatch.setenv(name, value)

        with pytest.raises(ValidationError):
            Settings.from_env()
