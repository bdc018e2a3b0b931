"""Unit tests for logging setup."""

import logging

import pytest

from notemarker.utils.logger import LOGGER_PREFIX, get_logger, setup_logging


@pytest.fixture(autouse=True)
def restore_logging():
    yield
    setup_logging()


class TestGetLogger:
    def test_namespaced(self):
        assert get_logger("importer").name == "notemarker.importer"

    def test_package_names_unchanged(self):
        assert get_logger("notemarker.data.loader").name == "notemarker.data.loader"
        assert get_logger(LOGGER_PREFIX).name == "notemarker"


class TestSetupLogging:
    def test_console_format(self, capsys):
        setup_logging("INFO")
        get_logger("importer").warning("Skipping row 3")

        assert "WARNING: Skipping row 3" in capsys.readouterr().err

    def test_level_filters(self, capsys):
        setup_logging("WARNING")
        get_logger("importer").info("Loaded 4 markers")

        assert "Loaded 4 markers" not in capsys.readouterr().err

    def test_log_file(self, tmp_path):
        log_file = tmp_path / "logs" / "import.log"
        setup_logging("DEBUG", log_file, console=False)
        get_logger("importer").debug("Line 12 classified as continuation")

        assert "notemarker.importer - DEBUG - Line 12 classified as continuation" in log_file.read_text(encoding="utf-8")

    def test_reconfiguring_replaces_handlers(self, tmp_path):
        setup_logging("INFO", tmp_path / "first.log")
        package_logger = setup_logging("ERROR")

        assert len(package_logger.handlers) == 1
        assert package_logger.level == logging.ERROR

    def test_unknown_level(self):
        with pytest.raises(ValueError):
            setup_logging("LOUD")
