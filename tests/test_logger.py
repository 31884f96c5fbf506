import logging
import logging.config

from helpdesk.core import logger as logger_module
from helpdesk.core.logger import configure_logging, logger


def test_logger_name():
    assert logger.name == "helpdesk"


def test_missing_config_falls_back_to_basic_config(tmp_path, monkeypatch):
    calls = []
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.append(kwargs))
    monkeypatch.setattr(
        logging.config, "fileConfig", lambda *a, **kw: calls.append("fileConfig")
    )

    configure_logging(tmp_path / "absent.conf", tmp_path / "log" / "app.log")

    assert len(calls) == 1
    assert calls[0]["level"] == logging.INFO
    assert not (tmp_path / "log").exists()


def test_config_file_gets_log_path(tmp_path, monkeypatch):
    applied = []
    monkeypatch.setattr(
        logging.config,
        "fileConfig",
        lambda parser, disable_existing_loggers: applied.append((parser, disable_existing_loggers)),
    )
    log_file = tmp_path / "nested" / "log" / "app.log"

    configure_logging(logger_module._LOGGING_CONF, log_file)

    parser, disable_existing = applied[0]
    assert disable_existing is False
    assert str(log_file) in parser.get("handler_file", "args")
    assert "%(asctime)s" in parser.get("formatter_standard", "format")
    assert log_file.parent.is_dir()
