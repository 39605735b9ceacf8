import json
import logging
import logging.handlers

import pytest

from remote_templates.utils.logging import (
    JsonFormatter,
    TemplateLoggerAdapter,
    configure_logging,
    get_logger,
)


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


def _record(**extra):
    record = logging.LogRecord("remote_templates.test", logging.INFO, __file__, 10, "loaded %s", ("greet",), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_includes_template_context():
    formatter = JsonFormatter(application="remote_templates")
    data = json.loads(formatter.format(_record(template_name="greet", url="/views/greet.html")))

    assert data["message"] == "loaded greet"
    assert data["level"] == "INFO"
    assert data["template_name"] == "greet"
    assert data["url"] == "/views/greet.html"
    assert data["application"] == "remote_templates"


def test_json_formatter_without_context():
    data = json.loads(JsonFormatter().format(_record()))
    assert "template_name" not in data


def test_get_logger_with_context():
    logger = get_logger("remote_templates.test", template_name="greet")
    assert isinstance(logger, TemplateLoggerAdapter)
    assert logger.process("msg", {}) == ("msg", {"extra": {"template_name": "greet"}})


def test_get_logger_without_context():
    assert isinstance(get_logger("remote_templates.test"), logging.Logger)


def test_configure_logging_writes_json_file(tmp_path, restore_root_logger):
    log_file = tmp_path / "logs" / "templates.log"
    configure_logging({"log_level": "debug", "log_file": str(log_file), "structured_logging": True})

    logging.getLogger("remote_templates.test").info("hello", extra={"template_name": "greet"})
    for handler in restore_root_logger.handlers:
        handler.flush()

    lines = [json.loads(line) for line in log_file.read_text().splitlines()]
    entry = next(line for line in lines if line["message"] == "hello")
    assert entry["template_name"] == "greet"
    assert restore_root_logger.level == logging.DEBUG


def test_configure_logging_accepts_configuration(restore_root_logger):
    from remote_templates.config import TemplateCacheConfiguration

    configure_logging(TemplateCacheConfiguration(log_level="WARNING"))
    assert restore_root_logger.level == logging.WARNING


def test_get_logger_leaves_out_missing_url():
    logger = get_logger("remote_templates.test", template_name="greet", url=None)
    _, kwargs = logger.process("msg", {"extra": {"attempt": 1}})
    assert kwargs["extra"] == {"attempt": 1, "template_name": "greet"}


def test_configure_logging_rotation_from_configuration(tmp_path, restore_root_logger):
    from remote_templates.config import TemplateCacheConfiguration

    config = TemplateCacheConfiguration(
        log_file=str(tmp_path / "templates.log"),
        log_max_bytes=2048,
        log_backup_count=2,
    )
    configure_logging(config)

    rotating = [h for h in restore_root_logger.handlers if isinstance(h, logging.handlers.RotatingFileHandler)]
    assert len(rotating) == 1
    assert rotating[0].maxBytes == 2048
    assert rotating[0].backupCount == 2
