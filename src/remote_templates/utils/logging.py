"""
Logging utilities with structured formatting.
"""
import json
import logging
import logging.handlers
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .. import __version__


class JsonFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def __init__(self, **kwargs):
        """Initialize with optional fields."""
        self.additional_fields = kwargs
        super().__init__()

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "line": record.lineno,
        }

        # Template context if available
        if hasattr(record, "template_name"):
            log_data["template_name"] = record.template_name
        if hasattr(record, "url"):
            log_data["url"] = record.url

        if record.exc_info:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": self.formatException(record.exc_info)
            }

        log_data.update(self.additional_fields)

        return json.dumps(log_data)


class TemplateLoggerAdapter(logging.LoggerAdapter):
    """Stamps template_name and url on every record; fields set to None are left off."""

    def process(self, msg, kwargs):
        fields = {key: value for key, value in self.extra.items() if value is not None}
        kwargs.setdefault("extra", {}).update(fields)
        return msg, kwargs


def configure_logging(config: Union[Dict[str, Any], Any]) -> None:
    """
    Configure root logging.

    Args:
        config: Configuration dictionary or TemplateCacheConfiguration
    """
    if not isinstance(config, dict):
        config = config.model_dump()

    log_level = getattr(logging, str(config.get("log_level", "INFO")).upper(), logging.INFO)
    log_file = config.get("log_file")
    use_json = config.get("structured_logging", False)
    max_bytes = config.get("log_max_bytes", 10 * 1024 * 1024)
    backup_count = config.get("log_backup_count", 5)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handlers = [logging.StreamHandler(sys.stderr)]

    if log_file:
        log_path = Path(log_file)
        if log_path.parent != Path("."):
            log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=max_bytes,
            backupCount=backup_count
        ))

    if use_json:
        formatter = JsonFormatter(application="remote_templates", version=__version__)
    else:
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s"
        )

    for handler in handlers:
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    logging.debug(f"Logging configured with level: {logging.getLevelName(log_level)}")


def get_logger(
    name: str, template_name: Optional[str] = None, url: Optional[str] = None
) -> Union[logging.Logger, TemplateLoggerAdapter]:
    """
    Get a module logger, wrapped with template fields when any are given.

    The fields show up as template_name and url in JsonFormatter output.
    """
    logger = logging.getLogger(name)
    if template_name is None and url is None:
        return logger
    return TemplateLoggerAdapter(logger, {"template_name": template_name, "url": url})
