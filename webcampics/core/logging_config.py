"""
Logging Setup
=============

Console logging for the service plus the two append-only audit logs
(upload.log and cleanup.log) kept under the configured logs directory.
"""
import logging
from pathlib import Path
from typing import Optional

from webcampics.core.config import Settings
from webcampics.utils.datetime_utils import from_timestamp

UPLOAD_AUDIT_LOGGER = "webcampics.audit.upload"
CLEANUP_AUDIT_LOGGER = "webcampics.audit.cleanup"

_AUDIT_FORMAT = "[%(asctime)s] %(message)s"
_AUDIT_DATEFMT = "%Y-%m-%d %H:%M:%S"
_CONSOLE_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class AuditFormatter(logging.Formatter):
    """Audit lines are stamped in the configured application timezone."""

    def formatTime(self, record, datefmt=None):
        return from_timestamp(record.created).strftime(datefmt or _AUDIT_DATEFMT)


def _attach_file_handler(logger_name: str, path: Path) -> None:
    audit_logger = logging.getLogger(logger_name)
    audit_logger.setLevel(logging.INFO)

    target = str(path.resolve())
    for handler in list(audit_logger.handlers):
        if not isinstance(handler, logging.FileHandler):
            continue
        if handler.baseFilename == target:
            return
        # Reconfigured with a different logs directory
        audit_logger.removeHandler(handler)
        handler.close()

    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setFormatter(AuditFormatter(_AUDIT_FORMAT, datefmt=_AUDIT_DATEFMT))
    audit_logger.addHandler(handler)


def configure_logging(settings: Settings, console: Optional[bool] = True) -> None:
    """
    Configure console logging and attach the audit file handlers.

    Safe to call more than once; handlers are never duplicated.
    """
    if console:
        logging.basicConfig(level=settings.log_level, format=_CONSOLE_FORMAT)

    _attach_file_handler(UPLOAD_AUDIT_LOGGER, settings.logs_dir / "upload.log")
    _attach_file_handler(CLEANUP_AUDIT_LOGGER, settings.logs_dir / "cleanup.log")
