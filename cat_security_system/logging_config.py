"""Centralized logging configuration for the cat security system."""

import logging
import logging.handlers
import os
import sys
from datetime import datetime
from typing import Optional, Dict, Any
from pathlib import Path

LOGGER_PREFIX = "cat_security"


class StructuredFormatter(logging.Formatter):
    """Custom formatter that adds structured information to log records."""

    def __init__(self, include_context: bool = True):
        self.include_context = include_context
        super().__init__()

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with structured information."""
        base_format = "%(asctime)s | %(levelname)-8s | %(name)-32s | %(message)s"

        if self.include_context and hasattr(record, 'context'):
            context_str = " | ".join([f"{k}={v}" for k, v in record.context.items()])
            base_format += f" | Context: {context_str}"

        if record.levelno >= logging.ERROR and record.exc_info:
            base_format += " | %(pathname)s:%(lineno)d"

        formatter = logging.Formatter(base_format)
        return formatter.format(record)


class ContextFilter(logging.Filter):
    """Filter that adds system context to log records."""

    def __init__(self, component_name: Optional[str] = None):
        super().__init__()
        self.component_name = component_name
        self.process_id = os.getpid()

    def filter(self, record: logging.LogRecord) -> bool:
        record.process_id = self.process_id
        if self.component_name:
            record.component = self.component_name
        return True


class LoggingManager:
    """Installs console and rotating file handlers on the package logger."""

    def __init__(self, log_dir: Optional[str] = "logs", log_level: int = logging.INFO):
        self.log_dir = Path(log_dir) if log_dir else None

        # Log files
        self.main_log_file = None
        self.error_log_file = None
        self.performance_log_file = None
        if self.log_dir is not None:
            self.log_dir.mkdir(parents=True, exist_ok=True)
            self.main_log_file = self.log_dir / "security.log"
            self.error_log_file = self.log_dir / "errors.log"
            self.performance_log_file = self.log_dir / "performance.log"

        self.log_level = log_level
        self.max_log_size = 10 * 1024 * 1024  # 10MB
        self.backup_count = 5

        self._setup_package_logger()

    def _setup_package_logger(self) -> None:
        """Attach handlers to the ``cat_security`` logger hierarchy."""
        package_logger = logging.getLogger(LOGGER_PREFIX)
        package_logger.setLevel(self.log_level)

        for handler in list(package_logger.handlers):
            package_logger.removeHandler(handler)
            handler.close()

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(self.log_level)
        console_handler.setFormatter(StructuredFormatter(include_context=False))
        package_logger.addHandler(console_handler)

        if self.log_dir is not None:
            main_file_handler = logging.handlers.RotatingFileHandler(
                self.main_log_file,
                maxBytes=self.max_log_size,
                backupCount=self.backup_count
            )
            main_file_handler.setLevel(logging.DEBUG)
            main_file_handler.setFormatter(StructuredFormatter(include_context=True))
            package_logger.addHandler(main_file_handler)

            # Errors and critical only
            error_file_handler = logging.handlers.RotatingFileHandler(
                self.error_log_file,
                maxBytes=self.max_log_size,
                backupCount=self.backup_count
            )
            error_file_handler.setLevel(logging.ERROR)
            error_file_handler.setFormatter(StructuredFormatter(include_context=True))
            package_logger.addHandler(error_file_handler)

            perf_handler = logging.handlers.RotatingFileHandler(
                self.performance_log_file,
                maxBytes=self.max_log_size,
                backupCount=self.backup_count
            )
            perf_handler.setLevel(logging.INFO)
            perf_handler.setFormatter(logging.Formatter("%(asctime)s | %(message)s"))
            perf_logger = logging.getLogger(f"{LOGGER_PREFIX}.performance")
            for handler in list(perf_logger.handlers):
                perf_logger.removeHandler(handler)
                handler.close()
            perf_logger.addHandler(perf_handler)

        package_logger.info("Logging system initialized")

    def get_log_stats(self) -> Dict[str, Any]:
        """Get logging statistics."""
        stats = {
            "log_directory": str(self.log_dir) if self.log_dir else None,
            "log_files": {},
            "active_loggers": list(_component_loggers.keys()),
            "log_level": logging.getLevelName(self.log_level)
        }

        for log_file in [self.main_log_file, self.error_log_file, self.performance_log_file]:
            if log_file is not None and log_file.exists():
                stats["log_files"][log_file.name] = {
                    "size_mb": log_file.stat().st_size / (1024 * 1024),
                    "modified": datetime.fromtimestamp(log_file.stat().st_mtime).isoformat()
                }

        return stats


_component_loggers: Dict[str, logging.Logger] = {}

# Set by setup_logging(); component loggers work without it.
logging_manager: Optional[LoggingManager] = None


def get_logger(component_name: str) -> logging.Logger:
    """Get or create a logger for a specific component."""
    if component_name in _component_loggers:
        return _component_loggers[component_name]

    logger = logging.getLogger(f"{LOGGER_PREFIX}.{component_name}")
    logger.addFilter(ContextFilter(component_name))
    _component_loggers[component_name] = logger
    return logger


def log_with_context(logger: logging.Logger, level: int,
                     message: str, context: Optional[Dict[str, Any]] = None) -> None:
    """Log message with additional context information."""
    if context:
        logger.log(level, message, extra={"context": context})
    else:
        logger.log(level, message)


def log_performance(message: str, metrics: Optional[Dict[str, Any]] = None) -> None:
    """Log performance metrics to the performance logger."""
    perf_logger = logging.getLogger(f"{LOGGER_PREFIX}.performance")

    if metrics:
        metric_str = " | ".join([f"{k}={v}" for k, v in metrics.items()])
        message = f"{message} | {metric_str}"

    perf_logger.info(message)


def setup_logging(log_level: str = "INFO", log_dir: Optional[str] = "logs") -> LoggingManager:
    """Setup centralized logging system."""
    global logging_manager

    numeric_level = getattr(logging, log_level.upper(), logging.INFO)
    logging_manager = LoggingManager(log_dir, numeric_level)
    return logging_manager
