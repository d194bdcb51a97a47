"""Logging configuration for Mockup Studio."""

import logging
import logging.handlers
from pathlib import Path

from ..config import LoggingConfig


LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Chatty client libraries
QUIET_LOGGERS = ("httpx", "httpcore", "google_genai", "urllib3")


def setup_logging(
    config: LoggingConfig | None = None,
    max_file_size: int = 10 * 1024 * 1024,
    backup_count: int = 5,
) -> logging.Logger:
    """Configure the root logger.
    
    Args:
        config: Level and optional log file; defaults to INFO on the console
        max_file_size: Rotation size for the file handler, in bytes
        backup_count: Number of rotated files to keep
        
    Returns:
        The configured root logger
    """
    config = config or LoggingConfig()
    
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, config.level.upper(), logging.INFO))
    root_logger.handlers.clear()
    
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)
    
    if config.file:
        log_file = Path(config.file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=max_file_size,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)
    
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    
    logging.getLogger(__name__).info(
        "Logging configured: level=%s file=%s", config.level, config.file
    )
    return root_logger
