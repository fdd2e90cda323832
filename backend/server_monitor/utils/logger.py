import logging
import sys
from pathlib import Path

from server_monitor.core.config import Settings, settings as app_settings


def setup_logging(config: Settings = app_settings) -> logging.Logger:
    """Setup application logging"""

    logger = logging.getLogger("server_monitor")
    logger.setLevel(getattr(logging, config.log_level.upper(), logging.INFO))

    # Repeated calls (tests, reloads) must not stack handlers
    if logger.handlers:
        return logger

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if config.log_file:
        log_path = Path(config.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger
