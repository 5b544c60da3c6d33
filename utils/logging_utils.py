import os
from datetime import datetime
import logging
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


def setup_logging(
    log_directory: Optional[str] = None,
    level: int = logging.INFO,
    name: str = "circulars",
) -> logging.Logger:
    """Attach console (and optionally file) handlers to the root logger.

    Modules log through logging.getLogger(__name__), so configuring the root
    logger once covers the whole application. Calling this again is a no-op
    apart from returning the named logger.

    Args:
        log_directory: If set, also write to <log_directory>/<name>_<timestamp>.log
        level: Logging level for the handlers
        name: Name of the logger returned to the caller
    """
    root = logging.getLogger()
    root.setLevel(level)

    # Only add handlers if they don't exist
    if not getattr(root, "_circulars_configured", False):
        formatter = logging.Formatter(LOG_FORMAT)

        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        root.addHandler(console_handler)

        if log_directory:
            os.makedirs(log_directory, exist_ok=True)
            timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
            log_file = os.path.join(log_directory, f"{name}_{timestamp}.log")
            file_handler = logging.FileHandler(log_file, encoding="utf-8")
            file_handler.setLevel(level)
            file_handler.setFormatter(formatter)
            root.addHandler(file_handler)

        root._circulars_configured = True

    return logging.getLogger(name)
