# config.py
import os
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv


DEFAULT_STORAGE_KEY = "all_circulars_data"
DEFAULT_OCR_API_URL = "https://master-ocr.onfinance.ai/ocr_image"
MAX_IMAGE_SIZE = 10 * 1024 * 1024  # 10MB


@dataclass
class StorageConfig:
    directory: str
    storage_key: str = DEFAULT_STORAGE_KEY


@dataclass
class OcrConfig:
    api_url: str = DEFAULT_OCR_API_URL
    max_file_size: int = MAX_IMAGE_SIZE
    timeout: Optional[float] = None
    batch_delimiter: str = "\n\n---\n\n"
    progress_interval: float = 0.2


@dataclass
class AppConfig:
    storage: StorageConfig
    ocr: OcrConfig = field(default_factory=OcrConfig)
    log_directory: Optional[str] = None


def load_config() -> AppConfig:
    """Load configuration from environment variables"""
    load_dotenv()

    storage_config = StorageConfig(
        directory=os.getenv("CIRCULAR_STORAGE_DIR", os.path.join("storage", "circulars")),
        storage_key=os.getenv("CIRCULAR_STORAGE_KEY", DEFAULT_STORAGE_KEY),
    )

    timeout = os.getenv("OCR_TIMEOUT")
    ocr_config = OcrConfig(
        api_url=os.getenv("OCR_API_URL", DEFAULT_OCR_API_URL),
        timeout=float(timeout) if timeout else None,
    )

    return AppConfig(
        storage=storage_config,
        ocr=ocr_config,
        log_directory=os.getenv("CIRCULAR_LOG_DIR"),
    )
