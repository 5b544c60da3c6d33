from .config import (
    AppConfig,
    OcrConfig,
    StorageConfig,
    load_config,
    DEFAULT_STORAGE_KEY,
    DEFAULT_OCR_API_URL,
    MAX_IMAGE_SIZE,
)

__all__ = [
    "AppConfig",
    "OcrConfig",
    "StorageConfig",
    "load_config",
    "DEFAULT_STORAGE_KEY",
    "DEFAULT_OCR_API_URL",
    "MAX_IMAGE_SIZE",
]
