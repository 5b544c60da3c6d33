from .circular import (
    AllCircularsData,
    Annexure,
    AnnexureType,
    Chapter,
    CircularContent,
    CircularMode,
    CircularStats,
    CircularType,
    Clause,
    NormalCircularContent,
)
from .uploads import ImageFile, OcrBatchResult, OcrFileResult, OcrResult

__all__ = [
    "AllCircularsData",
    "Annexure",
    "AnnexureType",
    "Chapter",
    "CircularContent",
    "CircularMode",
    "CircularStats",
    "CircularType",
    "Clause",
    "NormalCircularContent",
    "ImageFile",
    "OcrBatchResult",
    "OcrFileResult",
    "OcrResult",
]
