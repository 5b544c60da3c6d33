# models/uploads.py

import mimetypes
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Union


@dataclass
class ImageFile:
    """An uploaded file as handed to the OCR client"""

    filename: str
    content: bytes
    content_type: str = "application/octet-stream"

    @property
    def size(self) -> int:
        return len(self.content)

    @property
    def is_image(self) -> bool:
        return (self.content_type or "").startswith("image/")

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "ImageFile":
        path = Path(path)
        content_type, _ = mimetypes.guess_type(path.name)
        return cls(
            filename=path.name,
            content=path.read_bytes(),
            content_type=content_type or "application/octet-stream",
        )


@dataclass
class OcrResult:
    success: bool
    text: Optional[str] = None
    error: Optional[str] = None


@dataclass
class OcrFileResult:
    filename: str
    result: OcrResult


@dataclass
class OcrBatchResult:
    results: List[OcrFileResult]
    combined_text: str
    succeeded: int
    failed: int
