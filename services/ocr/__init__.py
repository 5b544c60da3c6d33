from .ocr_client import OcrClient, interpret_ocr_response
from .text_transform import transform_text

__all__ = ["OcrClient", "interpret_ocr_response", "transform_text"]
