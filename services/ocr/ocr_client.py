# services/ocr/ocr_client.py

import logging
import random
from concurrent.futures import ThreadPoolExecutor, wait
from typing import Any, Callable, List, Optional, Sequence

import requests

from config import OcrConfig
from models.uploads import ImageFile, OcrBatchResult, OcrFileResult, OcrResult
from .text_transform import transform_text

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[float], None]
BatchProgressCallback = Callable[[int, float], None]

NO_TEXT_PLACEHOLDER = "No text extracted from image"
FALLBACK_TEXT_FIELDS = ("markdown", "text", "extracted_text", "content")


def interpret_ocr_response(result: Any) -> OcrResult:
    """
    Normalise the JSON body returned by the OCR endpoint.

    Args:
        result: Decoded JSON body

    Returns:
        OcrResult. Unknown shapes are treated as success with whatever text
        could be found.
    """
    if not isinstance(result, dict):
        if isinstance(result, str) and result:
            return OcrResult(success=True, text=result)
        return OcrResult(success=True, text=NO_TEXT_PLACEHOLDER)

    if result.get("status") == "success" and result.get("markdown"):
        return OcrResult(success=True, text=transform_text(result["markdown"]))

    if result.get("status") == "error" or result.get("error"):
        error = result.get("error")
        if not isinstance(error, str) or not error:
            error = "OCR processing failed"
        return OcrResult(success=False, error=error)

    for field in FALLBACK_TEXT_FIELDS:
        if result.get(field):
            return OcrResult(success=True, text=result[field])

    filename = result.get("filename")
    for value in result.values():
        if isinstance(value, str) and value and value != filename:
            return OcrResult(success=True, text=value)

    return OcrResult(success=True, text=NO_TEXT_PLACEHOLDER)


class OcrClient:
    def __init__(self, config: Optional[OcrConfig] = None, session: Optional[requests.Session] = None):
        """Initialize the OCR client

        Args:
            config: Endpoint and limits (defaults to OcrConfig())
            session: Optional pre-configured requests session
        """
        self.config = config or OcrConfig()
        self.session = session or requests.Session()

    def validate_image(self, image: ImageFile) -> Optional[str]:
        """Return an error message if the file must not be sent, else None"""
        if not image.is_image:
            return "Please upload a valid image file"
        if image.size > self.config.max_file_size:
            limit_mb = self.config.max_file_size // (1024 * 1024)
            return f"File size should be less than {limit_mb}MB"
        return None

    def extract_text_from_image(self, image: ImageFile) -> OcrResult:
        validation_error = self.validate_image(image)
        if validation_error:
            logger.warning(f"Rejected {image.filename}: {validation_error}")
            return OcrResult(success=False, error=validation_error)

        try:
            response = self.session.post(
                self.config.api_url,
                headers={"accept": "application/json"},
                files={"file": (image.filename, image.content, image.content_type)},
                timeout=self.config.timeout,
            )
        except requests.exceptions.ConnectionError as e:
            logger.error(f"OCR API Error: {str(e)}")
            return OcrResult(
                success=False, error="Network error: Unable to connect to OCR service"
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"OCR API Error: {str(e)}")
            return OcrResult(success=False, error=str(e) or "Failed to extract text from image")

        if not response.ok:
            logger.error(f"OCR API Error: HTTP {response.status_code} for {image.filename}")
            return OcrResult(success=False, error=f"HTTP error! status: {response.status_code}")

        try:
            body = response.json()
        except ValueError as e:
            logger.error(f"OCR API Error: invalid JSON body ({str(e)})")
            return OcrResult(success=False, error="Invalid response from OCR service")

        result = interpret_ocr_response(body)
        if result.success:
            logger.info(f"Extracted {len(result.text or '')} characters from {image.filename}")
        else:
            logger.warning(f"OCR failed for {image.filename}: {result.error}")
        return result

    def process_image_file(
        self, image: ImageFile, on_progress: Optional[ProgressCallback] = None
    ) -> OcrResult:
        """Run OCR on one file, reporting simulated progress.

        The request runs on a worker thread while the calling thread reports
        random values between 10 and 90 every progress_interval seconds, then
        100 once the request returns. The numbers are cosmetic; they do not
        measure the upload.
        """
        if on_progress is None:
            return self.extract_text_from_image(image)

        on_progress(0)
        with ThreadPoolExecutor(max_workers=1) as pool:
            future = pool.submit(self.extract_text_from_image, image)
            while True:
                done, _ = wait([future], timeout=self.config.progress_interval)
                if done:
                    break
                on_progress(min(90, random.random() * 80 + 10))
            result = future.result()
        on_progress(100)
        return result

    def process_images(
        self,
        images: Sequence[ImageFile],
        on_progress: Optional[BatchProgressCallback] = None,
    ) -> OcrBatchResult:
        """OCR several files one after another and merge the extracted text"""
        results: List[OcrFileResult] = []
        texts: List[str] = []

        for idx, image in enumerate(images):
            callback = None
            if on_progress is not None:
                callback = lambda value, idx=idx: on_progress(idx, value)
            try:
                result = self.process_image_file(image, callback)
            except Exception as e:
                logger.error(f"Failed to process {image.filename}: {str(e)}")
                result = OcrResult(success=False, error="Failed to process image")

            results.append(OcrFileResult(filename=image.filename, result=result))
            if result.success and result.text:
                texts.append(result.text)

        succeeded = sum(1 for r in results if r.result.success)
        return OcrBatchResult(
            results=results,
            combined_text=self.config.batch_delimiter.join(texts),
            succeeded=succeeded,
            failed=len(results) - succeeded,
        )
