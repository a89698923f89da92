"""Image text extraction with Pillow pre-processing and Tesseract OCR."""

import io
import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

import pytesseract
from PIL import Image, ImageOps

from file_ingestion.config import OCRConfig
from file_ingestion.extractor import Extractor
from file_ingestion.logger import Timer, get_logger
from file_ingestion.models import ExtractedText, UploadedFile

logger = get_logger(__name__)

NO_TEXT_FOUND = "No text found in image"


@contextmanager
def scratch_file(suffix: str, directory: Optional[str] = None) -> Iterator[Path]:
    """Reserve a uniquely named file that is removed when the block exits."""
    fd, name = tempfile.mkstemp(suffix=suffix, prefix="ocr_", dir=directory)
    os.close(fd)
    path = Path(name)
    try:
        yield path
    finally:
        path.unlink(missing_ok=True)


def preprocess_image(image: Image.Image, max_dimension: int, cutoff: float = 0) -> Image.Image:
    """Fit inside max_dimension (never upscaling), greyscale, stretch contrast."""
    image = ImageOps.exif_transpose(image)  # returns a copy
    if image.width > max_dimension or image.height > max_dimension:
        image.thumbnail((max_dimension, max_dimension), Image.Resampling.LANCZOS)
    return ImageOps.autocontrast(ImageOps.grayscale(image), cutoff=cutoff)


class ImageOcrExtractor(Extractor):
    """Two-stage OCR: normalize the image into a scratch PNG, then recognize it.

    The scratch PNG never outlives a call, whether recognition succeeds or not.
    """

    failure_message = "Image OCR processing failed"

    def __init__(self, config: Optional[OCRConfig] = None):
        self.config = config or OCRConfig()

        if self.config.tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = self.config.tesseract_cmd
        if self.config.tessdata_prefix:
            os.environ["TESSDATA_PREFIX"] = self.config.tessdata_prefix

    def _extract(self, upload: UploadedFile, data: bytes) -> ExtractedText:
        with scratch_file(".png", self.config.temp_dir) as optimized_path:
            with Timer("image_preprocess") as prep_timer:
                with Image.open(io.BytesIO(data)) as image:
                    original_size = image.size
                    optimized = preprocess_image(
                        image, self.config.max_dimension, self.config.contrast_cutoff
                    )
                optimized.save(optimized_path, format="PNG")

            with Timer("image_ocr") as ocr_timer:
                text = pytesseract.image_to_string(
                    str(optimized_path),
                    lang=self.config.languages,
                    config=self.config.tesseract_args(),
                )

        result = text.strip()
        logger.info(
            "Image OCR completed",
            extra_data={
                "file_name": upload.file_name,
                "image_dimensions": f"{original_size[0]}x{original_size[1]}",
                "ocr_dimensions": f"{optimized.width}x{optimized.height}",
                "characters_extracted": len(result),
                "preprocess_time_ms": prep_timer.get_elapsed_ms(),
                "ocr_time_ms": ocr_timer.get_elapsed_ms(),
            },
        )
        return ExtractedText(result or NO_TEXT_FOUND, ocr_used=True)
