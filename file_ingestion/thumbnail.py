"""Fixed-size JPEG previews for image uploads."""

import hashlib
from pathlib import Path
from typing import Optional, Union

from PIL import Image, ImageOps

from file_ingestion.config import ThumbnailConfig
from file_ingestion.detector import FormatDetector
from file_ingestion.logger import Timer, get_logger

logger = get_logger(__name__)

THUMBNAIL_SUFFIX = "_thumb.jpg"


class ThumbnailGenerator:
    """Cover-cropped previews of image uploads.

    Failures are never raised: they are logged and reported as ``None``.
    """

    def __init__(self, config: Optional[ThumbnailConfig] = None):
        self.config = config or ThumbnailConfig()

    def thumbnail_path(self, source: Path) -> Path:
        """Where the preview of ``source`` is written.

        Next to the upload the stored name is already unique. A shared
        ``output_dir`` collects uploads from many directories, so the name
        also carries a digest of the full source path.
        """
        if not self.config.output_dir:
            return source.parent / f"{source.name}{THUMBNAIL_SUFFIX}"

        digest = hashlib.sha256(str(source.resolve()).encode("utf-8")).hexdigest()[:12]
        return Path(self.config.output_dir) / f"{source.name}_{digest}{THUMBNAIL_SUFFIX}"

    def generate(self, source: Union[str, Path], mime_type: Optional[str]) -> Optional[Path]:
        if not FormatDetector.is_image(mime_type):
            return None

        source = Path(source)
        target = self.thumbnail_path(source)
        try:
            with Timer("thumbnail") as timer:
                with Image.open(source) as image:
                    preview = ImageOps.fit(
                        ImageOps.exif_transpose(image).convert("RGB"),
                        self.config.size,
                        Image.Resampling.LANCZOS,
                    )
                target.parent.mkdir(parents=True, exist_ok=True)
                preview.save(target, format="JPEG", quality=self.config.quality)
        except Exception as exc:
            target.unlink(missing_ok=True)
            logger.warning(
                "Thumbnail generation failed",
                extra_data={
                    "source": source.name,
                    "mime_type": mime_type,
                    "error_type": type(exc).__name__,
                    "error": str(exc),
                },
            )
            return None

        logger.debug(
            "Thumbnail generated",
            extra_data={
                "source": source.name,
                "thumbnail": target.name,
                "thumbnail_time_ms": timer.get_elapsed_ms(),
            },
        )
        return target
