"""Best-effort image re-encoding before upload.

Large images are re-encoded with Pillow to shrink what goes to the object
store. The transcoder never fails an upload: anything it cannot decode or
encode is passed through unchanged and only logged.
"""

import io
from collections.abc import Mapping
from typing import Any

from aws_lambda_powertools import Logger
from PIL import Image

from core.models.post import TranscodedImage
from core.utils.constants import (
    PNG_COMPRESS_LEVEL,
    TRANSCODE_MIN_BYTES,
    TRANSCODE_QUALITY,
)
from core.utils.mime import normalize_mime_type

logger = Logger(UTC=True)

# mime type -> (Pillow format, output mime type, save options)
ENCODERS: Mapping[str, tuple[str, str, dict[str, Any]]] = {
    "image/jpeg": (
        "JPEG",
        "image/jpeg",
        {"quality": TRANSCODE_QUALITY, "progressive": True},
    ),
    "image/png": (
        "PNG",
        "image/png",
        {"optimize": True, "compress_level": PNG_COMPRESS_LEVEL},
    ),
    "image/webp": (
        "WEBP",
        "image/webp",
        {"quality": TRANSCODE_QUALITY},
    ),
}

FALLBACK_ENCODER = ENCODERS["image/jpeg"]

JPEG_MODES = frozenset({"RGB", "L", "CMYK"})
WEBP_MODES = frozenset({"RGB", "RGBA"})


def _prepare(img: Image.Image, fmt: str) -> Image.Image:
    """Convert the pixel mode to one the target encoder accepts."""
    if fmt == "JPEG" and img.mode not in JPEG_MODES:
        return img.convert("RGB")

    if fmt == "WEBP" and img.mode not in WEBP_MODES:
        has_alpha = "A" in img.mode or "transparency" in img.info
        return img.convert("RGBA" if has_alpha else "RGB")

    return img


def transcode_image(data: bytes, mime_type: str) -> TranscodedImage:
    """Re-encode an image to reduce its stored size.

    Rules:
    - non-image payloads and images under TRANSCODE_MIN_BYTES pass through
    - JPEG -> progressive JPEG, PNG -> max-compression PNG, WEBP -> WEBP
    - any other image type is converted to JPEG

    Args:
        data: Raw upload bytes
        mime_type: Declared MIME type of the upload

    Returns:
        Bytes to upload and the content type they carry
    """
    declared = normalize_mime_type(mime_type)
    unchanged = TranscodedImage(data=data, content_type=declared)

    if not declared.startswith("image/"):
        return unchanged

    if len(data) < TRANSCODE_MIN_BYTES:
        return unchanged

    fmt, output_mime, options = ENCODERS.get(declared, FALLBACK_ENCODER)

    try:
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            prepared = _prepare(img, fmt)

            buffer = io.BytesIO()
            prepared.save(buffer, format=fmt, **options)
            encoded = buffer.getvalue()

    except Exception as exc:
        logger.warning(
            "Image compression failed, using original",
            extra={
                "mime_type": declared,
                "size": len(data),
                "error": str(exc),
                "error_type": type(exc).__name__,
            },
        )
        return unchanged

    reduction = (len(data) - len(encoded)) / len(data) * 100
    logger.info(
        "Image compressed",
        extra={
            "mime_type": declared,
            "output_mime_type": output_mime,
            "original_size": len(data),
            "compressed_size": len(encoded),
            "reduction_pct": round(reduction, 1),
        },
    )

    return TranscodedImage(data=encoded, content_type=output_mime)


def transcode(data: bytes, mime_type: str) -> bytes:
    """Return the re-encoded bytes only; see transcode_image."""
    return transcode_image(data, mime_type).data
