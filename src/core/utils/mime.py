from collections.abc import Mapping

from core.utils.constants import DEFAULT_CONTENT_TYPE_BINARY

MAGIC_BYTES: Mapping[bytes, str] = {
    b"\xff\xd8\xff": "image/jpeg",
    b"\x89PNG\r\n\x1a\n": "image/png",
    b"GIF87a": "image/gif",
    b"GIF89a": "image/gif",
    b"BM": "image/bmp",
    b"II*\x00": "image/tiff",
    b"MM\x00*": "image/tiff",
}


def detect_mime_type(file_data: bytes) -> str:
    """Sniff the MIME type of an upload from its leading bytes.

    Unknown content is reported as ``application/octet-stream``.
    """
    # WEBP shares the RIFF container with WAV/AVI
    if file_data[:4] == b"RIFF" and file_data[8:12] == b"WEBP":
        return "image/webp"

    for signature, mime in MAGIC_BYTES.items():
        if file_data.startswith(signature):
            return mime

    return DEFAULT_CONTENT_TYPE_BINARY


def normalize_mime_type(mime_type: str) -> str:
    """Lower-case a MIME type, drop parameters and fold ``image/jpg``."""
    base = mime_type.split(";", 1)[0].strip().lower()
    if base == "image/jpg":
        return "image/jpeg"
    return base
