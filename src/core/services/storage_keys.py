"""Storage key derivation and recovery.

Keys look like ``posts/<unix millis>_<sanitized name><ext>``. Public URLs
follow the store's ``.../object/public/<bucket>/<key...>`` convention, which
is what extract_key parses to find the key of an already stored object.
"""

import posixpath
import re
from urllib.parse import unquote, urlparse

from core.models.post import Post
from core.utils.constants import POST_KEY_PREFIX, PUBLIC_PATH_MARKER
from core.utils.time import utc_now_millis

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9\-_]")
_KEY_TIMESTAMP = re.compile(rf"^{re.escape(POST_KEY_PREFIX)}(\d+)_")


def derive_key(original_filename: str, *, timestamp_ms: int | None = None) -> str:
    """Build a unique object key for an uploaded file.

    Args:
        original_filename: Filename as supplied by the client
        timestamp_ms: Override for the Unix millisecond component

    Returns:
        Object key under the posts/ prefix
    """
    name = posixpath.basename(original_filename.replace("\\", "/"))
    base, extension = posixpath.splitext(name)
    safe_base = _UNSAFE_CHARS.sub("_", base)

    if timestamp_ms is None:
        timestamp_ms = utc_now_millis()

    return f"{POST_KEY_PREFIX}{timestamp_ms}_{safe_base}{extension.lower()}"


def extract_key(public_url: str | None) -> str | None:
    """Recover the object key from a public URL.

    The first segment after ``public`` is the bucket; the rest is the key.
    Returns None when the URL does not follow that layout.
    """
    if not public_url:
        return None

    try:
        path = urlparse(public_url).path
    except ValueError:
        return None

    segments = [unquote(segment) for segment in path.split("/") if segment]

    try:
        marker = segments.index(PUBLIC_PATH_MARKER)
    except ValueError:
        return None

    remaining = segments[marker + 1 :]
    if len(remaining) < 2:
        return None

    return "/".join(remaining[1:])


def resolve_image_key(post: Post) -> str | None:
    """Key of the object a post points at, if it can be determined."""
    if post.image_key:
        return post.image_key
    return extract_key(post.image_url)


def key_timestamp_ms(key: str) -> int | None:
    """Unix millisecond component of a key built by derive_key, if present."""
    match = _KEY_TIMESTAMP.match(key)
    return int(match.group(1)) if match else None
