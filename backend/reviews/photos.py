"""
Student photo handling: the photo is stored inline as a `data:` URI.

Why:
    Reviews embed the image bytes instead of referencing a storage object, so
    record size grows with the image. We cap the URI length and make sure the
    payload is a real image of the declared type before it reaches the store.
"""
from __future__ import annotations

import base64
import binascii
from io import BytesIO
import re
from typing import Optional

from PIL import Image, UnidentifiedImageError

from .config import get_photo_max_chars
from .ports import ReviewValidationError

FIELD = "student_picture"

# declared MIME subtype -> Pillow format name
ALLOWED_TYPES = {
    "png": "PNG",
    "jpeg": "JPEG",
    "jpg": "JPEG",
    "gif": "GIF",
    "webp": "WEBP",
}

_DATA_URI_RE = re.compile(r"^data:image/(?P<subtype>[a-z0-9.+-]+);base64,(?P<payload>.*)$", re.IGNORECASE | re.DOTALL)


def is_data_uri_image(value: Optional[str]) -> bool:
    return bool(value) and str(value).startswith("data:image/")


def normalize_photo(value: object, *, max_chars: Optional[int] = None) -> Optional[str]:
    """Validate an embedded photo and return it unchanged (or None when empty).

    Raises:
        ReviewValidationError: `invalid_picture` for malformed URIs, unsupported
        types or undecodable bytes; `picture_too_large` above the size cap.
    """
    if value is None:
        return None
    if not isinstance(value, str):
        raise ReviewValidationError("invalid_picture", FIELD)
    uri = value.strip()
    if not uri:
        return None
    limit = max_chars if max_chars is not None else get_photo_max_chars()
    if len(uri) > limit:
        raise ReviewValidationError("picture_too_large", FIELD)
    m = _DATA_URI_RE.match(uri)
    if not m:
        raise ReviewValidationError("invalid_picture", FIELD)
    expected = ALLOWED_TYPES.get(m.group("subtype").lower())
    if expected is None:
        raise ReviewValidationError("invalid_picture", FIELD)
    try:
        raw = base64.b64decode(m.group("payload"), validate=True)
    except (binascii.Error, ValueError):
        raise ReviewValidationError("invalid_picture", FIELD)
    if not raw:
        raise ReviewValidationError("invalid_picture", FIELD)
    try:
        with Image.open(BytesIO(raw)) as img:
            actual = img.format
            img.verify()
    except (UnidentifiedImageError, OSError, SyntaxError):
        raise ReviewValidationError("invalid_picture", FIELD)
    if actual != expected:
        raise ReviewValidationError("invalid_picture", FIELD)
    return uri


__all__ = ["ALLOWED_TYPES", "is_data_uri_image", "normalize_photo"]
