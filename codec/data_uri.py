"""Data-URI codec for inlined animation images.

Text form: ``data:image/<media-type>;base64,<payload>`` with the payload in
standard base64, no line wrapping.

Media-type rules:
  encode: file extension lower-cased, ``jpg`` -> ``jpeg``
  decode: ``svg+xml`` -> output extension ``svg``, anything else unchanged
"""

import base64
import binascii
import re
from pathlib import Path
from typing import NamedTuple

from app.errors import FormatError

DATA_URI_PREFIX = "data:image/"

# Word characters, optionally followed by "+xml" so svg+xml payloads decode.
_DATA_URI_RE = re.compile(r"data:image/(\w+(?:\+xml)?);base64,(.*)", re.DOTALL)
_MEDIA_TYPE_RE = re.compile(r"\w+(?:\+xml)?")

_EXTENSION_TO_MEDIA_TYPE: dict[str, str] = {"jpg": "jpeg"}
_MEDIA_TYPE_TO_EXTENSION: dict[str, str] = {"svg+xml": "svg"}


class DecodedImage(NamedTuple):
    media_type: str
    data: bytes


def media_type_for_extension(extension: str) -> str:
    """Map a file extension (with or without the leading dot) to a media type."""
    ext = extension.lstrip(".").lower()
    return _EXTENSION_TO_MEDIA_TYPE.get(ext, ext)


def extension_for_media_type(media_type: str) -> str:
    """Map a decoded media type to the extension used for the output file."""
    return _MEDIA_TYPE_TO_EXTENSION.get(media_type, media_type)


def is_data_uri(text: object) -> bool:
    """True when *text* has the shape of an inlined image (payload not checked)."""
    return isinstance(text, str) and _DATA_URI_RE.fullmatch(text) is not None


def encode(data: bytes, extension: str) -> str:
    """Encode raw image bytes as a data URI.

    Args:
        data:      Raw file bytes.
        extension: File extension (``png``, ``.JPG``) or media type
                   (``jpeg``); both normalise to the same media type.

    Raises:
        FormatError: If the extension is empty or does not map to a media
            type that :func:`decode` accepts.
    """
    media_type = media_type_for_extension(extension)
    if not _MEDIA_TYPE_RE.fullmatch(media_type):
        raise FormatError(f"no image media type for extension {extension!r}")
    payload = base64.b64encode(data).decode("ascii")
    return f"{DATA_URI_PREFIX}{media_type};base64,{payload}"


def encode_file(path: "Path | str") -> tuple[str, int]:
    """Read *path* and return ``(data_uri, original_size_in_bytes)``."""
    path = Path(path)
    data = path.read_bytes()
    return encode(data, path.suffix), len(data)


def decode(text: str) -> DecodedImage:
    """Decode a data URI back into its media type and exact original bytes.

    Raises:
        FormatError: If *text* does not match the data-URI pattern or the
            payload is not valid base64.
    """
    match = _DATA_URI_RE.fullmatch(text) if isinstance(text, str) else None
    if match is None:
        raise FormatError("text is not an inlined image data URI")

    media_type, payload = match.group(1), match.group(2)
    try:
        data = base64.b64decode(payload, validate=True)
    except binascii.Error as exc:
        raise FormatError(f"invalid base64 payload for image/{media_type}: {exc}") from exc
    return DecodedImage(media_type, data)
