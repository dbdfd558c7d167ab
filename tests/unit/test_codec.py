"""Unit tests for the data-URI codec.

Covers:
  1. Media-type mapping — jpg → jpeg, everything else lower-cased as-is.
  2. Exact text form of encoded images (no line wrapping).
  3. Round trip — decode(encode(b, ext)) == (media_type_for_extension(ext), b).
  4. svg+xml payloads decode to the svg extension.
  5. Malformed text → FormatError.
"""

import base64
from pathlib import Path

import pytest

from app.errors import FormatError
from codec.data_uri import (
    decode,
    encode,
    encode_file,
    extension_for_media_type,
    is_data_uri,
    media_type_for_extension,
)

_PNG_BYTES = b"\x89PNG\r\n\x1a\n\x00\x01"


# ---------------------------------------------------------------------------
# Media types
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "extension, expected",
    [
        ("png", "png"),
        ("jpg", "jpeg"),
        ("JPG", "jpeg"),
        (".jpg", "jpeg"),
        ("jpeg", "jpeg"),
        ("GIF", "gif"),
        ("webp", "webp"),
        ("svg", "svg"),
    ],
)
def test_media_type_for_extension(extension: str, expected: str) -> None:
    assert media_type_for_extension(extension) == expected


def test_extension_for_media_type_maps_only_svg_xml() -> None:
    assert extension_for_media_type("svg+xml") == "svg"
    assert extension_for_media_type("png") == "png"
    assert extension_for_media_type("jpeg") == "jpeg"


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------


def test_encode_produces_unwrapped_data_uri() -> None:
    data = bytes(range(256)) * 4  # long enough that a wrapping encoder would wrap
    text = encode(data, "png")

    assert text.startswith("data:image/png;base64,")
    assert "\n" not in text
    assert text == "data:image/png;base64," + base64.b64encode(data).decode("ascii")


def test_encode_jpg_uses_jpeg_media_type() -> None:
    assert encode(b"\xff\xd8\xff", "jpg").startswith("data:image/jpeg;base64,")


def test_encode_file_returns_text_and_size(tmp_path: Path) -> None:
    image = tmp_path / "logo.PNG"
    image.write_bytes(_PNG_BYTES)

    text, size = encode_file(image)

    assert size == len(_PNG_BYTES)
    assert text == encode(_PNG_BYTES, "png")


# ---------------------------------------------------------------------------
# Round trip
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("extension", ["png", "jpg", "gif", "webp", "svg"])
def test_decode_reverses_encode(extension: str) -> None:
    data = _PNG_BYTES + extension.encode()
    assert decode(encode(data, extension)) == (media_type_for_extension(extension), data)


def test_round_trip_of_empty_bytes() -> None:
    assert decode(encode(b"", "png")) == ("png", b"")


def test_decoded_image_exposes_named_fields() -> None:
    decoded = decode(encode(_PNG_BYTES, "png"))
    assert decoded.media_type == "png"
    assert decoded.data == _PNG_BYTES


def test_decode_svg_xml_media_type() -> None:
    svg = b"<svg xmlns='http://www.w3.org/2000/svg'/>"
    text = "data:image/svg+xml;base64," + base64.b64encode(svg).decode("ascii")

    media_type, data = decode(text)

    assert media_type == "svg+xml"
    assert extension_for_media_type(media_type) == "svg"
    assert data == svg


# ---------------------------------------------------------------------------
# Malformed input
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "text",
    [
        "logo.png",
        "",
        "data:image/png;base64",          # no comma
        "data:text/plain;base64,AAAA",    # not an image
        "data:image/png,AAAA",            # not base64
        "data:image/;base64,AAAA",        # empty media type
        "data:image/png;base64,@@@@",     # invalid alphabet
        "data:image/png;base64,AAA",      # bad padding
    ],
)
def test_decode_rejects_malformed_text(text: str) -> None:
    with pytest.raises(FormatError):
        decode(text)


def test_format_error_is_a_value_error() -> None:
    with pytest.raises(ValueError):
        decode("not-a-data-uri")


def test_is_data_uri_checks_shape_only() -> None:
    assert is_data_uri("data:image/png;base64,AAAA")
    assert is_data_uri("data:image/png;base64,@@@@")  # payload is not inspected
    assert not is_data_uri("logo.png")
    assert not is_data_uri(None)
    assert not is_data_uri(42)


@pytest.mark.parametrize("extension", ["", ".", "tar-gz", "p ng", "png;x"])
def test_encode_rejects_extension_without_media_type(extension: str) -> None:
    with pytest.raises(FormatError):
        encode(b"0123456789", extension)


def test_encode_file_without_extension(tmp_path: Path) -> None:
    image = tmp_path / "logo"
    image.write_bytes(_PNG_BYTES)

    with pytest.raises(FormatError):
        encode_file(image)
