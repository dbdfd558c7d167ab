"""Typed view over an animation document's asset table.

Each entry of ``assets[]`` is classified exactly once, by
:func:`classify_asset`, into one of three variants:

  - ``ExternalReference``: ``p`` = file name, ``u`` = ``"images/"``, no
    embedded flag.
  - ``InlinedAsset``: ``p`` = ``data:image/<type>;base64,<payload>``.
  - ``OpaqueAsset``: anything else (precomps, audio, malformed entries).
    Transforms pass these through unmodified.

The document itself stays a plain JSON tree (``dict``) so that fields this
package does not understand survive every transform untouched.
"""

import json
from pathlib import Path
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field

from app.errors import AssetIOError, DocumentShapeError, MissingResourceError, ParseError
from codec.data_uri import is_data_uri

EXTERNAL_URL_PREFIX = "images/"
IMAGES_DIRNAME = "images"
DOCUMENT_FILENAME = "animation.json"
METADATA_FILENAME = "metadata.json"
BUNDLE_FILENAME = "bundle.json"
MINIFIED_FILENAME = "animation.min.json"


class ExternalReference(BaseModel):
    """Asset entry pointing at a file under the animation's images/ directory."""

    kind: Literal["external"] = "external"
    index: int
    filename: str
    raw: dict[str, Any]


class InlinedAsset(BaseModel):
    """Asset entry carrying its image inline as a data URI."""

    kind: Literal["inlined"] = "inlined"
    index: int
    data_uri: str
    raw: dict[str, Any]


class OpaqueAsset(BaseModel):
    """Any entry that is neither an external nor an inlined image."""

    kind: Literal["opaque"] = "opaque"
    index: int
    raw: Any = None


AssetRef = Annotated[
    Union[ExternalReference, InlinedAsset, OpaqueAsset],
    Field(discriminator="kind"),
]


def classify_asset(entry: Any, index: int = 0) -> AssetRef:
    """Decide the variant of one ``assets[]`` entry."""
    if isinstance(entry, dict):
        path = entry.get("p")
        if is_data_uri(path):
            return InlinedAsset(index=index, data_uri=path, raw=entry)
        if (
            isinstance(path, str)
            and path
            and entry.get("u") == EXTERNAL_URL_PREFIX
            and not entry.get("e")
        ):
            return ExternalReference(index=index, filename=path, raw=entry)
    return OpaqueAsset(index=index, raw=entry)


def is_mixed_reference(entry: Any) -> bool:
    """True for an entry that points at an external file yet claims to be embedded."""
    return (
        isinstance(entry, dict)
        and isinstance(entry.get("p"), str)
        and bool(entry.get("p"))
        and not is_data_uri(entry.get("p"))
        and entry.get("u") == EXTERNAL_URL_PREFIX
        and bool(entry.get("e"))
    )


def classify_assets(document: dict) -> list[AssetRef]:
    """Classify every entry of *document*'s asset table, in table order."""
    return [classify_asset(entry, i) for i, entry in enumerate(document.get("assets") or [])]


def external_filenames(document: dict) -> list[str]:
    """File names referenced by external-reference entries, in table order."""
    return [
        ref.filename
        for ref in classify_assets(document)
        if isinstance(ref, ExternalReference)
    ]


# ----------------------------------------------------------------------
# Reading and writing documents
# ----------------------------------------------------------------------


def parse_document(text: str, source: "Path | str | None" = None) -> dict:
    """Parse *text* into a document tree.

    Raises:
        ParseError: If *text* is not JSON or nests too deeply to decode.
        DocumentShapeError: If *text* is JSON but not an object, or carries
            an ``assets`` field that is not a list.
    """
    try:
        document = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ParseError(str(exc), source) from exc
    except RecursionError as exc:
        raise ParseError("nesting too deep to decode", source) from exc

    if not isinstance(document, dict):
        raise DocumentShapeError("expected an object at top level", source)
    if "assets" in document and not isinstance(document["assets"], list):
        raise DocumentShapeError("'assets' must be a list", source)
    return document


def load_document(path: "Path | str") -> dict:
    """Read and parse the document at *path*.

    Raises:
        MissingResourceError: If the file does not exist.
        ParseError: If the file is not a valid document.
        AssetIOError: If the file exists but cannot be read.
    """
    path = Path(path)
    if not path.is_file():
        raise MissingResourceError(f"{path.name} not found", path)
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise ParseError(f"not UTF-8 text: {exc}", path) from exc
    except OSError as exc:
        raise AssetIOError(f"cannot read {path.name}: {exc}", path) from exc
    return parse_document(text, path)


def dump_compact(document: Any) -> str:
    """Serialise without whitespace, keeping insertion key order."""
    return json.dumps(document, separators=(",", ":"), ensure_ascii=False)


def dump_pretty(document: Any) -> str:
    """Serialise with 2-space indentation, keeping insertion key order."""
    return json.dumps(document, indent=2, ensure_ascii=False)


def write_text(path: "Path | str", text: str) -> int:
    """Write *text* as UTF-8 to *path*, creating parent directories.

    Returns:
        Number of bytes written.

    Raises:
        AssetIOError: On any filesystem failure.
    """
    path = Path(path)
    data = text.encode("utf-8")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
    except OSError as exc:
        raise AssetIOError(f"cannot write {path.name}: {exc}", path) from exc
    return len(data)


def write_bytes(path: "Path | str", data: bytes) -> int:
    """Binary counterpart of :func:`write_text`."""
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
    except OSError as exc:
        raise AssetIOError(f"cannot write {path.name}: {exc}", path) from exc
    return len(data)
