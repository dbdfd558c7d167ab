"""Catalog index generation for the animation repository.

Aggregates every animation directory (document + metadata + images/ +
optional bundle) into a single ``index.json`` that conforms to
``contracts/schemas/AnimationIndex.v1.json``. Paths in the index are
relative to the repository root; no hosting URLs are built here.
"""

import json
from pathlib import Path
from typing import Any

import jsonschema

from app.batch import discover_animations
from app.errors import AssetPipelineError
from app.models.metadata import AnimationMetadata
from app.utils.logging import get_logger
from models.animation import (
    BUNDLE_FILENAME,
    DOCUMENT_FILENAME,
    IMAGES_DIRNAME,
    METADATA_FILENAME,
    ExternalReference,
    classify_assets,
    dump_pretty,
    load_document,
    write_text,
)

logger = get_logger("catalog.index")

INDEX_VERSION = "1.0.0"

# Fixed epoch timestamp so repeated runs over the same tree are byte-identical.
DEFAULT_GENERATED_AT = "1970-01-01T00:00:00Z"

_CONTRACTS_DIR = Path(__file__).resolve().parent.parent / "contracts" / "schemas"
INDEX_SCHEMA: dict = json.loads(
    (_CONTRACTS_DIR / "AnimationIndex.v1.json").read_text(encoding="utf-8")
)


def format_file_size(size: int) -> str:
    """Human-readable size: ``512 B``, ``1.50 KB``, ``2.00 MB``."""
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.2f} KB"
    return f"{size / (1024 * 1024):.2f} MB"


def directory_size(path: Path) -> int:
    """Total size of every regular file below *path*; 0 if it does not exist."""
    if not path.is_dir():
        return 0
    return sum(f.stat().st_size for f in path.rglob("*") if f.is_file())


def _number(value: Any, default: float) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not value:
        return default
    return value


def _load_metadata(animation_dir: Path) -> AnimationMetadata:
    metadata_file = animation_dir / METADATA_FILENAME
    if not metadata_file.is_file():
        return AnimationMetadata().with_defaults(animation_dir.name)
    raw = json.loads(metadata_file.read_text(encoding="utf-8"))
    return AnimationMetadata.model_validate(raw).with_defaults(animation_dir.name)


def build_entry(
    animation_dir: Path,
    document: dict,
    metadata: AnimationMetadata,
    dist_root: Path,
) -> dict:
    """Build the index entry for one animation."""
    name = animation_dir.name
    roots = animation_dir.parent.name

    image_count = sum(
        1 for ref in classify_assets(document) if isinstance(ref, ExternalReference)
    )

    declared_rate = _number(document.get("fr"), 0)
    frame_rate = declared_rate or 30
    frames = _number(document.get("op"), 0)
    duration = f"{frames / declared_rate:.2f}s" if frames and declared_rate else "unknown"

    animation_size = (animation_dir / DOCUMENT_FILENAME).stat().st_size
    images_size = directory_size(animation_dir / IMAGES_DIRNAME)

    entry: dict[str, Any] = {
        "name": metadata.name,
        "category": metadata.category,
        "description": metadata.description,
        "hasImages": image_count > 0,
        "imageCount": image_count,
        "paths": {
            "original": f"{roots}/{name}/{DOCUMENT_FILENAME}",
            "metadata": f"{roots}/{name}/{METADATA_FILENAME}",
        },
        "properties": {
            "version": str(document.get("v") or "unknown"),
            "frameRate": frame_rate,
            "frames": frames,
            "duration": duration,
            "dimensions": f"{_number(document.get('w'), 0)}x{_number(document.get('h'), 0)}",
        },
        "fileSize": {
            "animation": format_file_size(animation_size),
            "images": format_file_size(images_size),
            "total": format_file_size(animation_size + images_size),
        },
        "tags": list(metadata.tags),
    }

    bundle_file = dist_root / name / BUNDLE_FILENAME
    if bundle_file.is_file():
        entry["paths"]["bundle"] = f"{dist_root.name}/{name}/{BUNDLE_FILENAME}"
        entry["fileSize"]["bundle"] = format_file_size(bundle_file.stat().st_size)

    return entry


def build_index(
    animations_root: "Path | str",
    dist_root: "Path | str",
    generated_at: str = DEFAULT_GENERATED_AT,
) -> dict:
    """Aggregate every animation under *animations_root* into an index.

    Animations without a parseable document or metadata are skipped with an
    error log line; they never abort the index.

    Raises:
        MissingResourceError: If *animations_root* does not exist.
    """
    dist_root = Path(dist_root)
    index: dict[str, Any] = {
        "version": INDEX_VERSION,
        "generatedAt": generated_at,
        "totalAnimations": 0,
        "categories": {},
        "animations": {},
    }

    for animation_dir in discover_animations(animations_root):
        name = animation_dir.name
        try:
            document = load_document(animation_dir / DOCUMENT_FILENAME)
            metadata = _load_metadata(animation_dir)
            entry = build_entry(animation_dir, document, metadata, dist_root)
        except (AssetPipelineError, ValueError, OSError, RecursionError) as exc:
            logger.error("index_entry_skipped", animation=name, error=str(exc))
            continue

        index["categories"].setdefault(entry["category"], []).append(name)
        index["animations"][name] = entry
        index["totalAnimations"] += 1
        logger.info("index_entry_added", animation=name, category=entry["category"])

    return index


def validate_index(index: dict) -> None:
    """Raise ``jsonschema.ValidationError`` if *index* breaks the contract."""
    jsonschema.validate(instance=index, schema=INDEX_SCHEMA)


def write_index(path: "Path | str", index: dict) -> int:
    """Validate *index* against the contract and write it pretty-printed.

    Returns:
        Number of bytes written.

    Raises:
        jsonschema.ValidationError: If *index* breaks the contract; nothing
            is written.
        AssetIOError: If the file cannot be written.
    """
    validate_index(index)
    return write_text(path, dump_pretty(index))
