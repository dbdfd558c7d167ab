"""Embedder — inline external image references as data URIs.

Input:  <animation>/animation.json + <animation>/images/<file>
Output: <dist>/<animation>/bundle.json (compact serialisation)

Per external-reference entry:
  - image present → ``p`` = data URI, ``e`` = 1, ``u`` removed
  - image missing, or no usable media type → warning, entry left untouched
Every other entry is copied through unchanged.
"""

from pathlib import Path
from typing import NamedTuple

import structlog

from app.config import resolve_dist_root
from app.errors import AssetIOError, FormatError
from app.utils.logging import get_logger
from codec.data_uri import encode
from models.animation import (
    BUNDLE_FILENAME,
    DOCUMENT_FILENAME,
    ExternalReference,
    classify_assets,
    dump_compact,
    load_document,
    write_text,
)
from models.reports import EmbedResult, EmbedStats
from resolvers.images import ImageResolver

logger = get_logger("transforms.embedder")


class EmbedOutcome(NamedTuple):
    document: dict
    stats: EmbedStats
    warnings: list[str]


def embed_document(document: dict, resolver: ImageResolver) -> EmbedOutcome:
    """Return a bundled copy of *document*; *document* itself is not modified.

    Raises:
        AssetIOError: If a referenced image exists but cannot be read.
    """
    stats = EmbedStats()
    warnings: list[str] = []

    if "assets" not in document:
        return EmbedOutcome(dict(document), stats, warnings)

    assets: list = []
    for ref, entry in zip(classify_assets(document), document["assets"] or []):
        if not isinstance(ref, ExternalReference):
            assets.append(entry)
            continue

        stats.has_images = True
        lookup = resolver.resolve(ref.filename)
        if not lookup.found:
            warnings.append(f"Image not found: {ref.filename}")
            logger.warning(
                "image_not_found",
                filename=ref.filename,
                search_path=str(lookup.path),
                reason=lookup.reason,
            )
            assets.append(entry)
            continue

        try:
            data = lookup.path.read_bytes()
        except OSError as exc:
            raise AssetIOError(f"cannot read image {ref.filename}: {exc}", lookup.path) from exc

        try:
            data_uri = encode(data, lookup.path.suffix)
        except FormatError as exc:
            warnings.append(f"Unsupported image type: {ref.filename}")
            logger.warning("image_type_unsupported", filename=ref.filename, reason=str(exc))
            assets.append(entry)
            continue

        embedded = dict(entry)
        embedded["p"] = data_uri
        embedded["e"] = 1
        embedded.pop("u", None)
        assets.append(embedded)

        stats.images_converted += 1
        stats.original_bytes += len(data)

    bundled = dict(document)
    bundled["assets"] = assets
    return EmbedOutcome(bundled, stats, warnings)


class Embedder:
    """Produce distributable single-file bundles.

    Args:
        dist_root: Output root; ``<dist_root>/<animation>/bundle.json`` is
            written per animation. Defaults to ``LOTTIE_DIST_ROOT`` then
            ``./dist``.
    """

    def __init__(self, dist_root: "Path | str | None" = None) -> None:
        self.dist_root = resolve_dist_root(dist_root)

    def bundle_path(self, animation_dir: "Path | str") -> Path:
        return self.dist_root / Path(animation_dir).name / BUNDLE_FILENAME

    def embed(self, animation_dir: "Path | str") -> EmbedResult:
        """Bundle one animation directory.

        Raises:
            MissingResourceError: If animation.json is missing.
            ParseError: If animation.json is not a valid document; nothing
                is written.
            AssetIOError: If an image cannot be read or the bundle cannot be
                written.
        """
        animation_dir = Path(animation_dir)
        name = animation_dir.name

        with structlog.contextvars.bound_contextvars(animation=name):
            document = load_document(animation_dir / DOCUMENT_FILENAME)
            outcome = embed_document(document, ImageResolver.for_animation(animation_dir))

        bundle_path = self.bundle_path(animation_dir)
        outcome.stats.output_bytes = write_text(bundle_path, dump_compact(outcome.document))

        logger.info(
            "bundle_written",
            animation=name,
            path=str(bundle_path),
            images_converted=outcome.stats.images_converted,
            original_bytes=outcome.stats.original_bytes,
            output_bytes=outcome.stats.output_bytes,
        )
        return EmbedResult(
            animation=name,
            bundle_path=bundle_path,
            stats=outcome.stats,
            warnings=outcome.warnings,
        )
