"""Extractor — pull inlined images out of a bundle.

Input:  a bundle document (any document with data-URI asset entries)
Output: <out>/images/img_<n>.<ext> + <out>/animation.json (pretty-printed)

``n`` counts successfully decoded images from 0, in asset-table order, so
re-running on the same bundle always produces the same file names.
"""

import math
from pathlib import Path
from typing import Any, NamedTuple

from app.errors import AssetIOError, FormatError
from app.utils.logging import get_logger
from codec.data_uri import decode, extension_for_media_type
from models.animation import (
    DOCUMENT_FILENAME,
    EXTERNAL_URL_PREFIX,
    IMAGES_DIRNAME,
    InlinedAsset,
    classify_assets,
    dump_pretty,
    load_document,
    write_bytes,
    write_text,
)
from models.reports import ExtractedImage, ExtractionResult, ExtractionSummary

logger = get_logger("transforms.extractor")


class ExtractOutcome(NamedTuple):
    document: dict
    images: list[ExtractedImage]


def extract_document(document: dict) -> ExtractOutcome:
    """Return the slimmed copy of *document* and the images to write.

    Pure: nothing is written and *document* is not modified.
    """
    images: list[ExtractedImage] = []
    if "assets" not in document:
        return ExtractOutcome(dict(document), images)

    assets: list = []
    for ref, entry in zip(classify_assets(document), document["assets"] or []):
        if not isinstance(ref, InlinedAsset):
            assets.append(entry)
            continue

        try:
            media_type, data = decode(ref.data_uri)
        except FormatError as exc:
            # Undecodable payloads are left in place, same as non-image entries.
            logger.debug("inlined_asset_skipped", index=ref.index, reason=str(exc))
            assets.append(entry)
            continue

        filename = f"img_{len(images)}.{extension_for_media_type(media_type)}"
        images.append(ExtractedImage(filename=filename, media_type=media_type, data=data))

        external = dict(entry)
        external.pop("e", None)
        external["u"] = EXTERNAL_URL_PREFIX
        external["p"] = filename
        assets.append(external)

    slim = dict(document)
    slim["assets"] = assets
    return ExtractOutcome(slim, images)


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _number(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value


def summarize(document: dict, image_count: int) -> ExtractionSummary:
    """Timing and dimension summary of an extracted document."""
    frame_rate = _number(document.get("fr"))
    start = _number(document.get("ip")) or 0
    end = _number(document.get("op"))

    frames = end - start if end is not None else None
    duration = None
    if frames is not None and frame_rate:
        duration = _round_half_up(frames / frame_rate)

    return ExtractionSummary(
        image_count=image_count,
        width=document.get("w"),
        height=document.get("h"),
        frame_rate=document.get("fr"),
        frames=frames,
        duration=duration,
    )


class Extractor:
    """Reconstruct the directory shape from a bundle.

    Usage::

        result = Extractor().extract("dist/logo/bundle.json", "restored/logo")
        print(result.summary.image_count)
    """

    def extract(self, bundle_path: "Path | str", output_dir: "Path | str") -> ExtractionResult:
        """Extract *bundle_path* into *output_dir*.

        Raises:
            MissingResourceError: If the bundle file does not exist.
            ParseError: If the bundle is not a valid document; nothing is
                written.
            AssetIOError: If an output file cannot be written.
        """
        bundle_path = Path(bundle_path)
        output_dir = Path(output_dir)

        document = load_document(bundle_path)
        outcome = extract_document(document)

        images_dir = output_dir / IMAGES_DIRNAME
        try:
            images_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise AssetIOError(f"cannot create {IMAGES_DIRNAME}/: {exc}", images_dir) from exc

        image_paths: list[Path] = []
        for image in outcome.images:
            path = images_dir / image.filename
            size = write_bytes(path, image.data)
            image_paths.append(path)
            logger.info("image_extracted", filename=image.filename, size_bytes=size)

        document_path = output_dir / DOCUMENT_FILENAME
        write_text(document_path, dump_pretty(outcome.document))

        summary = summarize(outcome.document, len(outcome.images))
        logger.info(
            "bundle_extracted",
            bundle=str(bundle_path),
            output_dir=str(output_dir),
            image_count=summary.image_count,
        )
        return ExtractionResult(
            document_path=document_path,
            image_paths=image_paths,
            summary=summary,
        )
