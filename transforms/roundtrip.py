"""Embed → extract round-trip check for one animation directory.

Checks, per asset-table index:
  - external reference with its file present → external again, extracted
    file byte-identical to the original
  - external reference left out of the bundle (file missing, or no usable
    media type) → unchanged
  - inlined entry → external reference
  - any other entry → unchanged
and that two extractions of the same bundle generate the same file names.
"""

import tempfile
from pathlib import Path

from app.utils.logging import get_logger
from models.animation import (
    DOCUMENT_FILENAME,
    ExternalReference,
    InlinedAsset,
    OpaqueAsset,
    classify_assets,
    load_document,
)
from models.reports import RoundTripReport
from resolvers.images import ImageResolver
from transforms.embedder import Embedder
from transforms.extractor import Extractor

logger = get_logger("transforms.roundtrip")


def verify_roundtrip(animation_dir: "Path | str") -> RoundTripReport:
    """Embed *animation_dir*, extract the bundle twice, compare with the source.

    Raises:
        MissingResourceError: If animation.json is missing.
        ParseError: If animation.json is not a valid document.
        AssetIOError: If a temporary output cannot be written.
    """
    animation_dir = Path(animation_dir)
    original = load_document(animation_dir / DOCUMENT_FILENAME)
    original_refs = classify_assets(original)
    resolver = ImageResolver.for_animation(animation_dir)
    report = RoundTripReport(animation=animation_dir.name, asset_count=len(original_refs))

    with tempfile.TemporaryDirectory(prefix="lottie-roundtrip-") as tmp:
        tmp_root = Path(tmp)
        bundle = Embedder(tmp_root / "dist").embed(animation_dir)
        first = Extractor().extract(bundle.bundle_path, tmp_root / "out-1")
        second = Extractor().extract(bundle.bundle_path, tmp_root / "out-2")

        if [p.name for p in first.image_paths] != [p.name for p in second.image_paths]:
            report.mismatches.append("extraction is not deterministic: file names differ")

        restored = load_document(first.document_path)
        restored_refs = classify_assets(restored)
        if len(restored_refs) != len(original_refs):
            report.mismatches.append(
                f"asset count changed: {len(original_refs)} -> {len(restored_refs)}"
            )
            return report

        restored_images = first.document_path.parent / "images"
        bundled_refs = classify_assets(load_document(bundle.bundle_path))
        for before, bundled, after in zip(original_refs, bundled_refs, restored_refs):
            report.images_checked += _compare(
                before, bundled, after, resolver, restored_images, report
            )

    logger.info(
        "roundtrip_checked",
        animation=report.animation,
        images_checked=report.images_checked,
        mismatches=len(report.mismatches),
    )
    return report


def _compare(
    before,
    bundled,
    after,
    resolver: ImageResolver,
    restored_images: Path,
    report: RoundTripReport,
) -> int:
    """Compare one entry; return 1 when image bytes were compared."""
    index = before.index

    if isinstance(before, OpaqueAsset):
        if not isinstance(after, OpaqueAsset) or after.raw != before.raw:
            report.mismatches.append(f"asset {index}: opaque entry was modified")
        return 0

    if isinstance(before, InlinedAsset):
        if not isinstance(after, ExternalReference):
            report.mismatches.append(f"asset {index}: inlined entry was not extracted")
        return 0

    if not isinstance(after, ExternalReference):
        report.mismatches.append(f"asset {index}: external reference not restored")
        return 0

    if isinstance(bundled, ExternalReference):
        # Never embedded (file missing or no usable media type): comes back untouched.
        if after.raw != before.raw:
            report.mismatches.append(f"asset {index}: unembedded reference was modified")
        return 0

    lookup = resolver.resolve(before.filename)
    extracted = restored_images / after.filename
    if (
        not lookup.found
        or not extracted.is_file()
        or extracted.read_bytes() != lookup.path.read_bytes()
    ):
        report.mismatches.append(
            f"asset {index}: {before.filename} differs from extracted {after.filename}"
        )
    return 1
