"""Structural and referential checks for one animation directory.

Errors block bundling and publishing; warnings do not. ``validate`` never
raises for a defect of the animation itself: every problem becomes a
message in the returned report and the caller decides what to do with it.

Errors:
  - animation.json missing, not JSON, or not an object
  - version (v), frame rate (fr) or dimensions (w/h) missing
  - external image reference whose file is missing
  - images/ missing while external references exist, or unreadable
  - entry mixing an external path with the embedded flag
  - metadata.json present but not a JSON object

Warnings:
  - metadata.json missing, or missing id / name
  - metadata id different from the directory name
  - files under images/ not referenced by any entry (``._*`` ignored)
"""

import json
from pathlib import Path

from app.errors import AssetIOError, DocumentShapeError, ParseError
from app.utils.logging import get_logger
from models.animation import (
    DOCUMENT_FILENAME,
    IMAGES_DIRNAME,
    METADATA_FILENAME,
    ExternalReference,
    classify_assets,
    is_mixed_reference,
    load_document,
)
from models.reports import ValidationReport
from resolvers.images import ImageResolver

logger = get_logger("validators.animation")

# Resource-fork files written by macOS onto foreign filesystems.
HIDDEN_METADATA_PREFIX = "._"


class AnimationValidator:
    """Validate animation directories.

    Usage::

        report = AnimationValidator().validate(Path("animations/loader"))
        if not report.ok:
            for error in report.errors:
                print(error)
    """

    hidden_prefix: str = HIDDEN_METADATA_PREFIX

    def validate(self, animation_dir: "Path | str") -> ValidationReport:
        """Check *animation_dir* and return its errors and warnings.

        Args:
            animation_dir: Directory holding animation.json, optional
                metadata.json and optional images/.

        Returns:
            A fresh :class:`~models.reports.ValidationReport`.
        """
        animation_dir = Path(animation_dir)
        name = animation_dir.name
        report = ValidationReport(animation=name)

        document_file = animation_dir / DOCUMENT_FILENAME
        metadata_file = animation_dir / METADATA_FILENAME

        if not document_file.is_file():
            report.errors.append(f"Missing {DOCUMENT_FILENAME} in {name}")
            self._log(report)
            return report

        if not metadata_file.is_file():
            report.warnings.append(f"Missing {METADATA_FILENAME} in {name}")

        try:
            document = load_document(document_file)
        except DocumentShapeError as exc:
            report.errors.append(f"Invalid document in {name}/{DOCUMENT_FILENAME}: {exc.message}")
        except ParseError as exc:
            report.errors.append(f"Invalid JSON in {name}/{DOCUMENT_FILENAME}: {exc.message}")
        except AssetIOError as exc:
            report.errors.append(f"Cannot read {name}/{DOCUMENT_FILENAME}: {exc.message}")
        else:
            self._check_document(document, animation_dir, report)

        if metadata_file.is_file():
            self._check_metadata(metadata_file, name, report)

        self._log(report)
        return report

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _check_document(
        self, document: dict, animation_dir: Path, report: ValidationReport
    ) -> None:
        name = animation_dir.name

        if not document.get("v"):
            report.errors.append(f"Missing version field in {name}/{DOCUMENT_FILENAME}")
        if not document.get("fr"):
            report.errors.append(f"Missing frame rate in {name}/{DOCUMENT_FILENAME}")
        if not document.get("w") or not document.get("h"):
            report.errors.append(f"Missing dimensions in {name}/{DOCUMENT_FILENAME}")

        images_dir = animation_dir / IMAGES_DIRNAME
        resolver = ImageResolver(images_dir)
        referenced: set[str] = set()

        for ref in classify_assets(document):
            if is_mixed_reference(ref.raw):
                asset_id = ref.raw.get("id", ref.index)
                report.errors.append(
                    f"Asset {asset_id} has both an external path and the embedded flag in {name}"
                )
                continue
            if not isinstance(ref, ExternalReference):
                continue
            referenced.add(ref.filename)
            if not resolver.resolve(ref.filename).found:
                report.errors.append(f"Missing image: {ref.filename} in {name}")

        if referenced and not images_dir.is_dir():
            report.errors.append(f"Images directory missing in {name}")

        if images_dir.is_dir():
            try:
                orphans = self._orphans(images_dir, referenced)
            except OSError as exc:
                report.errors.append(f"Cannot read {name}/{IMAGES_DIRNAME}/: {exc}")
                return
            for orphan in orphans:
                report.warnings.append(f"Unreferenced image: {orphan} in {name}")

    def _orphans(self, images_dir: Path, referenced: set[str]) -> list[str]:
        """File names under *images_dir* that no entry references, sorted."""
        return sorted(
            entry.name
            for entry in images_dir.iterdir()
            if entry.is_file()
            and not entry.name.startswith(self.hidden_prefix)
            and entry.name not in referenced
        )

    def _check_metadata(
        self, metadata_file: Path, name: str, report: ValidationReport
    ) -> None:
        try:
            metadata = json.loads(metadata_file.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError, RecursionError) as exc:
            report.errors.append(f"Invalid JSON in {name}/{METADATA_FILENAME}: {exc}")
            return
        except OSError as exc:
            report.errors.append(f"Cannot read {name}/{METADATA_FILENAME}: {exc}")
            return

        if not isinstance(metadata, dict):
            report.errors.append(
                f"Invalid document in {name}/{METADATA_FILENAME}: expected an object at top level"
            )
            return

        if not metadata.get("id"):
            report.warnings.append(f"Missing id in {name}/{METADATA_FILENAME}")
        if not metadata.get("name"):
            report.warnings.append(f"Missing name in {name}/{METADATA_FILENAME}")
        if metadata.get("id") and metadata["id"] != name:
            report.warnings.append(
                f"Metadata id ({metadata['id']}) doesn't match folder name ({name})"
            )

    def _log(self, report: ValidationReport) -> None:
        for error in report.errors:
            logger.info("validation_error", animation=report.animation, message=error)
        if report.warnings:
            logger.info(
                "validation_warnings",
                animation=report.animation,
                count=len(report.warnings),
            )
