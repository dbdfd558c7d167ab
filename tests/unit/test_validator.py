"""Unit tests for AnimationValidator.

Covers:
  1. A complete animation directory passes with no messages.
  2. Document errors — missing file, invalid JSON or shape, missing fields,
     and a nesting depth the decoder cannot handle.
  3. Reference errors — missing image, missing images/, mixed entries.
  4. Warnings — metadata problems and unreferenced files (``._*`` ignored).
"""

import json
from pathlib import Path

import pytest

from app.batch import run_batch
from validators.animation import AnimationValidator

_DOCUMENT = {
    "v": "5.7.4",
    "fr": 30,
    "ip": 0,
    "op": 60,
    "w": 512,
    "h": 512,
    "assets": [{"id": "img_0", "p": "logo.png", "u": "images/"}],
}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_animation(
    root: Path,
    name: str = "loader",
    document: "dict | str | None" = None,
    metadata: "dict | str | None" = None,
    images: "dict[str, bytes] | None" = None,
) -> Path:
    """Build an animation directory; ``None`` for a file means "do not create"."""
    animation_dir = root / name
    animation_dir.mkdir(parents=True)
    if document is not None:
        text = document if isinstance(document, str) else json.dumps(document)
        (animation_dir / "animation.json").write_text(text, encoding="utf-8")
    if metadata is not None:
        text = metadata if isinstance(metadata, str) else json.dumps(metadata)
        (animation_dir / "metadata.json").write_text(text, encoding="utf-8")
    if images is not None:
        images_dir = animation_dir / "images"
        images_dir.mkdir()
        for filename, data in images.items():
            (images_dir / filename).write_bytes(data)
    return animation_dir


def _complete(root: Path, name: str = "loader", **overrides) -> Path:
    kwargs = {
        "document": _DOCUMENT,
        "metadata": {"id": name, "name": "Loader"},
        "images": {"logo.png": b"png"},
    }
    kwargs.update(overrides)
    return _make_animation(root, name, **kwargs)


# ---------------------------------------------------------------------------
# Test 1 — Clean directory
# ---------------------------------------------------------------------------


def test_complete_animation_passes(tmp_path: Path) -> None:
    report = AnimationValidator().validate(_complete(tmp_path))

    assert report.animation == "loader"
    assert report.errors == []
    assert report.warnings == []
    assert report.ok


def test_animation_without_assets_needs_no_images_dir(tmp_path: Path) -> None:
    document = {k: v for k, v in _DOCUMENT.items() if k != "assets"}
    report = AnimationValidator().validate(_complete(tmp_path, document=document, images=None))
    assert report.errors == []


# ---------------------------------------------------------------------------
# Test 2 — Document errors
# ---------------------------------------------------------------------------


def test_missing_document_is_the_only_message(tmp_path: Path) -> None:
    animation_dir = _make_animation(tmp_path, "empty")

    report = AnimationValidator().validate(animation_dir)

    assert report.errors == ["Missing animation.json in empty"]
    assert report.warnings == []
    assert not report.ok


@pytest.mark.parametrize("text", ["{broken", "[" * 100000 + "]" * 100000])
def test_undecodable_document(tmp_path: Path, text: str) -> None:
    report = AnimationValidator().validate(_complete(tmp_path, document=text))

    assert len(report.errors) == 1
    assert report.errors[0].startswith("Invalid JSON in loader/animation.json: ")


@pytest.mark.parametrize(
    "text, reason",
    [
        ("[1, 2]", "expected an object at top level"),
        ('{"v": "5.7.4", "assets": {}}', "'assets' must be a list"),
    ],
)
def test_document_with_wrong_shape(tmp_path: Path, text: str, reason: str) -> None:
    report = AnimationValidator().validate(_complete(tmp_path, document=text))

    assert report.errors == [f"Invalid document in loader/animation.json: {reason}"]


def test_deeply_nested_document_does_not_stop_a_batch(tmp_path: Path) -> None:
    deep = _complete(tmp_path, "deep", document="[" * 100000 + "]" * 100000)
    good = _complete(tmp_path, "good")

    report = run_batch([deep, good], AnimationValidator().validate)

    assert [o.name for o in report.outcomes] == ["deep", "good"]
    assert not report.outcomes[0].ok
    assert report.outcomes[1].ok


def test_missing_required_fields(tmp_path: Path) -> None:
    document = {"ip": 0, "op": 60, "w": 512, "assets": []}

    report = AnimationValidator().validate(_complete(tmp_path, document=document))

    assert report.errors == [
        "Missing version field in loader/animation.json",
        "Missing frame rate in loader/animation.json",
        "Missing dimensions in loader/animation.json",
    ]


# ---------------------------------------------------------------------------
# Test 3 — Reference errors
# ---------------------------------------------------------------------------


def test_missing_image(tmp_path: Path) -> None:
    report = AnimationValidator().validate(_complete(tmp_path, images={}))

    assert report.errors == ["Missing image: logo.png in loader"]


def test_missing_images_directory(tmp_path: Path) -> None:
    report = AnimationValidator().validate(_complete(tmp_path, images=None))

    assert report.errors == [
        "Missing image: logo.png in loader",
        "Images directory missing in loader",
    ]


def test_mixed_entry_is_an_error(tmp_path: Path) -> None:
    document = dict(_DOCUMENT)
    document["assets"] = [{"id": "img_0", "p": "logo.png", "u": "images/", "e": 1}]

    report = AnimationValidator().validate(_complete(tmp_path, document=document))

    assert report.errors == [
        "Asset img_0 has both an external path and the embedded flag in loader"
    ]


def test_inlined_and_precomp_entries_need_no_files(tmp_path: Path) -> None:
    document = dict(_DOCUMENT)
    document["assets"] = [
        {"id": "comp_0", "layers": []},
        {"id": "img_0", "p": "data:image/png;base64,AAAA", "e": 1},
    ]

    report = AnimationValidator().validate(_complete(tmp_path, document=document, images=None))

    assert report.errors == []


# ---------------------------------------------------------------------------
# Test 4 — Warnings
# ---------------------------------------------------------------------------


def test_missing_metadata_is_a_warning(tmp_path: Path) -> None:
    report = AnimationValidator().validate(_complete(tmp_path, metadata=None))

    assert report.ok
    assert report.warnings == ["Missing metadata.json in loader"]


def test_metadata_field_warnings(tmp_path: Path) -> None:
    report = AnimationValidator().validate(_complete(tmp_path, metadata={"category": "ui"}))

    assert report.ok
    assert report.warnings == [
        "Missing id in loader/metadata.json",
        "Missing name in loader/metadata.json",
    ]


def test_metadata_id_mismatch(tmp_path: Path) -> None:
    report = AnimationValidator().validate(
        _complete(tmp_path, metadata={"id": "spinner", "name": "Loader"})
    )

    assert report.ok
    assert report.warnings == ["Metadata id (spinner) doesn't match folder name (loader)"]


def test_invalid_metadata_is_an_error(tmp_path: Path) -> None:
    report = AnimationValidator().validate(_complete(tmp_path, metadata="{oops"))

    assert len(report.errors) == 1
    assert report.errors[0].startswith("Invalid JSON in loader/metadata.json")


def test_unreferenced_images_are_warned_in_name_order(tmp_path: Path) -> None:
    animation_dir = _complete(
        tmp_path,
        images={"logo.png": b"png", "zebra.png": b"z", "alpha.jpg": b"a", "._logo.png": b"rsrc"},
    )
    (animation_dir / "images" / "nested").mkdir()

    report = AnimationValidator().validate(animation_dir)

    assert report.ok
    assert report.warnings == [
        "Unreferenced image: alpha.jpg in loader",
        "Unreferenced image: zebra.png in loader",
    ]


def test_unreferenced_images_checked_without_asset_table(tmp_path: Path) -> None:
    document = dict(_DOCUMENT)
    document["assets"] = []

    report = AnimationValidator().validate(
        _complete(tmp_path, document=document, images={"old.png": b"x"})
    )

    assert report.warnings == ["Unreferenced image: old.png in loader"]


def test_errors_and_warnings_are_reported_together(tmp_path: Path) -> None:
    document = dict(_DOCUMENT, v="")

    report = AnimationValidator().validate(
        _complete(tmp_path, document=document, metadata=None, images={"logo.png": b"p", "x.png": b"x"})
    )

    assert report.errors == ["Missing version field in loader/animation.json"]
    assert report.warnings == [
        "Missing metadata.json in loader",
        "Unreferenced image: x.png in loader",
    ]
    assert report.failure_reason == "1 validation error(s)"


def test_metadata_with_wrong_shape(tmp_path: Path) -> None:
    report = AnimationValidator().validate(_complete(tmp_path, metadata='["loader"]'))

    assert report.errors == [
        "Invalid document in loader/metadata.json: expected an object at top level"
    ]


def test_unreadable_images_directory_is_reported(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    animation_dir = _complete(tmp_path)
    images_dir = animation_dir / "images"
    real_iterdir = Path.iterdir

    def iterdir(self: Path):
        if self == images_dir:
            raise PermissionError(13, "Permission denied", str(self))
        return real_iterdir(self)

    monkeypatch.setattr(Path, "iterdir", iterdir)

    report = AnimationValidator().validate(animation_dir)

    assert len(report.errors) == 1
    assert report.errors[0].startswith("Cannot read loader/images/: ")
