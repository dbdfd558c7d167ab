"""ImageResolver — resolve external-reference file names against images/.

Input:  the ``p`` value of an external-reference asset entry
Output: :class:`~models.resolution.ImageLookup` with ``found`` set

Lookup rules:
  - The file name is joined to the animation's images/ directory as-is
    (no case folding, no extension guessing).
  - Names that escape the images/ directory (``../x.png``, absolute paths)
    are reported as not found.
  - Only regular files count; a directory with the referenced name is
    not found.
"""

import os
from pathlib import Path

from models.animation import IMAGES_DIRNAME
from models.resolution import ImageLookup


class ImageResolver:
    """Resolve image file names for one animation directory.

    Usage::

        resolver = ImageResolver(animation_dir / "images")
        lookup = resolver.resolve("logo.png")
        if lookup.found:
            data = lookup.path.read_bytes()

    Args:
        images_dir: The animation's images/ directory. It does not need to
            exist; every lookup then reports not found.
    """

    def __init__(self, images_dir: "Path | str") -> None:
        self.images_dir = Path(images_dir)

    @classmethod
    def for_animation(cls, animation_dir: "Path | str") -> "ImageResolver":
        return cls(Path(animation_dir) / IMAGES_DIRNAME)

    def resolve(self, filename: str) -> ImageLookup:
        """Resolve *filename*; never raises for a missing or unreadable file."""
        candidate = self.images_dir / filename

        if not self._is_inside_images_dir(candidate):
            return ImageLookup(
                filename=filename,
                path=candidate,
                reason="outside images directory",
            )

        # os.path.isfile swallows ENAMETOOLONG and similar, Path.is_file does not.
        if not os.path.isfile(candidate):
            return ImageLookup(filename=filename, path=candidate, reason="not found")

        return ImageLookup(
            filename=filename,
            path=candidate,
            found=True,
            size_bytes=candidate.stat().st_size,
        )

    def _is_inside_images_dir(self, candidate: Path) -> bool:
        root = os.path.abspath(self.images_dir)
        target = os.path.abspath(candidate)
        return os.path.commonpath([root, target]) == root and target != root
