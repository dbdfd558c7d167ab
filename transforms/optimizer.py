"""Optimizer — write the normalised, minified copy of an animation document.

Output: <dist>/<animation>/animation.min.json. Independent of embedding:
external image references are kept as they are.
"""

from pathlib import Path

from app.config import resolve_dist_root
from app.errors import AssetIOError
from app.utils.logging import get_logger
from models.animation import (
    DOCUMENT_FILENAME,
    MINIFIED_FILENAME,
    dump_compact,
    load_document,
    write_text,
)
from models.reports import OptimizeResult
from transforms.normalizer import normalize

logger = get_logger("transforms.optimizer")


class Optimizer:
    """Write minified copies of animation documents for distribution.

    Args:
        dist_root: Output root. Defaults to ``LOTTIE_DIST_ROOT`` then ``./dist``.
    """

    def __init__(self, dist_root: "Path | str | None" = None) -> None:
        self.dist_root = resolve_dist_root(dist_root)

    def optimize(self, animation_dir: "Path | str") -> OptimizeResult:
        """Normalise and minify one animation document.

        Raises:
            MissingResourceError: If animation.json is missing.
            ParseError: If animation.json is not a valid document.
            AssetIOError: If the output cannot be written.
        """
        animation_dir = Path(animation_dir)
        source = animation_dir / DOCUMENT_FILENAME

        document = load_document(source)
        try:
            original_bytes = source.stat().st_size
        except OSError as exc:
            raise AssetIOError(f"cannot stat {source.name}: {exc}", source) from exc

        output_path = self.dist_root / animation_dir.name / MINIFIED_FILENAME
        optimized_bytes = write_text(output_path, dump_compact(normalize(document)))

        result = OptimizeResult(
            animation=animation_dir.name,
            output_path=output_path,
            original_bytes=original_bytes,
            optimized_bytes=optimized_bytes,
        )
        logger.info(
            "animation_optimized",
            animation=result.animation,
            original_bytes=result.original_bytes,
            optimized_bytes=result.optimized_bytes,
            saved_bytes=result.saved_bytes,
        )
        return result
