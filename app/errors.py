"""Error taxonomy for the animation asset pipeline.

Propagation rules:
  - Errors local to one asset entry never abort the remaining entries.
  - Errors local to one animation directory never abort a batch; the batch
    driver records them as that unit's failure.
"""

from pathlib import Path


class AssetPipelineError(Exception):
    """Base class for every error raised by the pipeline."""

    def __init__(self, message: str, path: "Path | str | None" = None) -> None:
        super().__init__(message)
        self.message = message
        self.path = Path(path) if path is not None else None

    def __str__(self) -> str:
        if self.path is not None:
            return f"{self.message} ({self.path})"
        return self.message


class ParseError(AssetPipelineError):
    """Input is not valid structured data. Fatal to the unit, no partial output."""


class DocumentShapeError(ParseError):
    """Valid JSON that does not have the shape of an animation document."""


class MissingResourceError(AssetPipelineError):
    """A referenced file or directory does not exist."""


class FormatError(AssetPipelineError, ValueError):
    """Text does not match the encoded-image pattern."""


class AssetIOError(AssetPipelineError):
    """Filesystem read/write failure. Fatal to the unit."""
