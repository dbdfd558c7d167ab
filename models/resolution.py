"""Pydantic record returned by the image resolver.

A missing image is a normal result (``found=False``), not an exception;
the caller decides whether that is an error (validation) or a warning
(embedding).
"""

from pathlib import Path

from pydantic import BaseModel


class ImageLookup(BaseModel):
    """Outcome of resolving one external-reference file name."""

    filename: str
    """File name exactly as written in the asset entry's ``p`` field."""

    path: Path
    """Candidate location under the animation's images/ directory."""

    found: bool = False
    """True when *path* exists and is a regular file."""

    size_bytes: int = 0
    """File size on disk; 0 when not found."""

    reason: str = ""
    """Why the lookup failed; empty when found."""
