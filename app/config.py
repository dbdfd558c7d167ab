"""Runtime settings for the asset pipeline.

Each root is resolved with the same priority chain:
  1. Explicit argument (CLI flag or constructor arg)
  2. Environment variable (LOTTIE_ANIMATIONS_ROOT / LOTTIE_DIST_ROOT / ...)
  3. Default relative to the current working directory
"""

import os
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field

ENV_ANIMATIONS_ROOT = "LOTTIE_ANIMATIONS_ROOT"
ENV_DIST_ROOT = "LOTTIE_DIST_ROOT"
ENV_INDEX_PATH = "LOTTIE_INDEX_PATH"
ENV_WORKERS = "LOTTIE_WORKERS"
ENV_LOG_LEVEL = "LOTTIE_LOG_LEVEL"
ENV_LOG_FORMAT = "LOTTIE_LOG_FORMAT"


def _resolve_path(explicit: "str | Path | None", env_var: str, default: str) -> Path:
    raw = explicit or os.environ.get(env_var) or str(Path.cwd() / default)
    return Path(raw).resolve()


def resolve_animations_root(explicit: "str | Path | None" = None) -> Path:
    """Return the directory holding one sub-directory per animation."""
    return _resolve_path(explicit, ENV_ANIMATIONS_ROOT, "animations")


def resolve_dist_root(explicit: "str | Path | None" = None) -> Path:
    """Return the directory receiving derived bundles and minified documents."""
    return _resolve_path(explicit, ENV_DIST_ROOT, "dist")


def resolve_index_path(explicit: "str | Path | None" = None) -> Path:
    """Return the path of the generated catalog index."""
    return _resolve_path(explicit, ENV_INDEX_PATH, "index.json")


class Settings(BaseModel):
    """Resolved settings for one CLI invocation."""

    animations_root: Path
    dist_root: Path
    index_path: Path
    workers: int = Field(default=1, ge=1)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "WARNING"
    log_format: Literal["console", "json"] = "console"


def load_settings(
    animations_root: "str | Path | None" = None,
    dist_root: "str | Path | None" = None,
    index_path: "str | Path | None" = None,
    workers: int | None = None,
    log_level: str | None = None,
    log_format: str | None = None,
) -> Settings:
    """Build :class:`Settings` from explicit overrides and the environment.

    Raises:
        pydantic.ValidationError: If a worker count or log option is invalid.
    """
    return Settings(
        animations_root=resolve_animations_root(animations_root),
        dist_root=resolve_dist_root(dist_root),
        index_path=resolve_index_path(index_path),
        workers=workers or os.environ.get(ENV_WORKERS) or 1,
        log_level=(log_level or os.environ.get(ENV_LOG_LEVEL) or "WARNING").upper(),
        log_format=log_format or os.environ.get(ENV_LOG_FORMAT) or "console",
    )
