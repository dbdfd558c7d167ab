"""Typed model for the optional per-animation metadata.json.

Every field is optional on disk; the validator reports missing ``id`` and
``name`` as warnings, and the catalog fills defaults from the directory name.
"""

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_CATEGORY = "uncategorized"


class AnimationMetadata(BaseModel):
    model_config = ConfigDict(extra="allow")

    id:          str | None = None
    name:        str | None = None
    category:    str | None = None
    description: str | None = None
    tags:        list[str] = Field(default_factory=list)

    def with_defaults(self, animation_name: str) -> "AnimationMetadata":
        """Return a copy with catalog defaults filled in for empty fields."""
        return self.model_copy(
            update={
                "id":          self.id or animation_name,
                "name":        self.name or animation_name,
                "category":    self.category or DEFAULT_CATEGORY,
                "description": self.description or "",
            }
        )
