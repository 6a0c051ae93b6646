"""Artifact coordinate model — what a caller asks for, before key resolution."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from mhook.core.errors import InvalidCoordinate

LATEST = "latest"


class ArtifactCoordinate(BaseModel):
    """Identifies an artifact (or artifact tree) in the MUFL layout.

    ``commit`` is either the reserved alias ``"latest"`` or an opaque,
    immutable commit id.  ``target`` is a path relative to the commit
    directory; the empty string addresses the whole commit tree.
    """

    model_config = ConfigDict(frozen=True)

    project: str
    branch: str
    commit: str = LATEST
    target: str = ""

    @field_validator("project", "branch")
    @classmethod
    def _not_empty(cls, value: str) -> str:
        if not value:
            raise ValueError("cannot be empty")
        return value

    @classmethod
    def create(cls, **fields: str) -> ArtifactCoordinate:
        """Build a coordinate, raising ``InvalidCoordinate`` on bad input."""
        try:
            return cls(**fields)
        except ValidationError as exc:
            fields_in_error = ", ".join(
                str(err["loc"][0]) for err in exc.errors() if err["loc"]
            )
            raise InvalidCoordinate(
                f"Invalid artifact coordinate ({fields_in_error}): {exc.errors()[0]['msg']}"
            ) from exc

    @property
    def is_latest(self) -> bool:
        return self.commit == LATEST

    def to_latest(self) -> ArtifactCoordinate:
        """Return a copy of this coordinate pointing at the ``latest`` alias."""
        return self.model_copy(update={"commit": LATEST})

    def with_target(self, target: str) -> ArtifactCoordinate:
        return self.model_copy(update={"target": target})
