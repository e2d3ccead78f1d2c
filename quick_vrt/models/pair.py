"""URL pair model."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, field_validator


class UrlPair(BaseModel):
    """One before/after URL combination under test. Immutable."""

    model_config = ConfigDict(frozen=True)

    before: str
    after: str

    @field_validator("before", "after")
    @classmethod
    def _strip(cls, v: str) -> str:
        return v.strip()

    @property
    def is_eligible(self) -> bool:
        return bool(self.before) and bool(self.after)
