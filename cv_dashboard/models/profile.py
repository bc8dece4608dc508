from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _number_to_text(value: Any) -> Any:
    # hand-edited rows sometimes carry years or periods as numbers
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


class ExperienceEntry(BaseModel):
    """One position on a CV. Keys missing from the stored entry stay unset."""

    model_config = ConfigDict(extra="allow")

    period: str | None = ""
    company: str | None = ""
    location: str | None = ""
    position: str | None = ""
    details: list[str] | None = Field(default_factory=list)

    @field_validator("period", "company", "location", "position", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> Any:
        return _number_to_text(value)


class EducationEntry(BaseModel):
    model_config = ConfigDict(extra="allow")

    year: str | None = ""
    degree: str | None = ""
    institution: str | None = ""

    @field_validator("year", "degree", "institution", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> Any:
        return _number_to_text(value)


class ProfileRecord(BaseModel):
    """
    A candidate CV profile with its list fields decoded.

    Columns not modelled here are kept as extras so they round-trip to API consumers.
    """

    model_config = ConfigDict(extra="allow")

    id: str
    skills: list[str] = Field(default_factory=list)
    experience: list[ExperienceEntry] = Field(default_factory=list)
    education: list[EducationEntry] = Field(default_factory=list)
    file_url: str | None = None
    created_at: str | None = None
    updated_at: str | None = None

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        # bigint primary keys come back as numbers
        if isinstance(value, int):
            return str(value)
        return value

    @property
    def short_id(self) -> str:
        return self.id[:8]

    @property
    def latest_position(self) -> ExperienceEntry | None:
        return self.experience[0] if self.experience else None


class RankedProfile(ProfileRecord):
    search_score: float = 0.0


class ProfileUpdate(BaseModel):
    """Partial update body. Only fields explicitly sent are written; unmodelled columns pass through."""

    model_config = ConfigDict(extra="allow")

    skills: list[str] | str | None = None
    experience: list[dict[str, Any]] | str | None = None
    education: list[dict[str, Any]] | str | None = None
    file_url: str | None = None
