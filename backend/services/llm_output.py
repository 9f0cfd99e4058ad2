"""Schema-validated parsing of raw LLM output.

Raw model text is never handed to matching code as an untyped dict: it is
parsed into a pydantic model and returned as a tagged ParseSuccess /
ParseFailure result.
"""

import json
import re
from dataclasses import dataclass
from typing import Generic, TypeVar

from pydantic import AliasChoices, BaseModel, Field, ValidationError, field_validator

from services.feature_match import LEVEL_LADDER

T = TypeVar("T", bound=BaseModel)

_FENCE_RE = re.compile(r"```(?:json)?\s*\n?(.*?)\n?```", re.DOTALL)
_OBJECT_RE = re.compile(r"\{.*\}", re.DOTALL)


# ---------------------------------------------------------------------------
# Extractor output schemas
# ---------------------------------------------------------------------------

class SkillsOutput(BaseModel):
    skills: list[str] = []

    @field_validator("skills")
    @classmethod
    def _drop_placeholders(cls, v: list[str]) -> list[str]:
        return [s.strip() for s in v if s and s.strip() and s.strip().lower() != "none"]


class DomainOutput(BaseModel):
    domains: list[str] = []


class YearsOutput(BaseModel):
    min_years: float | None = Field(None, ge=0, le=60, validation_alias=AliasChoices("min_years", "minYears"))
    max_years: float | None = Field(None, ge=0, le=60, validation_alias=AliasChoices("max_years", "maxYears"))


class LevelOutput(BaseModel):
    level: str | None = None

    @field_validator("level")
    @classmethod
    def _canonical_level(cls, v: str | None) -> str | None:
        if v is None:
            return None
        for step in LEVEL_LADDER:
            if step.lower() == v.strip().lower():
                return step
        raise ValueError(f"unknown level {v!r}")


# ---------------------------------------------------------------------------
# Tagged result
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ParseSuccess(Generic[T]):
    value: T
    ok: bool = True


@dataclass(frozen=True)
class ParseFailure:
    error: str
    raw: str
    ok: bool = False


ParseResult = ParseSuccess | ParseFailure


def extract_json_text(raw: str) -> str:
    """Strip markdown code fences and surrounding prose from a JSON reply."""
    text = (raw or "").strip()
    fenced = _FENCE_RE.search(text)
    if fenced:
        text = fenced.group(1).strip()
    if not text.startswith("{"):
        obj = _OBJECT_RE.search(text)
        if obj:
            text = obj.group(0)
    return text


def parse_llm_output(raw: str, schema: type[T]) -> ParseSuccess[T] | ParseFailure:
    """Parse raw model text into schema, never raising."""
    text = extract_json_text(raw)
    if not text:
        return ParseFailure(error="empty response", raw=raw or "")
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        return ParseFailure(error=f"invalid JSON: {e}", raw=raw)
    try:
        return ParseSuccess(value=schema.model_validate(data))
    except ValidationError as e:
        return ParseFailure(error=f"schema mismatch: {e.errors()[0]['msg']}", raw=raw)
