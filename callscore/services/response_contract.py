"""Pydantic models for validating the analysis JSON returned by the LLM.

Model output is untrusted input: it only becomes an ``AnalysisResult`` after
passing :func:`validate_analysis`. Out-of-range scores are rejected, never
clamped.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Sequence

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictInt,
    StrictStr,
    ValidationError,
    ValidationInfo,
    field_validator,
    model_validator,
)

from callscore.domain.catalog import ScoringMode, ScoringParameter, get_catalog
from callscore.domain.errors import MalformedAnalysis

_REQUIRED_FIELDS = ("scores", "overallFeedback", "observation")


class AnalysisResult(BaseModel):
    """Validated per-parameter scores plus the model's written assessment."""

    scores: Dict[str, StrictInt]
    overall_feedback: StrictStr = Field(alias="overallFeedback")
    observation: StrictStr

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")

    @field_validator("overall_feedback", "observation")
    @classmethod
    def require_text(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must be a non-empty string")
        return value

    @model_validator(mode="after")
    def check_catalog(self, info: ValidationInfo) -> "AnalysisResult":
        catalog: Sequence[ScoringParameter] = (info.context or {}).get("catalog") or get_catalog()

        expected = {p.key for p in catalog}
        missing = [p.key for p in catalog if p.key not in self.scores]
        if missing:
            raise ValueError(f"missing score for parameter(s): {', '.join(missing)}")
        unexpected = sorted(set(self.scores) - expected)
        if unexpected:
            raise ValueError(f"unexpected score key(s): {', '.join(unexpected)}")

        for parameter in catalog:
            value = self.scores[parameter.key]
            if not parameter.accepts(value):
                allowed = (
                    f"0 or {parameter.weight}"
                    if parameter.mode is ScoringMode.PASS_FAIL
                    else f"an integer in [0, {parameter.weight}]"
                )
                raise ValueError(
                    f"score out of range for '{parameter.key}': {value} (expected {allowed})"
                )
        return self

    def to_wire(self) -> dict[str, Any]:
        """Return the camelCase JSON shape served at the boundary."""

        return self.model_dump(by_alias=True)


def _clean_json_payload(payload: str) -> str:
    """Strip a surrounding Markdown code fence, if any."""
    if not payload:
        return ""

    cleaned = payload.strip()
    if cleaned.startswith("```json"):
        cleaned = cleaned[7:]
    elif cleaned.startswith("```"):
        cleaned = cleaned[3:]

    if cleaned.endswith("```"):
        cleaned = cleaned[:-3]

    return cleaned.strip()


def _describe(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error.get("loc", ()) if item != "__root__")
        message = error.get("msg", "invalid value")
        parts.append(f"{location}: {message}" if location else message)
    return "; ".join(parts)


def validate_analysis(
    raw_text: str,
    catalog: Sequence[ScoringParameter] | None = None,
) -> AnalysisResult:
    """Parse and validate ``raw_text`` against the scoring contract."""

    catalog = tuple(catalog) if catalog is not None else get_catalog()

    try:
        data = json.loads(_clean_json_payload(raw_text))
    except (json.JSONDecodeError, TypeError) as exc:
        raise MalformedAnalysis(raw_text, f"not valid JSON: {exc}") from exc

    if not isinstance(data, dict):
        raise MalformedAnalysis(raw_text, "not valid JSON: expected a single object")

    missing = [name for name in _REQUIRED_FIELDS if name not in data]
    if missing:
        raise MalformedAnalysis(raw_text, f"missing field: {', '.join(missing)}")
    if not isinstance(data["scores"], dict):
        raise MalformedAnalysis(raw_text, "field 'scores' must be an object")

    try:
        return AnalysisResult.model_validate(data, context={"catalog": catalog})
    except ValidationError as exc:
        raise MalformedAnalysis(raw_text, _describe(exc)) from exc


__all__ = ["AnalysisResult", "validate_analysis"]
