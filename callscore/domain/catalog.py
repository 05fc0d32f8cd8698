"""Static scoring catalog shared by the analysis prompt and the validator.

Weights are expressed on a 100-point scale: the total score of a call is the
plain sum of the per-parameter scores.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Final


class ScoringMode(str, Enum):
    """How a parameter may be scored by the model."""

    PASS_FAIL = "PASS_FAIL"
    SCORE = "SCORE"


@dataclass(frozen=True)
class ScoringParameter:
    """One weighted entry of the scoring catalog."""

    key: str
    name: str
    weight: int
    description: str
    mode: ScoringMode

    def accepts(self, value: int) -> bool:
        """Return True when ``value`` is a legal score for this parameter."""

        if self.mode is ScoringMode.PASS_FAIL:
            return value in (0, self.weight)
        return 0 <= value <= self.weight


TOTAL_WEIGHT: Final[int] = 100

_CATALOG: Final[tuple[ScoringParameter, ...]] = (
    ScoringParameter("greeting", "Greeting", 5, "Call opening within 5 seconds", ScoringMode.PASS_FAIL),
    ScoringParameter("collectionUrgency", "Collection Urgency", 15, "Create urgency, cross-questioning", ScoringMode.SCORE),
    ScoringParameter("rebuttalCustomerHandling", "Rebuttal Handling", 15, "Address penalties, objections", ScoringMode.SCORE),
    ScoringParameter("callEtiquette", "Call Etiquette", 15, "Tone, empathy, clear speech", ScoringMode.SCORE),
    ScoringParameter("callDisclaimer", "Call Disclaimer", 5, "Take permission before ending", ScoringMode.PASS_FAIL),
    ScoringParameter("correctDisposition", "Correct Disposition", 10, "Use correct category with remark", ScoringMode.PASS_FAIL),
    ScoringParameter("callClosing", "Call Closing", 5, "Thank the customer properly", ScoringMode.PASS_FAIL),
    ScoringParameter("fatalIdentification", "Identification", 5, "Missing agent/customer info", ScoringMode.PASS_FAIL),
    ScoringParameter("fatalTapeDiscloser", "Tape Disclosure", 10, "Inform customer about recording", ScoringMode.PASS_FAIL),
    ScoringParameter("fatalToneLanguage", "Tone & Language", 15, "No abusive or threatening speech", ScoringMode.PASS_FAIL),
)


def _check_catalog(parameters: tuple[ScoringParameter, ...]) -> None:
    """Raise ValueError when the catalog breaks its weighting rules."""

    if any(p.weight <= 0 for p in parameters):
        raise ValueError("catalog weights must be positive")
    if len({p.key for p in parameters}) != len(parameters):
        raise ValueError("catalog keys must be unique")
    total = sum(p.weight for p in parameters)
    if total != TOTAL_WEIGHT:
        raise ValueError(f"catalog weights sum to {total}, expected {TOTAL_WEIGHT}")


_check_catalog(_CATALOG)


def get_catalog() -> tuple[ScoringParameter, ...]:
    """Return the ordered, immutable scoring catalog."""

    return _CATALOG


def catalog_keys() -> tuple[str, ...]:
    return tuple(p.key for p in _CATALOG)


__all__ = ["ScoringMode", "ScoringParameter", "TOTAL_WEIGHT", "get_catalog", "catalog_keys"]
