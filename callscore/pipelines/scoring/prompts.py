"""Prompt construction for the analysis stage.

The prompt enumerates the whole catalog so the model scores every parameter,
and the JSON schema mirrors the ``AnalysisResult`` contract for the structured
output call.
"""

from __future__ import annotations

import json
from typing import Any, Sequence

from callscore.config.settings import settings
from callscore.domain.catalog import ScoringMode, ScoringParameter


def describe_parameters(catalog: Sequence[ScoringParameter]) -> str:
    return "\n".join(
        f"- {p.key} (Weight: {p.weight}, Type: {p.mode.value}, Name: {p.name}): {p.description}"
        for p in catalog
    )


def analysis_json_schema(catalog: Sequence[ScoringParameter]) -> dict[str, Any]:
    """JSON schema of the expected analysis object for this catalog."""

    score_properties: dict[str, Any] = {}
    for parameter in catalog:
        if parameter.mode is ScoringMode.PASS_FAIL:
            score_properties[parameter.key] = {"type": "integer", "enum": [0, parameter.weight]}
        else:
            score_properties[parameter.key] = {
                "type": "integer",
                "minimum": 0,
                "maximum": parameter.weight,
            }

    return {
        "type": "object",
        "properties": {
            "scores": {
                "type": "object",
                "properties": score_properties,
                "required": [p.key for p in catalog],
                "additionalProperties": False,
            },
            "overallFeedback": {"type": "string", "minLength": 1},
            "observation": {"type": "string", "minLength": 1},
        },
        "required": ["scores", "overallFeedback", "observation"],
        "additionalProperties": False,
    }


def build_analysis_prompt(transcript: str, catalog: Sequence[ScoringParameter]) -> str:
    agent = settings.scoring.agent_label
    customer = settings.scoring.customer_label
    example_scores = {p.key: 0 for p in catalog}
    output_example = json.dumps(
        {
            "scores": example_scores,
            "overallFeedback": (
                "Overall assessment of the agent's performance, focusing on key "
                "strengths and weaknesses relevant to debt collection."
            ),
            "observation": (
                "Specific critical observations from the call: customer objections, "
                "the agent's handling, script adherence, missed disclosures."
            ),
        },
        indent=2,
        ensure_ascii=False,
    )

    return (
        "You are an AI assistant analyzing a call transcript from a debt collection "
        "agent and providing structured feedback.\n"
        f"The transcript involves two speakers, '{agent}' and '{customer}'; every line "
        "has the form '<Role>: <utterance>'.\n"
        "Analyze the call based on the parameters and scoring rules below.\n\n"
        "Here is the call transcript:\n"
        "```\n"
        f"{transcript}\n"
        "```\n\n"
        "Parameters for Scoring:\n"
        f"{describe_parameters(catalog)}\n\n"
        "Scoring Rules:\n"
        "- PASS_FAIL parameters: the score is either 0 (Fail) or exactly the weight (Pass).\n"
        "- SCORE parameters: the score is any integer between 0 and the weight, inclusive.\n"
        "- All scores are integers. Score every parameter listed above; add no other keys.\n\n"
        "Output Format (strict JSON, example values only):\n"
        f"{output_example}\n"
        "Return a single JSON object with exactly this shape and no text outside it."
    )


__all__ = ["analysis_json_schema", "build_analysis_prompt", "describe_parameters"]
