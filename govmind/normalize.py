"""Coerce free-form model completions into fully-populated result types.

Every variant goes through the same two steps: `extract_json_object` locates
and parses the JSON object embedded in the completion, then a per-variant
mapper projects it onto a frozen dataclass, coercing types, clamping scores
and filling documented defaults. The only failure is `ParseError`, raised when
no JSON object can be located at all; content that is present but wrong never
raises.
"""

import json
import math
import re
from collections.abc import Sequence
from typing import Any

from .errors import ParseError
from .prompts import PERSONA_ICONS
from .schema import (
    AnalysisResult,
    Committee,
    CommitteeSuggestion,
    ComplexityBreakdown,
    DebatePersona,
    DebateResult,
    DraftResult,
    Variant,
)

SCORE_MIN = 1.0
SCORE_MAX = 10.0
DEFAULT_SCORE = 5.0  # "unknown complexity" midpoint

DEFAULT_SUMMARY = "Analysis completed"
DEFAULT_RISK_ASSESSMENT = "Standard proposal risks apply"
DEFAULT_RECOMMENDATIONS = "Follow standard DAO procedures"
DEFAULT_EXPLANATION = "Standard complexity assessment"
DEFAULT_COMPARISON = "Typical DAO proposal complexity"
DEFAULT_IMPACT = "Moderate impact expected"

DEFAULT_DRAFT_TITLE = "Untitled Proposal"
DEFAULT_DRAFT_SUMMARY = "No summary provided."
DEFAULT_DRAFT_RATIONALE = "No rationale provided."
DEFAULT_DRAFT_SPECIFICATIONS = "No specifications provided."
DEFAULT_COMMITTEE_REASONING = "No committee reasoning provided."

PERSONA_COUNT = 4
DEFAULT_ICON = PERSONA_ICONS[-1]
DEFAULT_PERSONA_NAME = "DAO Member"
DEFAULT_CORE_ARGUMENT = "No argument provided."
DEFAULT_OBJECTIONS = ("No specific objections raised.",)
DEFAULT_SUGGESTION = "No suggestion provided."

FILLER_PERSONA = DebatePersona(
    name="Additional Perspective",
    icon=DEFAULT_ICON,
    core_argument="No additional perspective was provided for this debate.",
    objections=DEFAULT_OBJECTIONS,
    actionable_suggestion="Gather more community feedback before the vote.",
)

_OPEN_FENCE_RE = re.compile(r"^```[\w-]*[ \t]*\n?")
_CLOSE_FENCE_RE = re.compile(r"\n?[ \t]*```$")


def strip_code_fence(text: str) -> str:
    """Remove a leading ``` fence (with or without a language tag) and its closing fence."""
    text = text.strip()
    if not text.startswith("```"):
        return text
    text = _OPEN_FENCE_RE.sub("", text, count=1)
    text = _CLOSE_FENCE_RE.sub("", text, count=1)
    return text.strip()


def extract_json_object(text: str) -> dict[str, Any]:
    """Locate and parse the JSON object embedded in a model completion.

    Tolerates a surrounding code fence and commentary before the first `{`
    or after the last `}`. Raises ParseError if nothing parses to an object.
    """
    if not isinstance(text, str):
        raise ParseError("Completion is not text", text=repr(text))

    candidate = strip_code_fence(text)
    start = candidate.find("{")
    end = candidate.rfind("}")
    if start != -1 and end > start:
        candidate = candidate[start:end + 1]

    try:
        data = json.loads(candidate)
    except (json.JSONDecodeError, ValueError) as e:
        raise ParseError(f"No JSON object found in completion: {e}", text=text) from e
    if not isinstance(data, dict):
        raise ParseError("Completion JSON is not an object", text=text)
    return data


def clamp_score(value: Any, default: float = DEFAULT_SCORE) -> float:
    """Bound a score to [1, 10]; non-numeric, non-finite or missing → default."""
    if isinstance(value, bool) or value is None:
        return default
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            return default
    if not isinstance(value, (int, float)):
        return default
    value = float(value)
    if not math.isfinite(value):
        return default
    return max(SCORE_MIN, min(SCORE_MAX, value))


def coerce_text(value: Any, default: str) -> str:
    """Strings pass through; lists are space-joined; blank or other types → default."""
    if isinstance(value, list):
        parts = [str(item).strip() for item in value if item is not None and not isinstance(item, (dict, list))]
        value = " ".join(p for p in parts if p)
    if isinstance(value, str) and value.strip():
        return value
    return default


def _object(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _optional_id(value: Any) -> str | None:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


# --- Per-variant mappers ---

def map_analysis(data: dict[str, Any]) -> AnalysisResult:
    breakdown = _object(data.get("complexity_breakdown"))
    return AnalysisResult(
        summary=coerce_text(data.get("summary"), DEFAULT_SUMMARY),
        risk_assessment=coerce_text(data.get("risk_assessment"), DEFAULT_RISK_ASSESSMENT),
        recommendations=coerce_text(data.get("recommendations"), DEFAULT_RECOMMENDATIONS),
        complexity_score=clamp_score(data.get("complexity_score")),
        complexity_breakdown=ComplexityBreakdown(
            technical_complexity=clamp_score(breakdown.get("technical_complexity")),
            financial_complexity=clamp_score(breakdown.get("financial_complexity")),
            governance_complexity=clamp_score(breakdown.get("governance_complexity")),
            timeline_complexity=clamp_score(breakdown.get("timeline_complexity")),
            explanation=coerce_text(breakdown.get("explanation"), DEFAULT_EXPLANATION),
            comparison=coerce_text(breakdown.get("comparison"), DEFAULT_COMPARISON),
        ),
        estimated_impact=coerce_text(data.get("estimated_impact"), DEFAULT_IMPACT),
    )


def _draft_fields(data: dict[str, Any]) -> dict[str, str]:
    return {
        "title": coerce_text(data.get("title"), DEFAULT_DRAFT_TITLE),
        "summary": coerce_text(data.get("summary"), DEFAULT_DRAFT_SUMMARY),
        "rationale": coerce_text(data.get("rationale"), DEFAULT_DRAFT_RATIONALE),
        "specifications": coerce_text(data.get("specifications"), DEFAULT_DRAFT_SPECIFICATIONS),
    }


def map_draft(data: dict[str, Any]) -> DraftResult:
    return DraftResult(**_draft_fields(data))


def resolve_committee(committee_id: str | None, committees: Sequence[Committee]) -> Committee | None:
    """Exact id match against the caller's committees; no match is not an error."""
    if committee_id is None:
        return None
    for committee in committees:
        if committee.id == committee_id:
            return committee
    return None


def map_committee_suggestion(
    data: dict[str, Any], committees: Sequence[Committee] = (),
) -> CommitteeSuggestion:
    raw_id = data.get("suggested_committee_id", data.get("committee_id"))
    committee_id = _optional_id(raw_id)
    return CommitteeSuggestion(
        **_draft_fields(data),
        committee_id=committee_id,
        committee_reasoning=coerce_text(data.get("committee_reasoning"), DEFAULT_COMMITTEE_REASONING),
        committee=resolve_committee(committee_id, committees),
    )


def normalize_icon(value: Any) -> str:
    if isinstance(value, str):
        key = "".join(value.split()).lower()
        if key in PERSONA_ICONS:
            return key
    return DEFAULT_ICON


def _objections(value: Any) -> tuple[str, ...]:
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        return DEFAULT_OBJECTIONS
    objections = tuple(
        item for item in value if isinstance(item, str) and item.strip()
    )
    return objections or DEFAULT_OBJECTIONS


def map_persona(data: Any) -> DebatePersona:
    data = _object(data)
    return DebatePersona(
        name=coerce_text(data.get("name"), DEFAULT_PERSONA_NAME),
        icon=normalize_icon(data.get("icon")),
        core_argument=coerce_text(data.get("core_argument"), DEFAULT_CORE_ARGUMENT),
        objections=_objections(data.get("objections")),
        actionable_suggestion=coerce_text(data.get("actionable_suggestion"), DEFAULT_SUGGESTION),
    )


def map_debate(data: dict[str, Any]) -> DebateResult:
    raw = data.get("personas")
    if not isinstance(raw, list):
        raw = []
    personas = [map_persona(p) for p in raw[:PERSONA_COUNT]]
    personas.extend([FILLER_PERSONA] * (PERSONA_COUNT - len(personas)))
    return DebateResult(personas=tuple(personas))


def normalize(
    variant: Variant,
    raw_text: str,
    committees: Sequence[Committee] = (),
) -> AnalysisResult | DraftResult | CommitteeSuggestion | DebateResult:
    """Parse and normalize a completion for the given variant.

    `committees` is only consulted by the draft-with-committee variant.
    """
    variant = Variant(variant)
    data = extract_json_object(raw_text)
    if variant is Variant.ANALYZE:
        return map_analysis(data)
    if variant is Variant.DRAFT:
        return map_draft(data)
    if variant is Variant.DRAFT_WITH_COMMITTEE:
        return map_committee_suggestion(data, committees)
    return map_debate(data)
