"""Records and normalized result types shared across the pipeline.

Every result type is a frozen dataclass with no optional fields (apart from
the committee reference, which is nullable by contract). `to_dict()` emits
the same snake_case JSON shape the model is asked to produce.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any


class Variant(str, Enum):
    """The four request/response shapes sent to the model."""
    ANALYZE = "analyze"
    DRAFT = "draft"
    DRAFT_WITH_COMMITTEE = "draft_with_committee"
    DEBATE = "debate"


class ProposalStatus(str, Enum):
    PENDING = "Pending"
    ANALYZING = "Analyzing"
    ANALYZED = "Analyzed"
    FAILED = "Failed"


@dataclass(frozen=True)
class ComplexityBreakdown:
    technical_complexity: float
    financial_complexity: float
    governance_complexity: float
    timeline_complexity: float
    explanation: str
    comparison: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "technical_complexity": self.technical_complexity,
            "financial_complexity": self.financial_complexity,
            "governance_complexity": self.governance_complexity,
            "timeline_complexity": self.timeline_complexity,
            "explanation": self.explanation,
            "comparison": self.comparison,
        }


@dataclass(frozen=True)
class AnalysisResult:
    """Normalized output of the analyze variant."""
    summary: str
    risk_assessment: str
    recommendations: str
    complexity_score: float
    complexity_breakdown: ComplexityBreakdown
    estimated_impact: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "summary": self.summary,
            "risk_assessment": self.risk_assessment,
            "recommendations": self.recommendations,
            "complexity_score": self.complexity_score,
            "complexity_breakdown": self.complexity_breakdown.to_dict(),
            "estimated_impact": self.estimated_impact,
        }


@dataclass(frozen=True)
class DraftResult:
    """Normalized output of the draft variant."""
    title: str
    summary: str
    rationale: str
    specifications: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "summary": self.summary,
            "rationale": self.rationale,
            "specifications": self.specifications,
        }


@dataclass(frozen=True)
class Committee:
    """A DAO committee as supplied by the caller."""
    id: str
    committee_type: str
    responsibilities: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Committee":
        """Build from a mapping; accepts `type` as an alias of `committee_type`."""
        return cls(
            id=str(data["id"]),
            committee_type=str(data.get("committee_type") or data.get("type") or "Committee"),
            responsibilities=str(data.get("responsibilities") or ""),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "committee_type": self.committee_type,
            "responsibilities": self.responsibilities,
        }


@dataclass(frozen=True)
class CommitteeSuggestion(DraftResult):
    """A draft plus the committee the model suggests routing it to.

    `committee` is the caller's committee matching `committee_id`, or None
    when the id is missing or unknown.
    """
    committee_id: str | None = None
    committee_reasoning: str = ""
    committee: Committee | None = None

    @property
    def draft(self) -> DraftResult:
        return DraftResult(self.title, self.summary, self.rationale, self.specifications)

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["suggested_committee_id"] = self.committee_id
        data["committee_reasoning"] = self.committee_reasoning
        data["committee"] = self.committee.to_dict() if self.committee else None
        return data


@dataclass(frozen=True)
class DebatePersona:
    name: str
    icon: str
    core_argument: str
    objections: tuple[str, ...]
    actionable_suggestion: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "icon": self.icon,
            "core_argument": self.core_argument,
            "objections": list(self.objections),
            "actionable_suggestion": self.actionable_suggestion,
        }


@dataclass(frozen=True)
class DebateResult:
    """Exactly four personas, in the order the model returned them."""
    personas: tuple[DebatePersona, ...]

    def to_dict(self) -> dict[str, Any]:
        return {"personas": [p.to_dict() for p in self.personas]}


@dataclass(frozen=True)
class ProposalRecord:
    """One proposal tracked by the analysis store.

    `id` is a composite `<dao-id>-<local-proposal-id>`; treat it as opaque.
    """
    id: str
    title: str
    description: str
    submitted_at: datetime
    status: ProposalStatus = ProposalStatus.PENDING
    analysis: AnalysisResult | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "status": self.status.value,
            "submitted_at": self.submitted_at.isoformat(),
            "analysis": self.analysis.to_dict() if self.analysis else None,
        }
