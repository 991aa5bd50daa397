"""Markdown rendering of normalized results for CLI and saved sessions."""

import re

from .schema import AnalysisResult, CommitteeSuggestion, DebateResult, DraftResult

# "(1) first (2) second" style
_PAREN_POINT_RE = re.compile(r"\(\d+\)\s*(.*?)(?=\(\d+\)|$)", re.DOTALL)
# "1. first 2. second" style
_DOTTED_POINT_RE = re.compile(r"(?:^|\s)\d+\.\s+")


def split_numbered_points(text: str) -> list[str]:
    """Split numbered-point prose into its points.

    Returns a single-element list when the text holds fewer than two points.
    """
    if not text:
        return []
    points = [m.strip() for m in _PAREN_POINT_RE.findall(text) if m.strip()]
    if len(points) > 1:
        return points
    points = [p.strip() for p in _DOTTED_POINT_RE.split(text) if len(p.strip()) > 5]
    if len(points) > 1:
        return points
    return [text.strip()]


def _bullets(text: str) -> str:
    points = split_numbered_points(text)
    if len(points) <= 1:
        return text
    return "\n".join(f"{i}. {p}" for i, p in enumerate(points, 1))


def analysis_markdown(analysis: AnalysisResult) -> str:
    b = analysis.complexity_breakdown
    return "\n\n".join([
        f"## Summary\n\n{analysis.summary}",
        f"## Risk Assessment\n\n{_bullets(analysis.risk_assessment)}",
        f"## Recommendations\n\n{_bullets(analysis.recommendations)}",
        (
            f"## Complexity: {analysis.complexity_score:.1f}/10\n\n"
            f"- Technical: {b.technical_complexity:.1f}\n"
            f"- Financial: {b.financial_complexity:.1f}\n"
            f"- Governance: {b.governance_complexity:.1f}\n"
            f"- Timeline: {b.timeline_complexity:.1f}\n\n"
            f"{b.explanation}\n\n{b.comparison}"
        ),
        f"## Estimated Impact\n\n{analysis.estimated_impact}",
    ])


def draft_markdown(draft: DraftResult) -> str:
    parts = [
        f"# {draft.title}",
        draft.summary,
        f"**Rationale:**\n{draft.rationale}",
        f"**Specifications:**\n{_bullets(draft.specifications)}",
    ]
    if isinstance(draft, CommitteeSuggestion):
        if draft.committee is not None:
            target = f"{draft.committee.committee_type} (ID: {draft.committee.id})"
        elif draft.committee_id is not None:
            target = f"unknown committee (ID: {draft.committee_id})"
        else:
            target = "none"
        parts.append(f"**Suggested committee:** {target}\n\n{draft.committee_reasoning}")
    return "\n\n".join(parts)


def debate_markdown(debate: DebateResult) -> str:
    sections = []
    for persona in debate.personas:
        objections = "\n".join(f"{i}. {o}" for i, o in enumerate(persona.objections, 1))
        sections.append(
            f"### {persona.name} [{persona.icon}]\n\n"
            f"{persona.core_argument}\n\n"
            f"**Objections:**\n{objections}\n\n"
            f"**Suggestion:** {persona.actionable_suggestion}"
        )
    return "\n\n".join(sections)
