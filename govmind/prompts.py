"""All prompt templates for the proposal analysis variants.

Templates embed the exact JSON schema the normalizer expects, so the model is
steered toward machine-parseable output. Building a prompt is pure: no I/O.
"""

from collections.abc import Mapping, Sequence

from .errors import ValidationError
from .schema import Committee, Variant

# --- System messages (one per variant) ---

SYSTEM_PROMPTS: dict[Variant, str] = {
    Variant.ANALYZE: (
        "You are a professional DAO governance analyst who specializes in analyzing"
        " proposals and providing valuable recommendations. Always provide consistent,"
        " structured responses in valid JSON format."
    ),
    Variant.DRAFT: (
        "You are an experienced DAO governance writer. You turn rough ideas into clear,"
        " well-structured proposals. Always respond with valid JSON only."
    ),
    Variant.DRAFT_WITH_COMMITTEE: (
        "You are an experienced DAO governance writer who also knows how the DAO's"
        " committees divide responsibility. Always respond with valid JSON only."
    ),
    Variant.DEBATE: (
        "You simulate a debate between DAO members with sharply different priorities."
        " Stay in character for each persona. Always respond with valid JSON only."
    ),
}

# --- Analyze ---

ANALYSIS_TEMPLATE = """Please analyze the following DAO proposal and provide a detailed analysis report:

Proposal Title: {title}
Proposal Description: {description}

Please analyze from the following perspectives:

1. Summary: Summarize the core content of the proposal in simple and understandable language

2. Risk Assessment: Analyze the potential risks and challenges. Format as a single text string with numbered points (1. First risk, 2. Second risk, etc.)

3. Recommendations: Provide specific improvement suggestions or precautions. Format as a single text string with numbered points (1. First recommendation, 2. Second recommendation, etc.)

4. Complexity Analysis: Provide a comprehensive complexity assessment:
   - Overall Complexity Score (1-10): Average of all complexity dimensions
   - Technical Complexity (1-10): How technically challenging is implementation? Consider:
     * Code changes required, smart contract complexity, integration challenges
     * 1-3: Simple parameter changes, basic operations
     * 4-6: Moderate development work, standard integrations
     * 7-10: Complex architecture changes, novel technical solutions
   - Financial Complexity (1-10): How complex are the financial/economic aspects? Consider:
     * Budget size, funding mechanisms, tokenomics changes
     * 1-3: Simple budget allocations, standard payments
     * 4-6: Multi-phase funding, moderate economic impact
     * 7-10: Complex tokenomics, major economic restructuring
   - Governance Complexity (1-10): How complex are the governance/legal aspects? Consider:
     * Voting mechanisms, legal implications, regulatory considerations
     * 1-3: Standard proposals within existing framework
     * 4-6: Minor governance changes, moderate legal review needed
     * 7-10: Major governance restructuring, complex legal implications
   - Timeline Complexity (1-10): How complex is coordination and execution timeline? Consider:
     * Dependencies, coordination requirements, milestone complexity
     * 1-3: Single-step execution, minimal coordination
     * 4-6: Multi-phase execution, moderate dependencies
     * 7-10: Complex multi-stakeholder coordination, long-term execution

5. Estimated Impact: Evaluate the potential impact of the proposal on the DAO

Please return the result in JSON format without wrapping it in Markdown formatting:
{{
    "summary": "Summary of the proposal",
    "risk_assessment": "1. First risk point 2. Second risk point 3. Third risk point",
    "recommendations": "1. First recommendation 2. Second recommendation 3. Third recommendation",
    "complexity_score": 5.5,
    "complexity_breakdown": {{
        "technical_complexity": 6.0,
        "financial_complexity": 4.0,
        "governance_complexity": 7.0,
        "timeline_complexity": 5.0,
        "explanation": "Why each dimension received its score",
        "comparison": "How this compares to typical DAO proposals"
    }},
    "estimated_impact": "Estimated impact on the DAO"
}}"""

# --- Draft ---

DRAFT_TEMPLATE = """Turn the following idea into a complete DAO governance proposal.

Idea: {idea}

Write:
1. Title: a concise, descriptive proposal title (under 80 characters)
2. Summary: two or three sentences a busy voter can read in ten seconds
3. Rationale: why the DAO should do this, what problem it solves, and what happens if it does nothing
4. Specifications: concrete deliverables, budget, milestones and success criteria, as numbered points

Return ONLY a JSON object, without Markdown formatting, matching exactly:
{{
    "title": "Proposal title",
    "summary": "Short summary",
    "rationale": "Why this proposal matters",
    "specifications": "1. First deliverable 2. Second deliverable 3. Budget and milestones"
}}"""

COMMITTEE_DRAFT_TEMPLATE = """Turn the following idea into a complete DAO governance proposal and pick the committee best placed to review it.

Idea: {idea}

Active committees:
{committee_lines}

Write:
1. Title: a concise, descriptive proposal title (under 80 characters)
2. Summary: two or three sentences a busy voter can read in ten seconds
3. Rationale: why the DAO should do this, what problem it solves, and what happens if it does nothing
4. Specifications: concrete deliverables, budget, milestones and success criteria, as numbered points
5. Committee: the ID of the single committee above whose responsibilities best match this proposal, or null if none fits, with a one or two sentence explanation

Return ONLY a JSON object, without Markdown formatting, matching exactly:
{{
    "title": "Proposal title",
    "summary": "Short summary",
    "rationale": "Why this proposal matters",
    "specifications": "1. First deliverable 2. Second deliverable 3. Budget and milestones",
    "suggested_committee_id": "ID copied exactly from the list above, or null",
    "committee_reasoning": "Why this committee should review the proposal"
}}"""

COMMITTEE_LINE = "{committee_type} (ID: {id}): {responsibilities}"
NO_RESPONSIBILITIES = "No specific responsibilities listed"
NO_COMMITTEES = "No active committees"

# --- Debate simulation ---

# Fixed roster: (name, icon tag, focus). These names are part of the contract
# with the UI; the normalizer maps unknown icons to the last tag.
DEBATE_PERSONAS: list[tuple[str, str, str]] = [
    (
        "Treasury Steward",
        "dollarsign",
        "Financial sustainability: budget size, runway, token emissions and return on treasury spend.",
    ),
    (
        "Security Auditor",
        "shield",
        "Technical and security risk: smart contract changes, attack surface, upgrade paths and failure modes.",
    ),
    (
        "Community Advocate",
        "users",
        "Member impact: fairness, inclusiveness, voter fatigue and how ordinary token holders experience the change.",
    ),
    (
        "Protocol Visionary",
        "lightbulb",
        "Long-term growth: ecosystem positioning, innovation and the cost of moving too slowly.",
    ),
]

PERSONA_ICONS: tuple[str, ...] = tuple(icon for _, icon, _ in DEBATE_PERSONAS)

DEBATE_TEMPLATE = """Simulate a debate about the following DAO proposal before it goes to a vote.

Proposal Title: {title}
Proposal Content:
{content}

Four DAO members review it. Each speaks only from their own perspective:
{persona_lines}

For each persona give:
- core_argument: their overall position on the proposal in two or three sentences
- objections: an ordered list of their specific objections or concerns (at least one)
- actionable_suggestion: one concrete change that would win their support

Return ONLY a JSON object, without Markdown formatting, with exactly four personas in the order above:
{{
    "personas": [
        {{
            "name": "Treasury Steward",
            "icon": "dollarsign",
            "core_argument": "Overall position",
            "objections": ["First objection", "Second objection"],
            "actionable_suggestion": "One concrete change"
        }}
    ]
}}
Use the icon tags exactly as given: {icon_tags}."""


def _require(inputs: Mapping[str, object], *keys: str) -> list[str]:
    values = []
    for key in keys:
        value = inputs.get(key)
        if not isinstance(value, str) or not value.strip():
            raise ValidationError(f"'{key}' is required and must be non-empty")
        values.append(value.strip())
    return values


def format_committees(committees: Sequence[Committee]) -> str:
    """One `<type> (ID: <id>): <responsibilities>` line per committee."""
    if not committees:
        return NO_COMMITTEES
    return "\n".join(
        COMMITTEE_LINE.format(
            committee_type=c.committee_type,
            id=c.id,
            responsibilities=c.responsibilities.strip() or NO_RESPONSIBILITIES,
        )
        for c in committees
    )


def analysis_prompt(title: str, description: str) -> str:
    title, description = _require({"title": title, "description": description}, "title", "description")
    return ANALYSIS_TEMPLATE.format(title=title, description=description)


def draft_prompt(idea: str) -> str:
    (idea,) = _require({"idea": idea}, "idea")
    return DRAFT_TEMPLATE.format(idea=idea)


def committee_draft_prompt(idea: str, committees: Sequence[Committee]) -> str:
    (idea,) = _require({"idea": idea}, "idea")
    return COMMITTEE_DRAFT_TEMPLATE.format(
        idea=idea, committee_lines=format_committees(committees),
    )


def debate_prompt(title: str, content: str) -> str:
    title, content = _require({"title": title, "content": content}, "title", "content")
    persona_lines = "\n".join(
        f"{i}. {name} (icon: {icon}) - {focus}"
        for i, (name, icon, focus) in enumerate(DEBATE_PERSONAS, 1)
    )
    return DEBATE_TEMPLATE.format(
        title=title,
        content=content,
        persona_lines=persona_lines,
        icon_tags=", ".join(PERSONA_ICONS),
    )


def build_prompt(variant: Variant, inputs: Mapping[str, object]) -> str:
    """Build the user prompt for a variant from its typed inputs."""
    variant = Variant(variant)
    if variant is Variant.ANALYZE:
        return analysis_prompt(inputs.get("title"), inputs.get("description"))
    if variant is Variant.DRAFT:
        return draft_prompt(inputs.get("idea"))
    if variant is Variant.DRAFT_WITH_COMMITTEE:
        return committee_draft_prompt(inputs.get("idea"), inputs.get("committees") or ())
    return debate_prompt(inputs.get("title"), inputs.get("content"))
