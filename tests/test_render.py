"""Tests for markdown rendering of results."""

from govmind.render import analysis_markdown, debate_markdown, draft_markdown, split_numbered_points
from govmind.normalize import map_analysis, map_debate
from govmind.schema import Committee, CommitteeSuggestion, DraftResult


def test_split_dotted_points():
    text = "1. Audit may slip past launch 2. Budget could overrun 3. Auditor availability is limited"
    assert split_numbered_points(text) == [
        "Audit may slip past launch",
        "Budget could overrun",
        "Auditor availability is limited",
    ]


def test_split_parenthesized_points():
    text = "(1) Scope the audit first (2) Pay in two milestones"
    assert split_numbered_points(text) == ["Scope the audit first", "Pay in two milestones"]


def test_split_plain_text_is_one_point():
    assert split_numbered_points("Standard proposal risks apply") == ["Standard proposal risks apply"]


def test_split_does_not_break_decimals():
    text = "Costs 2.5 million over 1.5 years"
    assert split_numbered_points(text) == [text]


def test_split_empty():
    assert split_numbered_points("") == []


def test_analysis_markdown_sections(valid_analysis):
    md = analysis_markdown(map_analysis(valid_analysis))
    assert "## Summary" in md
    assert "## Complexity: 6.5/10" in md
    assert "- Technical: 7.0" in md
    assert "1. Audit may slip\n2. Budget overrun" in md


def test_draft_markdown_with_committee():
    committee = Committee("12", "Technical Committee")
    suggestion = CommitteeSuggestion(
        "Upgrade oracle", "S", "R", "1. X",
        committee_id="12", committee_reasoning="Protocol change.", committee=committee,
    )
    md = draft_markdown(suggestion)
    assert md.startswith("# Upgrade oracle")
    assert "**Suggested committee:** Technical Committee (ID: 12)" in md


def test_draft_markdown_unknown_committee():
    suggestion = CommitteeSuggestion("T", "S", "R", "1. X", committee_id="99", committee_reasoning="r")
    assert "unknown committee (ID: 99)" in draft_markdown(suggestion)


def test_plain_draft_has_no_committee_line():
    assert "Suggested committee" not in draft_markdown(DraftResult("T", "S", "R", "1. X"))


def test_debate_markdown_lists_every_persona():
    debate = map_debate({"personas": [{"name": "Treasury Steward", "icon": "dollarsign", "objections": ["Too costly", "No runway"]}]})
    md = debate_markdown(debate)
    assert "### Treasury Steward [dollarsign]" in md
    assert "1. Too costly\n2. No runway" in md
    assert md.count("### ") == 4
