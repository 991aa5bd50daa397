"""Shared fixtures: scripted gateways that stand in for the model endpoint."""

import asyncio
import copy
import json

import pytest

from govmind.errors import GatewayError
from govmind.schema import Variant

VALID_ANALYSIS = {
    "summary": "Fund an external audit of the v2 contracts.",
    "risk_assessment": "1. Audit may slip 2. Budget overrun",
    "recommendations": "1. Fix scope up front 2. Pay in milestones",
    "complexity_score": 6.5,
    "complexity_breakdown": {
        "technical_complexity": 7,
        "financial_complexity": 5,
        "governance_complexity": 3,
        "timeline_complexity": 4,
        "explanation": "Mostly technical work.",
        "comparison": "Above average.",
    },
    "estimated_impact": "Improves protocol safety.",
}


@pytest.fixture
def anyio_backend():
    return "asyncio"


class ScriptedGateway:
    """Returns queued replies in order; an Exception entry is raised instead."""

    def __init__(self, *replies):
        self.replies = list(replies)
        self.calls: list[tuple[str, Variant]] = []

    async def complete(self, prompt, variant):
        self.calls.append((prompt, Variant(variant)))
        reply = self.replies.pop(0) if len(self.replies) > 1 else self.replies[0]
        if isinstance(reply, Exception):
            raise reply
        return reply


class GatedGateway(ScriptedGateway):
    """Blocks every call until `release` is set, so tests can overlap requests."""

    def __init__(self, *replies):
        super().__init__(*replies)
        self.release = asyncio.Event()
        self.entered = asyncio.Event()

    async def complete(self, prompt, variant):
        self.entered.set()
        await self.release.wait()
        return await super().complete(prompt, variant)


@pytest.fixture
def analysis_json():
    return json.dumps(VALID_ANALYSIS)


@pytest.fixture
def good_gateway(analysis_json):
    return ScriptedGateway(analysis_json)


@pytest.fixture
def failing_gateway():
    return ScriptedGateway(GatewayError("timeout"))


@pytest.fixture
def valid_analysis():
    return copy.deepcopy(VALID_ANALYSIS)


@pytest.fixture
def scripted_gateway():
    """Factory: `scripted_gateway(*replies)` builds a ScriptedGateway."""
    return ScriptedGateway


@pytest.fixture
def gated_gateway():
    """Factory: `gated_gateway(*replies)` builds a GatedGateway."""
    return GatedGateway
