"""Caller-facing entry points and UI state selection.

The copilot never raises gateway or parse failures to its caller: analysis
failures surface as a Failed record (observed by polling), and the draft and
debate helpers return a failed `Result`.
"""

import asyncio
import time
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar

from .errors import GatewayError, ParseError, ValidationError
from .log import configure_logger
from .normalize import normalize
from .prompts import committee_draft_prompt, debate_prompt, draft_prompt
from .schema import (
    AnalysisResult,
    Committee,
    CommitteeSuggestion,
    DebateResult,
    DraftResult,
    ProposalRecord,
    ProposalStatus,
    Variant,
)
from .store import Gateway, ProposalStore

logger = configure_logger(__name__)

T = TypeVar("T")

POLL_INTERVAL = 3.0


@dataclass(frozen=True)
class Result(Generic[T]):
    """Tagged success/failure. On failure `kind` names the cause."""
    value: T | None = None
    kind: str | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.kind is None

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, kind: str, error: str) -> "Result[T]":
        return cls(kind=kind, error=error)


class ViewState(str, Enum):
    """The five mutually exclusive states a proposal panel can show."""
    IDLE = "idle"            # never submitted: offer "Analyze"
    WAITING = "waiting"      # submitted, analysis not started
    ANALYZING = "analyzing"
    ANALYZED = "analyzed"
    FAILED = "failed"        # always paired with a retry affordance


def select_view_state(record: ProposalRecord | None, busy: bool = False) -> ViewState:
    """Derive the panel state purely from store state.

    `busy` is true while the caller's own submit/retry request is in flight.
    """
    status = record.status if record else None
    if busy or status is ProposalStatus.ANALYZING:
        return ViewState.ANALYZING
    if status is ProposalStatus.FAILED:
        return ViewState.FAILED
    if status is ProposalStatus.ANALYZED and record.analysis is not None:
        return ViewState.ANALYZED
    if record is None:
        return ViewState.IDLE
    return ViewState.WAITING


class ProposalCopilot:
    def __init__(self, store: ProposalStore, gateway: Gateway):
        self.store = store
        self.gateway = gateway

    # --- Proposal analysis ---

    async def submit_and_analyze(
        self, title: str, description: str, proposal_id: str | None = None,
    ) -> str:
        """Submit (idempotently) and start analysis; returns the resolved id.

        Raises ValidationError for blank input before anything is stored.
        Analysis runs in the background; poll `get_analysis`/`view_state`.
        """
        record = self.store.submit(proposal_id, title, description)
        await self.store.dispatch(record.id)
        return record.id

    async def retry(self, proposal_id: str) -> str:
        await self.store.dispatch(proposal_id, label="retry")
        return proposal_id

    def get_analysis(self, proposal_id: str) -> Result[AnalysisResult]:
        record = self.store.get(proposal_id)
        if record is None:
            return Result.failure("not_found", f"Proposal not found: {proposal_id}")
        if record.status is ProposalStatus.ANALYZED and record.analysis is not None:
            return Result.success(record.analysis)
        if record.status is ProposalStatus.FAILED:
            return Result.failure("failed", "Analysis failed; retry to run it again")
        if record.status is ProposalStatus.ANALYZING:
            return Result.failure("analyzing", "Analysis in progress")
        return Result.failure("pending", "Analysis has not started")

    async def wait_for_analysis(
        self,
        proposal_id: str,
        interval: float = POLL_INTERVAL,
        timeout: float | None = None,
    ) -> ProposalRecord | None:
        """Poll the store until the record leaves Pending/Analyzing.

        Returns the last record seen, which is still unsettled if `timeout`
        elapsed first. Returns None for an unknown id.
        """
        deadline = time.monotonic() + timeout if timeout is not None else None
        while True:
            record = self.store.get(proposal_id)
            if record is None:
                return None
            settled = record.status in (ProposalStatus.ANALYZED, ProposalStatus.FAILED)
            if settled and not self.store.is_analyzing(proposal_id):
                return record
            if deadline is not None and time.monotonic() >= deadline:
                return record
            await asyncio.sleep(interval)

    def view_state(self, proposal_id: str, busy: bool = False) -> ViewState:
        return select_view_state(self.store.get(proposal_id), busy)

    # --- One-shot variants ---

    async def _run_variant(self, variant: Variant, prompt_fn, *args, **normalize_kwargs) -> Result[Any]:
        try:
            prompt = prompt_fn(*args)
        except ValidationError as e:
            return Result.failure("validation", str(e))
        try:
            raw = await self.gateway.complete(prompt, variant)
            return Result.success(normalize(variant, raw, **normalize_kwargs))
        except GatewayError as e:
            logger.warning("%s request failed at gateway: %s", variant.value, e)
            return Result.failure("gateway", str(e))
        except ParseError as e:
            logger.warning("%s returned unparseable output: %s | text=%s", variant.value, e, e.text[:500])
            return Result.failure("parse", str(e))

    async def draft_proposal(self, idea: str) -> Result[DraftResult]:
        return await self._run_variant(Variant.DRAFT, draft_prompt, idea)

    async def draft_proposal_with_committees(
        self, idea: str, committees: Sequence[Committee],
    ) -> Result[CommitteeSuggestion]:
        committees = tuple(committees)
        return await self._run_variant(
            Variant.DRAFT_WITH_COMMITTEE, committee_draft_prompt, idea, committees,
            committees=committees,
        )

    async def run_debate_simulation(self, title: str, content: str) -> Result[DebateResult]:
        return await self._run_variant(Variant.DEBATE, debate_prompt, title, content)
