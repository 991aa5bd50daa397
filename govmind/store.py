"""Proposal analysis store: lifecycle state machine over an injectable map.

States: Pending -> Analyzing -> {Analyzed, Failed}. Analyzed and Failed can
both be re-entered through analyze/retry. Every transition replaces the
record wholesale under the proposal's lock, and at most one analysis task
exists per proposal id at a time; concurrent requests join the running task.
"""

import asyncio
import dataclasses
from collections.abc import Callable, MutableMapping
from datetime import datetime, timezone
from typing import Protocol

from .errors import GatewayError, ParseError, ValidationError
from .log import configure_logger
from .normalize import normalize
from .prompts import analysis_prompt
from .schema import ProposalRecord, ProposalStatus, Variant

logger = configure_logger(__name__)


class Gateway(Protocol):
    async def complete(self, prompt: str, variant: Variant) -> str: ...


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ProposalStore:
    """Owns every ProposalRecord and serializes transitions per proposal id.

    The backing map can be injected (e.g. to share one map with a persistence
    layer); create one store per process and pass it to all consumers.
    """

    def __init__(
        self,
        gateway: Gateway,
        records: MutableMapping[str, ProposalRecord] | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self._gateway = gateway
        self._records = records if records is not None else {}
        self._clock = clock or _utcnow
        self._locks: dict[str, asyncio.Lock] = {}
        self._inflight: dict[str, asyncio.Task] = {}
        self._counter = 0

    # --- Reads ---

    def get(self, proposal_id: str) -> ProposalRecord | None:
        return self._records.get(proposal_id)

    def list_proposals(self) -> list[ProposalRecord]:
        """All records, newest submission first."""
        return sorted(self._records.values(), key=lambda r: r.submitted_at, reverse=True)

    def is_analyzing(self, proposal_id: str) -> bool:
        task = self._inflight.get(proposal_id)
        return task is not None and not task.done()

    # --- Transitions ---

    def _next_id(self) -> str:
        while True:
            proposal_id = f"proposal_{self._counter}"
            self._counter += 1
            if proposal_id not in self._records:
                return proposal_id

    def submit(self, proposal_id: str | None, title: str, description: str) -> ProposalRecord:
        """Create a Pending record, or return the existing one unchanged.

        Submission is idempotent by id: a second submit never overwrites the
        first record's title or description.
        """
        if not isinstance(title, str) or not title.strip():
            raise ValidationError("Title is required for analysis")
        if not isinstance(description, str) or not description.strip():
            raise ValidationError("Description is required for analysis")

        if proposal_id:
            existing = self._records.get(proposal_id)
            if existing is not None:
                logger.debug("Proposal %s already submitted; keeping original", proposal_id)
                return existing
        else:
            proposal_id = self._next_id()

        record = ProposalRecord(
            id=proposal_id,
            title=title.strip(),
            description=description.strip(),
            submitted_at=self._clock(),
        )
        self._records[proposal_id] = record
        logger.info("Submitted proposal %s", proposal_id)
        return record

    def _lock_for(self, proposal_id: str) -> asyncio.Lock:
        lock = self._locks.get(proposal_id)
        if lock is None:
            lock = self._locks[proposal_id] = asyncio.Lock()
        return lock

    def _replace(self, proposal_id: str, **changes) -> ProposalRecord:
        record = dataclasses.replace(self._records[proposal_id], **changes)
        self._records[proposal_id] = record
        return record

    async def dispatch(self, proposal_id: str, label: str = "analyze") -> asyncio.Task:
        """Start analysis for a proposal, or join the one already running.

        Returns the task that will settle the record. Raises ValidationError
        for an unknown id before any state changes.
        """
        async with self._lock_for(proposal_id):
            task = self._inflight.get(proposal_id)
            if task is not None and not task.done():
                logger.info("%s for %s joined in-flight analysis", label.capitalize(), proposal_id)
                return task

            if proposal_id not in self._records:
                raise ValidationError(f"Proposal not found: {proposal_id}")

            self._replace(proposal_id, status=ProposalStatus.ANALYZING, analysis=None)
            task = asyncio.create_task(self._run_analysis(proposal_id, label))
            self._inflight[proposal_id] = task
            task.add_done_callback(lambda t: self._forget(proposal_id, t))
            logger.info("Dispatched %s for %s", label, proposal_id)
            return task

    def _forget(self, proposal_id: str, task: asyncio.Task) -> None:
        if self._inflight.get(proposal_id) is task:
            del self._inflight[proposal_id]
        # Exceptions are logged in _run_analysis.
        if not task.cancelled():
            task.exception()

    async def analyze(self, proposal_id: str) -> ProposalRecord:
        """Run (or join) analysis and return the settled record.

        Gateway and parse failures settle the record as Failed; they are
        logged, never raised.
        """
        task = await self.dispatch(proposal_id)
        return await asyncio.shield(task)

    async def retry(self, proposal_id: str) -> ProposalRecord:
        """Same as analyze; labelled separately in logs."""
        task = await self.dispatch(proposal_id, label="retry")
        return await asyncio.shield(task)

    async def _run_analysis(self, proposal_id: str, label: str) -> ProposalRecord:
        record = self._records[proposal_id]
        try:
            prompt = analysis_prompt(record.title, record.description)
            raw = await self._gateway.complete(prompt, Variant.ANALYZE)
            analysis = normalize(Variant.ANALYZE, raw)
        except GatewayError as e:
            logger.warning("%s for %s failed at gateway: %s", label.capitalize(), proposal_id, e)
            return await self._settle(proposal_id, ProposalStatus.FAILED)
        except ParseError as e:
            logger.warning(
                "%s for %s returned unparseable output: %s | text=%s",
                label.capitalize(), proposal_id, e, e.text[:500],
            )
            return await self._settle(proposal_id, ProposalStatus.FAILED)
        except Exception:
            # Never leave the record stuck in Analyzing.
            logger.exception("%s for %s crashed", label.capitalize(), proposal_id)
            await self._settle(proposal_id, ProposalStatus.FAILED)
            raise

        logger.info("%s for %s completed", label.capitalize(), proposal_id)
        return await self._settle(proposal_id, ProposalStatus.ANALYZED, analysis)

    async def _settle(self, proposal_id, status, analysis=None) -> ProposalRecord:
        async with self._lock_for(proposal_id):
            return self._replace(proposal_id, status=status, analysis=analysis)
