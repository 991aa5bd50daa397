"""GovMind - AI analysis, drafting and debate simulation for DAO proposals."""

from importlib.metadata import version as _version, PackageNotFoundError

try:
    __version__ = _version("govmind")
except PackageNotFoundError:
    __version__ = "dev"

from .errors import (
    GovmindError,
    GatewayError,
    ParseError,
    ValidationError,
    ConfigurationError,
)

from .schema import (
    Variant,
    ProposalStatus,
    AnalysisResult,
    ComplexityBreakdown,
    DraftResult,
    Committee,
    CommitteeSuggestion,
    DebatePersona,
    DebateResult,
    ProposalRecord,
)

from .prompts import build_prompt
from .models import ModelGateway, MockGateway
from .normalize import normalize
from .store import ProposalStore
from .copilot import ProposalCopilot, Result, ViewState, select_view_state

__all__ = [
    "ProposalCopilot",
    "ProposalStore",
    "ModelGateway",
    "MockGateway",
    "build_prompt",
    "normalize",
    "select_view_state",
    "Result",
    "ViewState",
    "Variant",
    "ProposalStatus",
    "AnalysisResult",
    "ComplexityBreakdown",
    "DraftResult",
    "Committee",
    "CommitteeSuggestion",
    "DebatePersona",
    "DebateResult",
    "ProposalRecord",
    "GovmindError",
    "GatewayError",
    "ParseError",
    "ValidationError",
    "ConfigurationError",
]
