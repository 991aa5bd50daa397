"""Model configurations and the completion gateway."""

import json
import re
from dataclasses import dataclass

import httpx

from .errors import GatewayError
from .log import configure_logger
from .prompts import DEBATE_PERSONAS, SYSTEM_PROMPTS
from .schema import Variant

logger = configure_logger(__name__)

DEEPSEEK_URL = "https://api.deepseek.com/chat/completions"
DEFAULT_MODEL = "deepseek-chat"


@dataclass(frozen=True)
class VariantConfig:
    """Decoding settings for one variant."""
    temperature: float
    max_tokens: int
    timeout: float


# Lower temperature for analysis/classification-like variants, a larger token
# budget and timeout for the four-persona debate.
VARIANT_CONFIGS: dict[Variant, VariantConfig] = {
    Variant.ANALYZE: VariantConfig(temperature=0.3, max_tokens=2000, timeout=60.0),
    Variant.DRAFT: VariantConfig(temperature=0.7, max_tokens=1500, timeout=60.0),
    Variant.DRAFT_WITH_COMMITTEE: VariantConfig(temperature=0.3, max_tokens=1500, timeout=60.0),
    Variant.DEBATE: VariantConfig(temperature=0.8, max_tokens=3000, timeout=120.0),
}


def build_request_body(model: str, prompt: str, variant: Variant) -> dict:
    """Chat-completions request body for a prompt under a variant's config."""
    config = VARIANT_CONFIGS[variant]
    return {
        "model": model,
        "messages": [
            {"role": "system", "content": SYSTEM_PROMPTS[variant]},
            {"role": "user", "content": prompt},
        ],
        "temperature": config.temperature,
        "max_tokens": config.max_tokens,
        "stream": False,
    }


class ModelGateway:
    """Sends one prompt to a chat-completions endpoint and returns raw text.

    Single attempt, no retry: retrying is the store's business. Only network
    and envelope errors are translated; the completion body is never parsed.
    """

    def __init__(
        self,
        api_key: str | None = None,
        url: str = DEEPSEEK_URL,
        model: str = DEFAULT_MODEL,
        client: httpx.AsyncClient | None = None,
    ):
        self.api_key = api_key
        self.url = url
        self.model = model
        self._client = client

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    async def complete(self, prompt: str, variant: Variant) -> str:
        variant = Variant(variant)
        config = VARIANT_CONFIGS[variant]
        body = build_request_body(self.model, prompt, variant)

        if self._client is not None:
            return await self._post(self._client, body, config.timeout)
        async with httpx.AsyncClient(timeout=config.timeout) as client:
            return await self._post(client, body, config.timeout)

    async def _post(self, client: httpx.AsyncClient, body: dict, timeout: float) -> str:
        try:
            response = await client.post(
                self.url, headers=self._headers(), json=body, timeout=timeout,
            )
        except httpx.TimeoutException as e:
            logger.warning("Completion request timed out after %.0fs", timeout)
            raise GatewayError("timeout") from e
        except httpx.RequestError as e:
            logger.warning("Completion request failed: %s", e)
            raise GatewayError("connection", body=str(e)) from e

        if not response.is_success:
            logger.warning("Completion endpoint returned HTTP %s", response.status_code)
            raise GatewayError("http_status", status_code=response.status_code, body=response.text)

        try:
            data = response.json()
        except (json.JSONDecodeError, ValueError) as e:
            raise GatewayError("invalid_envelope", body=response.text) from e
        if not isinstance(data, dict):
            raise GatewayError("invalid_envelope", body=response.text)

        choices = data.get("choices")
        if not choices:
            raise GatewayError("no_choices")

        message = choices[0].get("message") if isinstance(choices[0], dict) else None
        content = message.get("content") if isinstance(message, dict) else None
        if not isinstance(content, str):
            raise GatewayError("no_content")
        return content


# --- Offline gateway ---

_FINANCIAL_WORDS = ("budget", "funding")
_TECHNICAL_WORDS = ("technical", "development")
_TITLE_RE = re.compile(r"^Proposal Title: (.*)$", re.MULTILINE)
_DESCRIPTION_RE = re.compile(r"^Proposal Description: (.*?)\n\nPlease analyze", re.MULTILINE | re.DOTALL)


def mock_analysis(title: str, description: str) -> dict:
    """Keyword-based stand-in analysis for running without an API key."""
    word_count = len(description.split())
    lowered = description.lower()
    financial = any(w in lowered for w in _FINANCIAL_WORDS)
    technical = any(w in lowered for w in _TECHNICAL_WORDS)
    focus = "financially" if financial else "technically" if technical else "generally"

    if financial:
        impact = "High impact due to financial implications"
    elif technical:
        impact = "Medium-high impact due to technical changes"
    else:
        impact = "Medium impact proposal"

    return {
        "summary": f'Mock analysis for "{title}". This proposal contains {word_count} words and appears to be {focus} focused.',
        "risk_assessment": "1. This is a mock analysis for testing purposes 2. Real analysis requires API configuration 3. Consider implementing proper risk assessment",
        "recommendations": "1. Configure AI API keys for real analysis 2. Review proposal content carefully 3. Engage community in discussion",
        "complexity_score": min(10.0, max(1.0, word_count / 20)),
        "complexity_breakdown": {
            "technical_complexity": 7.0 if technical else 3.0,
            "financial_complexity": 8.0 if financial else 2.0,
            "governance_complexity": 5.0,
            "timeline_complexity": 4.0,
            "explanation": "Mock complexity assessment based on keyword analysis",
            "comparison": "This is a simulated complexity score for testing purposes",
        },
        "estimated_impact": impact,
    }


class MockGateway:
    """Deterministic offline gateway producing schema-conformant JSON."""

    async def complete(self, prompt: str, variant: Variant) -> str:
        variant = Variant(variant)
        if variant is Variant.ANALYZE:
            title = _TITLE_RE.search(prompt)
            description = _DESCRIPTION_RE.search(prompt)
            payload = mock_analysis(
                title.group(1) if title else "Untitled",
                description.group(1) if description else "",
            )
        elif variant is Variant.DEBATE:
            payload = {
                "personas": [
                    {
                        "name": name,
                        "icon": icon,
                        "core_argument": f"Mock position focused on {focus[0].lower() + focus[1:]}",
                        "objections": ["This is a simulated objection for testing purposes"],
                        "actionable_suggestion": "Configure AI API keys for a real debate simulation",
                    }
                    for name, icon, focus in DEBATE_PERSONAS
                ]
            }
        else:
            payload = {
                "title": "Mock Proposal Draft",
                "summary": "Mock draft generated without an AI backend.",
                "rationale": "Real drafting requires API configuration.",
                "specifications": "1. Configure AI API keys 2. Regenerate the draft",
            }
            if variant is Variant.DRAFT_WITH_COMMITTEE:
                payload["suggested_committee_id"] = None
                payload["committee_reasoning"] = "Mock drafts do not suggest a committee."
        return json.dumps(payload)
