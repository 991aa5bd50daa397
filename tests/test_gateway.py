"""Tests for the HTTP gateway and the offline mock."""

import json

import httpx
import pytest

from govmind.errors import GatewayError
from govmind.models import (
    DEEPSEEK_URL,
    VARIANT_CONFIGS,
    MockGateway,
    ModelGateway,
    build_request_body,
    mock_analysis,
)
from govmind.normalize import normalize
from govmind.prompts import SYSTEM_PROMPTS, analysis_prompt, debate_prompt
from govmind.schema import Variant


def make_gateway(handler) -> ModelGateway:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return ModelGateway(api_key="sk-test", client=client)


def completion(content) -> dict:
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


def test_request_body_uses_variant_config():
    body = build_request_body("deepseek-chat", "hello", Variant.DEBATE)
    assert body["messages"][0] == {"role": "system", "content": SYSTEM_PROMPTS[Variant.DEBATE]}
    assert body["messages"][1] == {"role": "user", "content": "hello"}
    assert body["temperature"] == VARIANT_CONFIGS[Variant.DEBATE].temperature
    assert body["max_tokens"] == VARIANT_CONFIGS[Variant.DEBATE].max_tokens
    assert body["stream"] is False


def test_analysis_runs_cooler_than_drafting():
    assert VARIANT_CONFIGS[Variant.ANALYZE].temperature < VARIANT_CONFIGS[Variant.DRAFT].temperature
    assert VARIANT_CONFIGS[Variant.DEBATE].max_tokens > VARIANT_CONFIGS[Variant.ANALYZE].max_tokens


@pytest.mark.anyio
async def test_complete_returns_raw_content():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=completion("```json\n{}\n```"))

    text = await make_gateway(handler).complete("prompt", Variant.ANALYZE)

    assert text == "```json\n{}\n```"
    assert seen["url"] == DEEPSEEK_URL
    assert seen["auth"] == "Bearer sk-test"
    assert seen["body"]["model"] == "deepseek-chat"


@pytest.mark.anyio
async def test_non_200_status():
    gateway = make_gateway(lambda request: httpx.Response(429, text="rate limited"))
    with pytest.raises(GatewayError) as exc:
        await gateway.complete("prompt", Variant.DRAFT)
    assert exc.value.reason == "http_status"
    assert exc.value.status_code == 429
    assert exc.value.body == "rate limited"


@pytest.mark.anyio
async def test_timeout():
    def handler(request):
        raise httpx.ReadTimeout("slow", request=request)

    with pytest.raises(GatewayError) as exc:
        await make_gateway(handler).complete("prompt", Variant.ANALYZE)
    assert exc.value.reason == "timeout"


@pytest.mark.anyio
async def test_connection_error():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(GatewayError) as exc:
        await make_gateway(handler).complete("prompt", Variant.ANALYZE)
    assert exc.value.reason == "connection"


@pytest.mark.anyio
@pytest.mark.parametrize(
    "response, reason",
    [
        (httpx.Response(200, text="<html>oops</html>"), "invalid_envelope"),
        (httpx.Response(200, json=["not", "an", "object"]), "invalid_envelope"),
        (httpx.Response(200, json={"choices": []}), "no_choices"),
        (httpx.Response(200, json={}), "no_choices"),
        (httpx.Response(200, json={"choices": [{"message": {}}]}), "no_content"),
        (httpx.Response(200, json=completion(None)), "no_content"),
    ],
)
async def test_bad_envelopes(response, reason):
    with pytest.raises(GatewayError) as exc:
        await make_gateway(lambda request: response).complete("prompt", Variant.ANALYZE)
    assert exc.value.reason == reason


@pytest.mark.anyio
async def test_prose_content_is_returned_unparsed():
    gateway = make_gateway(lambda request: httpx.Response(200, json=completion("I cannot help.")))
    assert await gateway.complete("prompt", Variant.DEBATE) == "I cannot help."


def test_mock_analysis_keyword_heuristics():
    description = " ".join(["word"] * 30) + " budget"
    data = mock_analysis("Grant", description)
    assert data["complexity_score"] == pytest.approx(31 / 20)
    assert data["complexity_breakdown"]["financial_complexity"] == 8.0
    assert data["complexity_breakdown"]["technical_complexity"] == 3.0
    assert data["estimated_impact"] == "High impact due to financial implications"


def test_mock_analysis_score_is_clamped():
    assert mock_analysis("t", "short")["complexity_score"] == 1.0
    assert mock_analysis("t", "w " * 400)["complexity_score"] == 10.0


@pytest.mark.anyio
async def test_mock_gateway_reads_title_from_prompt():
    raw = await MockGateway().complete(
        analysis_prompt("Upgrade oracle", "Technical development of a new oracle"), Variant.ANALYZE,
    )
    result = normalize(Variant.ANALYZE, raw)
    assert '"Upgrade oracle"' in result.summary
    assert result.complexity_breakdown.technical_complexity == 7.0


@pytest.mark.anyio
async def test_mock_gateway_debate_normalizes():
    raw = await MockGateway().complete(debate_prompt("T", "C"), Variant.DEBATE)
    result = normalize(Variant.DEBATE, raw)
    assert [p.icon for p in result.personas] == ["dollarsign", "shield", "users", "lightbulb"]


@pytest.mark.anyio
async def test_any_2xx_status_is_accepted():
    gateway = make_gateway(lambda request: httpx.Response(201, json=completion("{}")))
    assert await gateway.complete("prompt", Variant.ANALYZE) == "{}"
