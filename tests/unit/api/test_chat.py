"""Tests for POST /api/chat: plain reply, transfer attempt details, blocks, fallback, errors."""

from decimal import Decimal

import pytest
from httpx import AsyncClient

from arcflow.application.exceptions import ProviderError
from arcflow.application.reasoning import PlainText, StructuredCall
from arcflow.domain.models.outcome import TransactionReceipt

TRUSTED_CHECKSUMMED = "0x937402B657c91D9E74fcf373187F1758c0D8E933"


def _payment(to, amount):
    return StructuredCall(name="execute_payment", args={"to": to, "amount": amount})


@pytest.mark.asyncio
async def test_plain_reply_has_no_action(async_client: AsyncClient, fake_adapter):
    r = await async_client.post("/api/chat", json={"message": "hello", "history": []})
    assert r.status_code == 200
    assert r.json() == {"reply": "INTENT_RECEIVED. Awaiting Authorization."}
    assert fake_adapter.calls == []


@pytest.mark.asyncio
async def test_transfer_attempt_returns_details(async_client: AsyncClient, provider_scripts, fake_adapter):
    provider_scripts["gemini-3-flash"] = [
        _payment(TRUSTED_CHECKSUMMED, "0.1 USDC"),
        PlainText("Transfer executed."),
    ]
    r = await async_client.post(
        "/api/chat",
        json={"message": f"Please send 0.1 USDC to {TRUSTED_CHECKSUMMED}"},
    )
    assert r.status_code == 200
    data = r.json()
    assert data["reply"] == "Transfer executed."
    assert data["action"] == "TX_ATTEMPT"
    assert data["details"]["to"] == TRUSTED_CHECKSUMMED
    assert data["details"]["amount"] == "0.1 USDC"
    assert data["details"]["output"].startswith("[SUCCESS] TX_HASH:")
    assert data["details"]["analysis"]["score"] == 0
    assert data["details"]["analysis"]["status"] == "BROADCASTED"
    assert fake_adapter.calls == [(TRUSTED_CHECKSUMMED.lower(), Decimal("0.1"))]


@pytest.mark.asyncio
async def test_blocked_transfer_reports_factors(async_client: AsyncClient, provider_scripts, fake_adapter):
    provider_scripts["gemini-3-flash"] = [_payment("0xUNKNOWN", "25"), PlainText("Blocked by policy.")]
    r = await async_client.post("/api/chat", json={"message": "send 25 to 0xUNKNOWN"})
    data = r.json()
    assert data["details"]["analysis"]["status"] == "BLOCKED_CRITICAL"
    assert data["details"]["analysis"]["factors"] == ["UNKNOWN_ENTITY", "HIGH_VOLUME_TX"]
    assert data["details"]["output"].startswith("[BLOCK] Risk Threshold Exceeded (90/100)")
    assert fake_adapter.calls == []


@pytest.mark.asyncio
async def test_over_cap_transfer_blocked_policy(async_client: AsyncClient, provider_scripts, fake_adapter):
    provider_scripts["gemini-3-flash"] = [_payment(TRUSTED_CHECKSUMMED, "60"), PlainText("Over the cap.")]
    r = await async_client.post("/api/chat", json={"message": "send 60"})
    assert r.json()["details"]["analysis"]["status"] == "BLOCKED_POLICY"
    assert fake_adapter.calls == []


@pytest.mark.asyncio
async def test_history_forwarded(async_client: AsyncClient, app_with_overrides):
    history = [{"role": "user", "text": "hi"}, {"role": "model", "text": "hello"}]
    r = await async_client.post("/api/chat", json={"message": "again", "history": history})
    assert r.status_code == 200
    forwarded = app_with_overrides.state.test_provider.histories["gemini-3-flash"]
    assert [(t.role, t.text) for t in forwarded] == [("user", "hi"), ("model", "hello")]


@pytest.mark.asyncio
async def test_fallback_to_second_candidate(async_client: AsyncClient, provider_scripts):
    provider_scripts["gemini-3-flash"] = ProviderError("HTTP 404")
    provider_scripts["gemini-2.5-flash"] = [PlainText("from fallback")]
    r = await async_client.post("/api/chat", json={"message": "hi"})
    assert r.status_code == 200
    assert r.json()["reply"] == "from fallback"


@pytest.mark.asyncio
async def test_all_providers_exhausted_returns_503(async_client: AsyncClient, provider_scripts):
    provider_scripts["gemini-3-flash"] = ProviderError("quota")
    provider_scripts["gemini-2.5-flash"] = ProviderError("quota")
    r = await async_client.post("/api/chat", json={"message": "hi"})
    assert r.status_code == 503
    assert "gemini-3-flash, gemini-2.5-flash" in r.json()["error"]


@pytest.mark.asyncio
async def test_empty_message_returns_422(async_client: AsyncClient):
    r = await async_client.post("/api/chat", json={"message": ""})
    assert r.status_code == 422
    assert "error" in r.json()


@pytest.mark.asyncio
async def test_correlation_id_echoed(async_client: AsyncClient):
    r = await async_client.post("/api/chat", json={"message": "hi"}, headers={"X-Correlation-ID": "c-1"})
    assert r.headers["X-Correlation-ID"] == "c-1"


@pytest.mark.asyncio
async def test_turn_timeout_returns_504(async_client: AsyncClient, app_with_overrides):
    import asyncio

    from arcflow.config.settings import get_settings

    class SlowSession:
        async def send_message(self, text):
            await asyncio.sleep(1)
            return PlainText("too late")

    class SlowProvider:
        def start_session(self, candidate, *, system_context, tool_schema, history):
            return SlowSession()

    from arcflow.api import dependencies

    fast_settings = get_settings().model_copy(update={"turn_timeout_seconds": 0.05})
    app_with_overrides.dependency_overrides[get_settings] = lambda: fast_settings
    app_with_overrides.dependency_overrides[dependencies.get_reasoning_provider] = lambda: SlowProvider()
    r = await async_client.post("/api/chat", json={"message": "hi"})
    assert r.status_code == 504
    assert r.json() == {"error": "Conversation turn timed out"}


@pytest.mark.asyncio
async def test_deadline_after_dispatch_returns_pending_reply(async_client: AsyncClient, app_with_overrides, provider_scripts):
    import asyncio

    from arcflow.api import dependencies
    from arcflow.config.settings import get_settings

    class StalledAdapter:
        def __init__(self):
            self.calls = []

        async def submit(self, recipient, amount):
            self.calls.append((recipient, amount))
            await asyncio.sleep(0.3)
            return TransactionReceipt(transaction_id="0xlate", explorer_url=None)

    adapter = StalledAdapter()
    provider_scripts["gemini-3-flash"] = [_payment(TRUSTED_CHECKSUMMED, "1"), PlainText("unused")]
    fast_settings = get_settings().model_copy(update={"turn_timeout_seconds": 0.05})
    app_with_overrides.dependency_overrides[get_settings] = lambda: fast_settings
    app_with_overrides.dependency_overrides[dependencies.get_execution_adapter] = lambda: adapter

    r = await async_client.post("/api/chat", json={"message": "send 1"})

    assert r.status_code == 200
    data = r.json()
    assert data["action"] == "TX_ATTEMPT"
    assert data["reply"].startswith("[PENDING]")
    assert "Do not resend" in data["reply"]
    assert "analysis" not in data["details"]
    assert len(adapter.calls) == 1


@pytest.mark.asyncio
async def test_cors_preflight_allowed(async_client: AsyncClient):
    r = await async_client.options(
        "/api/chat",
        headers={
            "Origin": "http://localhost:5173",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "content-type",
        },
    )
    assert r.status_code == 200
    assert r.headers["access-control-allow-origin"] in ("*", "http://localhost:5173")


@pytest.mark.asyncio
async def test_error_schema_documented_in_openapi(async_client: AsyncClient):
    r = await async_client.get("/openapi.json")
    responses = r.json()["paths"]["/api/chat"]["post"]["responses"]
    assert {"400", "503", "504"} <= set(responses)
