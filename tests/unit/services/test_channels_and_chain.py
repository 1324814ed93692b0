"""Tests for simulated notification channels and the transaction verifier."""

from __future__ import annotations

import json
import random

import httpx
import pytest

from rightguard.services.chain import TransactionVerifier
from rightguard.services.notifications import SimulatedChannel, build_channels
from rightguard.settings import get_settings


def test_channel_without_failure_rate_always_delivers():
    channel = SimulatedChannel("sms")
    assert all(channel.send("5551234567", "hello") for _ in range(20))


def test_channel_outcomes_follow_seeded_rng():
    always_fails = SimulatedChannel("email", failure_rate=1.0, rng=random.Random(7))
    assert always_fails.send("a@example.com", "hello") is False

    first = SimulatedChannel("social", failure_rate=0.5, rng=random.Random(42))
    second = SimulatedChannel("social", failure_rate=0.5, rng=random.Random(42))
    assert [first.send("@x", "m") for _ in range(10)] == [second.send("@x", "m") for _ in range(10)]


def test_channel_rejects_invalid_rate():
    with pytest.raises(ValueError):
        SimulatedChannel("sms", failure_rate=1.5)


def test_build_channels_covers_every_kind():
    channels = build_channels(rng=random.Random(1))
    assert set(channels) == {"sms", "social", "email"}
    assert all(channel.kind == kind for kind, channel in channels.items())


def _verifier(handler) -> TransactionVerifier:
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return TransactionVerifier(settings=get_settings(), client=client)


def test_known_transaction_verifies():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen.update(json.loads(request.content))
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "result": {"hash": "0xabc"}})

    assert _verifier(handler).verify("0xabc", 0.99) is True
    assert seen["method"] == "eth_getTransactionByHash"
    assert seen["params"] == ["0xabc"]


def test_unknown_transaction_fails():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "result": None})

    assert _verifier(handler).verify("0xabc", 0.99) is False


def test_transport_errors_fail_closed():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("unreachable", request=request)

    assert _verifier(handler).verify("0xabc", 0.99) is False


def test_non_json_reply_fails_closed():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, text="<html>bad gateway</html>")

    assert _verifier(handler).verify("0xabc", 0.99) is False
