from __future__ import annotations

import asyncio
from typing import Any

import pytest

from domain.ports import LLMClientPort
from infra.llm import OpenAIChatClient


def test_conforms_to_port() -> None:
    assert isinstance(OpenAIChatClient(api_key="sk-test"), LLMClientPort)


def test_build_payload_with_system_prompt() -> None:
    client = OpenAIChatClient(api_key="sk-test", model="gpt-4o-mini")

    payload = client.build_payload("Write it", system="You are a recruiter", max_tokens=400, temperature=0.7)

    assert payload == {
        "model": "gpt-4o-mini",
        "messages": [
            {"role": "system", "content": "You are a recruiter"},
            {"role": "user", "content": "Write it"},
        ],
        "max_tokens": 400,
        "temperature": 0.7,
    }


def test_build_payload_omits_unset_options() -> None:
    payload = OpenAIChatClient(api_key="sk-test").build_payload("Write it")

    assert payload == {"model": "gpt-4o", "messages": [{"role": "user", "content": "Write it"}]}


def test_complete_returns_first_choice(monkeypatch: pytest.MonkeyPatch) -> None:
    client = OpenAIChatClient(api_key="sk-test", base_url="https://llm.example.com/v1/")
    seen: list[dict[str, Any]] = []

    def fake_post(payload: dict[str, Any]) -> dict[str, Any]:
        seen.append(payload)
        return {"choices": [{"message": {"role": "assistant", "content": "Hello Ada"}}]}

    monkeypatch.setattr(client, "_post_chat_completions", fake_post)

    assert asyncio.run(client.complete("Write it", system="sys")) == "Hello Ada"
    assert seen[0]["messages"][0] == {"role": "system", "content": "sys"}


def test_complete_treats_null_content_as_empty(monkeypatch: pytest.MonkeyPatch) -> None:
    client = OpenAIChatClient(api_key="sk-test")
    monkeypatch.setattr(
        client,
        "_post_chat_completions",
        lambda payload: {"choices": [{"message": {"content": None}}]},
    )

    assert asyncio.run(client.complete("Write it")) == ""
