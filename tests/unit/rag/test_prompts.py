"""Tests for the grounded-answer prompt template."""

from __future__ import annotations

from ragdesk.rag.prompts import PromptConfig, build_messages, build_system_prompt


def test_context_section_included_when_present():
    prompt = build_system_prompt("[Source: a.pdf]\nTwenty days.", PromptConfig())
    assert "<context>\n[Source: a.pdf]\nTwenty days.\n</context>" in prompt
    assert "untrusted source data" in prompt


def test_context_section_omitted_when_blank():
    prompt = build_system_prompt("   ", PromptConfig())
    assert "<context>" not in prompt
    assert "untrusted" not in prompt


def test_persona_and_fallback_contact():
    cfg = PromptConfig(assistant_name="Ada", organization="Acme", fallback_contact="People Ops")
    prompt = build_system_prompt("", cfg)
    assert prompt.startswith("You are Ada, a virtual assistant for Acme.")
    assert "People Ops" in prompt


def test_build_messages_question_verbatim():
    messages = build_messages("  ¿Cuántos días?  ", "", PromptConfig())
    assert [m["role"] for m in messages] == ["system", "user"]
    assert messages[1]["content"] == "  ¿Cuántos días?  "
