"""Tests for ragdesk ask / suggest."""

from __future__ import annotations

from unittest.mock import patch

from ragdesk.cli.main import app
from ragdesk.rag.orchestrator import DEFAULT_SUGGESTIONS


def test_ask_answers_with_sources(runner, added, fake_embed, fake_complete):
    result = runner.invoke(app, ["ask", "How many vacation days do I get?"])

    assert result.exit_code == 0, result.output
    assert "You get twenty days." in result.output
    assert "Sources:" in result.output
    assert "handbook.txt" in result.output

    messages = fake_complete.call_args.kwargs["messages"]
    assert "[Source: handbook.txt]" in messages[0]["content"]
    assert messages[1]["content"] == "How many vacation days do I get?"


def test_ask_empty_index_gives_fallback(runner, project, fake_embed, fake_complete):
    result = runner.invoke(app, ["ask", "What is the parking policy?"])

    assert result.exit_code == 0, result.output
    assert "couldn't find specific" in result.output
    assert "Sources:" not in result.output
    fake_complete.assert_not_called()


def test_ask_invalid_question(runner, project, fake_embed):
    result = runner.invoke(app, ["ask", "??"])
    assert result.exit_code == 1
    assert "valid question" in result.output
    fake_embed.assert_not_called()


def test_ask_generation_failure(runner, added, fake_embed):
    with patch("ragdesk.rag.gateways.llm_client.complete", side_effect=RuntimeError("503")):
        result = runner.invoke(app, ["ask", "How many vacation days?"])
    assert result.exit_code == 1
    assert "couldn't generate an answer" in result.output


def test_ask_without_api_key(runner, project, monkeypatch):
    monkeypatch.delenv("GEMINI_API_KEY")
    result = runner.invoke(app, ["ask", "How many vacation days?"])
    assert result.exit_code == 1
    assert "GEMINI_API_KEY" in result.output


def test_ask_without_db(runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    result = runner.invoke(app, ["ask", "How many vacation days?"])
    assert result.exit_code == 1
    assert "No database found" in result.output


def test_suggest_defaults(runner, project):
    result = runner.invoke(app, ["suggest"])
    assert result.exit_code == 0
    assert DEFAULT_SUGGESTIONS[0] in result.output


def test_suggest_from_project_config(runner, project):
    (project / "ragdesk.yaml").write_text(
        "retrieval:\n  suggestions:\n    - Where is the handbook?\n", encoding="utf-8"
    )
    result = runner.invoke(app, ["suggest"])
    assert result.exit_code == 0
    assert "Where is the handbook?" in result.output
    assert DEFAULT_SUGGESTIONS[0] not in result.output


def test_suggest_lists_orchestrator_questions(runner, project):
    with patch(
        "ragdesk.rag.orchestrator.RagOrchestrator.suggested_questions",
        return_value=["Who approves travel?"],
    ) as mock_s:
        result = runner.invoke(app, ["suggest"])
    assert result.exit_code == 0, result.output
    mock_s.assert_called_once()
    assert "Who approves travel?" in result.output


def test_suggest_without_db(runner, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    result = runner.invoke(app, ["suggest"])
    assert result.exit_code == 1
    assert "No database found" in result.output
