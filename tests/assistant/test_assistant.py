from __future__ import annotations

from dataclean.assistant import SYSTEM_PROMPT, Assistant, build_summary
from dataclean.config_model.model import RootCfg
from dataclean.profiling.metrics import profile_dataset


def test_build_summary_top_issues(customers):
    summary = build_summary(profile_dataset(customers), top_n=2)
    assert summary["rows"] == 5
    assert summary["columns"] == 4
    assert len(summary["top_issues"]) == 2
    scores = [i["score"] for i in summary["top_issues"]]
    assert scores == sorted(scores)


def test_ask_sends_system_prompt_summary_and_history():
    calls = []

    def backend(messages):
        calls.append(messages)
        return "Use impute_mean on amount."

    bot = Assistant(backend)
    assert bot.ask("How do I fix amount?", {"global_score": 80}) == "Use impute_mean on amount."
    first = calls[0]
    assert first[0]["role"] == "system"
    assert first[0]["content"].startswith(SYSTEM_PROMPT)
    assert '"global_score": 80' in first[0]["content"]
    assert first[-1] == {"role": "user", "content": "How do I fix amount?"}

    bot.ask("And email?")
    assert calls[1][1]["content"] == "How do I fix amount?"
    assert len(bot.history) == 4


def test_fallback_on_failure_missing_backend_and_blank_reply():
    cfg = RootCfg(assistant={"fallback_message": "offline"})

    def broken(messages):
        raise TimeoutError("slow")

    assert Assistant(broken, cfg).ask("hi") == "offline"
    assert Assistant(None, cfg).ask("hi") == "offline"
    assert Assistant(lambda m: "   ", cfg).ask("hi") == "offline"


def test_empty_question_and_history_cap():
    bot = Assistant(lambda m: "ok", RootCfg(assistant={"max_history": 3}))
    assert bot.ask("   ") == ""
    assert bot.history == []
    for q in ("a", "b", "c"):
        bot.ask(q)
    assert len(bot.history) == 3
    assert bot.history[-1] == {"role": "assistant", "content": "ok"}
    bot.reset()
    assert bot.history == []


def test_summarize_uses_configured_top_issues(customers):
    bot = Assistant(cfg=RootCfg(assistant={"top_issues": 1}))
    assert len(bot.summarize(profile_dataset(customers))["top_issues"]) == 1
