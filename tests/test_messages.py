from typing import List, Optional

from git_helper.ai.interface import CompletionClient
from git_helper.errors import AIRequestError, NothingToAnalyzeError, StageFirstError
from git_helper.messages import (
    MAX_DIFF_CHARS,
    SYSTEM_PROMPT,
    TRUNCATION_MARKER,
    cap_diff,
    generate_commit_message,
)


class FakeClient(CompletionClient):
    def __init__(self, reply: str = "Add greeting helper"):
        self.reply = reply
        self.calls: List[tuple] = []

    def complete(self, system_prompt: str, user_content: str, model: str) -> str:
        self.calls.append((system_prompt, user_content, model))
        return self.reply


def _fake_repo(
    monkeypatch,
    *,
    staged_diff: str = "",
    staged_status: str = "",
    unstaged_diff: str = "",
    unstaged_status: str = "",
    untracked: Optional[List[str]] = None,
) -> None:
    monkeypatch.setattr("git_helper.messages.get_staged_diff", lambda cwd=None: staged_diff)
    monkeypatch.setattr("git_helper.messages.get_staged_status", lambda cwd=None: staged_status)
    monkeypatch.setattr("git_helper.messages.get_unstaged_diff", lambda cwd=None: unstaged_diff)
    monkeypatch.setattr(
        "git_helper.messages.get_unstaged_status", lambda cwd=None: unstaged_status
    )
    monkeypatch.setattr(
        "git_helper.messages.list_untracked_files", lambda cwd=None: list(untracked or [])
    )


def test_no_changes_fails_with_nothing_to_analyze(monkeypatch):
    _fake_repo(monkeypatch)
    client = FakeClient()

    try:
        generate_commit_message(client, "gpt-4o-mini")
    except NothingToAnalyzeError as exc:
        assert "nothing to analyze" in str(exc)
    else:
        raise AssertionError("expected NothingToAnalyzeError to be raised")

    assert client.calls == []


def test_only_untracked_files_fails_with_stage_first(monkeypatch):
    _fake_repo(monkeypatch, untracked=["new.txt"])
    client = FakeClient()

    try:
        generate_commit_message(client, "gpt-4o-mini")
    except StageFirstError as exc:
        assert "stage them first" in str(exc)
        assert not isinstance(exc, NothingToAnalyzeError)
    else:
        raise AssertionError("expected StageFirstError to be raised")

    assert client.calls == []


def test_staged_changes_are_preferred(monkeypatch):
    _fake_repo(
        monkeypatch,
        staged_diff="+staged line\n",
        staged_status="M\tstaged.py\n",
        unstaged_diff="+unstaged line\n",
        unstaged_status="M\tunstaged.py\n",
    )
    client = FakeClient()

    message = generate_commit_message(client, "gpt-4.1")

    assert message == "Add greeting helper"
    system_prompt, user_content, model = client.calls[0]
    assert system_prompt == SYSTEM_PROMPT
    assert model == "gpt-4.1"
    assert "staged.py" in user_content
    assert "+staged line" in user_content
    assert "unstaged.py" not in user_content


def test_falls_back_to_unstaged_changes(monkeypatch):
    _fake_repo(
        monkeypatch,
        unstaged_diff="+unstaged line\n",
        unstaged_status="M\tunstaged.py\n",
    )
    client = FakeClient()

    generate_commit_message(client, "gpt-4o-mini")

    _, user_content, _ = client.calls[0]
    assert user_content.startswith("Unstaged file status:")
    assert "unstaged.py" in user_content


def test_staged_only_does_not_fall_back(monkeypatch):
    _fake_repo(
        monkeypatch,
        unstaged_diff="+unstaged line\n",
        unstaged_status="M\tunstaged.py\n",
    )
    client = FakeClient()

    try:
        generate_commit_message(client, "gpt-4o-mini", staged_only=True)
    except StageFirstError as exc:
        assert "no staged changes" in str(exc)
    else:
        raise AssertionError("expected StageFirstError to be raised")


def test_large_diff_is_capped_before_sending(monkeypatch):
    big_diff = "+" + "x" * (MAX_DIFF_CHARS * 3)
    _fake_repo(monkeypatch, staged_diff=big_diff, staged_status="M\tbig.txt\n")
    client = FakeClient()

    generate_commit_message(client, "gpt-4o-mini")

    _, user_content, _ = client.calls[0]
    assert len(user_content) < MAX_DIFF_CHARS + 200
    assert user_content.endswith(TRUNCATION_MARKER)


def test_cap_diff_leaves_small_diffs_untouched():
    assert cap_diff("+a\n") == "+a\n"
    assert cap_diff("abcdef", limit=3) == "abc" + TRUNCATION_MARKER


def test_reply_is_trimmed_to_first_line(monkeypatch):
    _fake_repo(monkeypatch, staged_diff="+a\n", staged_status="A\ta.txt\n")
    client = FakeClient(reply="\n  Add a.txt  \n\nLonger explanation.\n")

    assert generate_commit_message(client, "gpt-4o-mini") == "Add a.txt"


def test_blank_reply_is_reported(monkeypatch):
    _fake_repo(monkeypatch, staged_diff="+a\n", staged_status="A\ta.txt\n")
    client = FakeClient(reply="   \n")

    try:
        generate_commit_message(client, "gpt-4o-mini")
    except AIRequestError as exc:
        assert exc.kind == "empty-response"
    else:
        raise AssertionError("expected AIRequestError to be raised")
