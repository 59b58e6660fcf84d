"""Shared fixtures for the refactorer test-suite."""

from __future__ import annotations

from typing import Dict, Optional, Union

import pytest


class StubCompletionService:
    """Deterministic stand-in for the OpenAI client.

    `replies` maps a file's current content to either the text to return
    or an exception to raise.  Unknown content is echoed back upper-cased.
    """

    def __init__(self, replies: Optional[Dict[str, Union[str, Exception]]] = None) -> None:
        self.replies = replies or {}
        self.calls = []

    def complete(self, model: str, instruction: str, content: str) -> str:
        self.calls.append((model, instruction, content))
        reply = self.replies.get(content, content.upper())
        if isinstance(reply, BaseException):
            raise reply
        return reply


@pytest.fixture
def stub_service():
    return StubCompletionService()


@pytest.fixture
def project(tmp_path, monkeypatch):
    """A working directory holding two Python files and a text file."""
    (tmp_path / "a.py").write_text("old_x = 1", encoding="utf-8")
    (tmp_path / "b.py").write_text("old_y = 2", encoding="utf-8")
    (tmp_path / "notes.txt").write_text("keep me", encoding="utf-8")
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def api_key(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    monkeypatch.delenv("OPENAI_BASE_URL", raising=False)
    return "sk-test"

