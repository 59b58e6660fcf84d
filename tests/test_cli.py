import logging
from unittest.mock import patch

import pytest

from refactorer.cli import EXIT_INTERRUPTED, EXIT_STARTUP_ERROR, create_arg_parser, main
from refactorer.errors import RateLimitedError

INSTRUCTION = "Replace all variable names starting with 'old_' with 'new_'"


@pytest.fixture
def fake_client(stub_service):
    """Replace the OpenAI client built by the CLI with the stub service."""
    with patch("refactorer.cli.OpenAIClient") as factory:
        factory.return_value = stub_service
        yield factory


def test_parser_defaults():
    args = create_arg_parser().parse_args(["-i", "do it", "-p", "*.py"])
    assert args.instruction == "do it"
    assert args.pattern == "*.py"
    assert args.model is None
    assert args.workers is None


def test_instruction_and_pattern_are_required(capsys):
    with pytest.raises(SystemExit) as info:
        main(["-p", "*.py"])
    assert info.value.code == 2


def test_end_to_end_partial_failure(project, api_key, stub_service, fake_client, caplog):
    stub_service.replies = {
        "old_x = 1": "new_x = 1",
        "old_y = 2": RateLimitedError("Rate limit reached for gpt-4"),
    }
    caplog.set_level(logging.INFO)

    code = main(["-i", INSTRUCTION, "-p", "*.py"])

    assert code == 3
    assert (project / "a.py").read_text(encoding="utf-8") == "new_x = 1"
    assert (project / "b.py").read_text(encoding="utf-8") == "old_y = 2"
    assert (project / "notes.txt").read_text(encoding="utf-8") == "keep me"
    assert "1 succeeded, 1 failed" in caplog.text
    assert "b.py: rate limited" in caplog.text


def test_all_files_succeed(project, api_key, stub_service, fake_client):
    assert main(["-i", INSTRUCTION, "-p", "*.py"]) == 0
    assert (project / "a.py").read_text(encoding="utf-8") == "OLD_X = 1"
    _, kwargs = fake_client.call_args
    assert kwargs["api_key"] == "sk-test"
    assert kwargs["settings"].model == "gpt-4"


def test_instruction_file_is_trimmed(project, api_key, stub_service, fake_client):
    (project / "instructions.txt").write_text("Add type hints\n", encoding="utf-8")

    assert main(["-i", "instructions.txt", "-p", "*.py"]) == 0

    assert {call[1] for call in stub_service.calls} == {"Add type hints"}


def test_model_flag_is_forwarded(project, api_key, stub_service, fake_client):
    main(["-i", INSTRUCTION, "-p", "a.py", "-m", "gpt-4o-mini", "--temperature", "0.5"])

    assert stub_service.calls == [("gpt-4o-mini", INSTRUCTION, "old_x = 1")]
    settings = fake_client.call_args.kwargs["settings"]
    assert settings.model == "gpt-4o-mini"
    assert settings.temperature == 0.5


def test_no_matches_is_not_an_error(project, api_key, stub_service, fake_client, caplog):
    assert main(["-i", INSTRUCTION, "-p", "*.rs"]) == 0
    assert "No files matched" in caplog.text
    assert stub_service.calls == []


def test_missing_api_key_aborts_before_any_file(project, monkeypatch, stub_service, fake_client, caplog):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)

    assert main(["-i", INSTRUCTION, "-p", "*.py"]) == EXIT_STARTUP_ERROR

    assert "OPENAI_API_KEY" in caplog.text
    assert stub_service.calls == []
    assert (project / "a.py").read_text(encoding="utf-8") == "old_x = 1"


def test_unreadable_instruction_file_aborts(project, api_key, stub_service, fake_client):
    (project / "bad.txt").write_bytes(b"\xff\xfe")

    assert main(["-i", "bad.txt", "-p", "*.py"]) == EXIT_STARTUP_ERROR
    assert stub_service.calls == []


def test_invalid_worker_count(project, api_key, fake_client):
    assert main(["-i", INSTRUCTION, "-p", "*.py", "-w", "0"]) == EXIT_STARTUP_ERROR


def test_interrupt_keeps_written_files(project, api_key, stub_service, fake_client):
    stub_service.replies = {"old_x = 1": "new_x = 1", "old_y = 2": KeyboardInterrupt()}

    assert main(["-i", INSTRUCTION, "-p", "*.py"]) == EXIT_INTERRUPTED
    assert (project / "a.py").read_text(encoding="utf-8") == "new_x = 1"
    assert (project / "b.py").read_text(encoding="utf-8") == "old_y = 2"
