import json

from refactorer.config import CONFIG_FILE, DEFAULT_MODEL, CompletionSettings, RefactorerConfig


def test_defaults_without_config_file(tmp_path, monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.delenv("OPENAI_BASE_URL", raising=False)

    config = RefactorerConfig.load(tmp_path)

    assert config.openai_api_key is None
    assert config.completion == CompletionSettings()
    assert config.completion.model == DEFAULT_MODEL == "gpt-4"
    assert config.workers == 1
    assert config.config_path is None


def test_environment_values(tmp_path, monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-abc")
    monkeypatch.setenv("OPENAI_BASE_URL", "http://localhost:8080/v1")

    config = RefactorerConfig.load(tmp_path)

    assert config.openai_api_key == "sk-abc"
    assert config.openai_base_url == "http://localhost:8080/v1"


def test_blank_api_key_counts_as_missing(tmp_path, monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "")
    assert RefactorerConfig.load(tmp_path).openai_api_key is None


def test_config_file_values(tmp_path):
    data = {"completion": {"model": "gpt-4o", "temperature": 0.2, "max_output_tokens": 900}, "workers": 3}
    (tmp_path / CONFIG_FILE).write_text(json.dumps(data), encoding="utf-8")

    config = RefactorerConfig.load(tmp_path)

    assert config.completion.model == "gpt-4o"
    assert config.completion.temperature == 0.2
    assert config.completion.max_output_tokens == 900
    assert config.workers == 3
    assert config.config_path == tmp_path / CONFIG_FILE


def test_unparsable_config_falls_back_to_defaults(tmp_path, caplog):
    (tmp_path / CONFIG_FILE).write_text("{not json", encoding="utf-8")

    config = RefactorerConfig.load(tmp_path)

    assert config.completion == CompletionSettings()
    assert "Failed to parse" in caplog.text


def test_unknown_keys_and_bad_workers_fall_back(tmp_path):
    path = tmp_path / CONFIG_FILE
    path.write_text(json.dumps({"completion": {"modle": "typo"}}), encoding="utf-8")
    assert RefactorerConfig.load(tmp_path).completion.model == DEFAULT_MODEL

    path.write_text(json.dumps({"workers": 0}), encoding="utf-8")
    assert RefactorerConfig.load(tmp_path).workers == 1
