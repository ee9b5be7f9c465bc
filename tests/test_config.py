from pathlib import Path

from ollama_agent.config import AgentSettings, load_settings


def test_defaults(monkeypatch, tmp_path) -> None:
    monkeypatch.chdir(tmp_path)
    for key in ("OLLAMA_AGENT_BASE_URL", "OLLAMA_AGENT_MODEL", "OLLAMA_AGENT_TIMEOUT_S", "OLLAMA_AGENT_WORKSPACE"):
        monkeypatch.delenv(key, raising=False)

    settings = AgentSettings()

    assert settings.base_url == "http://localhost:11434"
    assert settings.model == "qwen3:8b"
    assert settings.timeout_s is None
    assert settings.restrict_to_workspace is False
    assert Path(settings.workspace) == Path.cwd()


def test_env_and_overrides(monkeypatch, tmp_path) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("OLLAMA_AGENT_MODEL", "llama3.2")
    monkeypatch.setenv("OLLAMA_AGENT_TIMEOUT_S", "90")

    settings = load_settings(model=None, base_url="http://gpu:11434")

    assert settings.model == "llama3.2"
    assert settings.timeout_s == 90.0
    assert settings.base_url == "http://gpu:11434"
    assert load_settings(model="mistral").model == "mistral"


def test_env_file(monkeypatch, tmp_path) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("OLLAMA_AGENT_MODEL", raising=False)
    (tmp_path / ".env").write_text("OLLAMA_AGENT_MODEL=phi4\n", encoding="utf-8")

    assert AgentSettings().model == "phi4"
