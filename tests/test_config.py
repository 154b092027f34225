from customer_profiler.config import Settings, _parse_bool, _parse_list


def test_parse_list_forms():
    assert _parse_list("a, b ,c") == ["a", "b", "c"]
    assert _parse_list('["x", "y"]') == ["x", "y"]
    assert _parse_list("") == []
    assert _parse_list("generating  # progress chatter") == ["generating"]
    assert _parse_list(["  z "]) == ["z"]


def test_parse_bool_forms():
    assert _parse_bool("yes") is True
    assert _parse_bool("off  # disabled") is False
    assert _parse_bool(1) is True


def test_defaults(monkeypatch):
    for key in ("LLM_PROVIDER", "PORT", "ACCEPTED_METHODS", "NOISE_SUBSTRINGS", "NOISE_EXACT", "RPC_PATH"):
        monkeypatch.delenv(key, raising=False)
    s = Settings(_env_file=None)
    assert s.llm_provider == "gemini"
    assert s.port == 8080
    assert s.rpc_path == "/a2a/profiler"
    assert s.accepted_methods == ["agent/task", "message/send"]
    assert s.noise_substrings == ["generating", "creating"]
    assert s.noise_exact == [".", "..", "...", "ce..."]


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("NOISE_SUBSTRINGS", "thinking,working")
    monkeypatch.setenv("ACCEPTED_METHODS", '["message/send"]')
    monkeypatch.setenv("GOOGLE_API_KEY", "k-123")
    monkeypatch.setenv("GENERATION_TIMEOUT", "5")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    s = Settings(_env_file=None)
    assert s.noise_substrings == ["thinking", "working"]
    assert s.accepted_methods == ["message/send"]
    assert s.gemini_api_key == "k-123"
    assert s.generation_timeout == 5.0
    assert s.log_level == "DEBUG"
