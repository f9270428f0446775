from __future__ import annotations

import importlib.util
from pathlib import Path

from requestable.errors import InvalidURLError
from requestable.result import Failure, Response, Success

SCRIPT = Path(__file__).resolve().parents[2] / "scripts" / "fetch_url.py"


def _load_script():
    spec = importlib.util.spec_from_file_location("fetch_url_script", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_script_prints_decoded_response(monkeypatch, capsys) -> None:
    script = _load_script()
    calls = []

    def fake_fetch(url, decoder=None):
        calls.append((url, decoder.name))
        return Success(Response(status_code=200, headers={"Content-Type": "application/json"}, body={"a": 1}))

    monkeypatch.setattr(script, "fetch", fake_fetch)
    monkeypatch.setattr(script, "close_default_transport", lambda: None)

    assert script.main(["https://example.test/ok", "--decoder", "json"]) == 0
    out = capsys.readouterr().out
    assert "status: 200" in out
    assert "Content-Type: application/json" in out
    assert '"a": 1' in out
    assert calls == [("https://example.test/ok", "json")]


def test_script_reports_error_code(monkeypatch, capsys) -> None:
    script = _load_script()
    monkeypatch.setattr(script, "fetch", lambda url, decoder=None: Failure(InvalidURLError(url)))
    monkeypatch.setattr(script, "close_default_transport", lambda: None)

    assert script.main(["not a url"]) == 1
    assert "error: invalid_url" in capsys.readouterr().err
