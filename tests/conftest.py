import os, tempfile

# Settings are read at import time by speech_relay.main; give it a key and
# keep its directories out of the working tree.
_tmp = tempfile.mkdtemp(prefix="speech-relay-")
os.environ.setdefault("AZURE_SPEECH_KEY", "test-key")
os.environ.setdefault("AZURE_SPEECH_REGION", "westus")
os.environ.setdefault("AUDIO_DIR", os.path.join(_tmp, "audio"))
os.environ.setdefault("SCRATCH_DIR", os.path.join(_tmp, "scratch"))

import pytest
from fastapi.testclient import TestClient

from speech_relay.config import get_settings
from speech_relay.services.audio_store import get_audio_store


def _clear_caches():
    get_settings.cache_clear()
    get_audio_store.cache_clear()


@pytest.fixture
def settings_env(tmp_path, monkeypatch):
    monkeypatch.setenv("AZURE_SPEECH_KEY", "test-key")
    monkeypatch.setenv("AZURE_SPEECH_REGION", "westus")
    monkeypatch.setenv("AUDIO_DIR", str(tmp_path / "audio"))
    monkeypatch.setenv("SCRATCH_DIR", str(tmp_path / "scratch"))
    monkeypatch.setenv("PUBLIC_BASE_URL", "http://localhost:3001")
    _clear_caches()
    yield tmp_path
    _clear_caches()


@pytest.fixture
def client(settings_env):
    from speech_relay.main import create_app
    with TestClient(create_app()) as c:
        yield c


class FakeResponse:
    def __init__(self, status_code=200, json_body=None, content=b"", text=""):
        self.status_code = status_code
        self._json = json_body
        self.content = content
        self.text = text

    def json(self):
        if self._json is None:
            raise ValueError("no json")
        return self._json

    def raise_for_status(self):
        if self.status_code >= 400:
            import requests
            raise requests.HTTPError(f"{self.status_code} error")


@pytest.fixture
def fake_response():
    return FakeResponse
