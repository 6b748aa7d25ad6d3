# tests/conftest.py
import importlib.util
import json
import os
import sys
import time

import pytest
from nacl.signing import SigningKey

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
INTERACTIONS_DIR = os.path.join(ROOT, "lambdas", "discord_interactions")
REGISTRAR_DIR = os.path.join(ROOT, "lambdas", "register_commands")

# Lambda bundles import their siblings as top-level modules
if INTERACTIONS_DIR not in sys.path:
    sys.path.insert(0, INTERACTIONS_DIR)


def _load(name, directory):
    """Every function ships a handler.py, so load each under its own name."""
    spec = importlib.util.spec_from_file_location(name, os.path.join(directory, "handler.py"))
    module = importlib.util.module_from_spec(spec)
    sys.modules[name] = module
    spec.loader.exec_module(module)
    return module


@pytest.fixture(scope="session")
def interactions():
    return _load("discord_interactions_handler", INTERACTIONS_DIR)


@pytest.fixture(scope="session")
def registrar():
    return _load("register_commands_handler", REGISTRAR_DIR)


@pytest.fixture(scope="session")
def signing_key():
    return SigningKey.generate()


@pytest.fixture
def public_key(signing_key, monkeypatch):
    key = signing_key.verify_key.encode().hex()
    monkeypatch.setenv("DISCORD_PUBLIC_KEY", key)
    monkeypatch.delenv("DISCORD_SECRET_NAME", raising=False)
    return key


@pytest.fixture
def make_event(signing_key):
    """Build an API Gateway proxy event signed the way Discord signs it."""
    def _make(payload, signature=None, timestamp=None):
        body = payload if isinstance(payload, str) else json.dumps(payload)
        timestamp = timestamp or str(int(time.time()))
        if signature is None:
            signature = signing_key.sign(timestamp.encode() + body.encode()).signature.hex()
        return {
            "headers": {
                "X-Signature-Ed25519": signature,
                "X-Signature-Timestamp": timestamp,
                "Content-Type": "application/json",
            },
            "body": body,
            "isBase64Encoded": False,
        }
    return _make


def command_payload(name="pattern", value="a.b"):
    return {
        "type": 2,
        "id": "1234",
        "data": {"name": name, "options": [{"name": "key", "type": 3, "value": value}]},
    }


class FakeResponse:
    """Just enough of requests.Response for fetch_patterns."""

    def __init__(self, status_code=200, payload=None, text=None):
        self.status_code = status_code
        self._payload = payload
        self._text = text

    @property
    def ok(self):
        return 200 <= self.status_code < 300

    def json(self):
        if self._text is not None:
            return json.loads(self._text)
        return self._payload
