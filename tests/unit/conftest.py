"""Unit test configuration - runs before any test collection or imports.

Forces the keyring null backend so tests never touch a real keychain, points
the config file at a temporary path and blocks real HTTP calls.
"""

from pathlib import Path
from typing import Any, Dict

import keyring
import pytest
from keyring.backends.null import Keyring as NullKeyring

keyring.set_keyring(NullKeyring())


class MockResponse:
    """Mock HTTP response for preventing real network calls."""

    def __init__(self, content: bytes = b"", status_code: int = 200) -> None:
        """Initialize mock response.

        Args:
            content: Raw body returned in ``content``
            status_code: HTTP status code
        """
        self.content = content
        self.status_code = status_code
        self.reason = "OK" if status_code == 200 else "Error"
        self.headers: Dict[str, str] = {}


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Keep settings and HTTP calls of each test local to the test."""
    monkeypatch.setenv("CBLCLI_CONFIG", str(tmp_path / "config.json"))
    for name in ("COBBLER_API_URL", "COBBLER_MAX_RETRIES", "COBBLER_TIMEOUT", "CBLCLI_SSL_VERIFY"):
        monkeypatch.delenv(name, raising=False)

    def mock_requests_method(*args: Any, **kwargs: Any) -> MockResponse:
        """Return an empty 500 response for any unpatched HTTP call."""
        return MockResponse(status_code=500)

    monkeypatch.setattr("requests.post", mock_requests_method)
