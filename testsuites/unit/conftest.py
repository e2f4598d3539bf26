"""
Fakes shared by the runtime layer unit tests.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

import pytest

from autotest_runtime.common import CONFIG_FILE_ENV, RuntimeConfig

from testsuites.api_testing.framework import ConfigLoader


@dataclass
class FakeResponse:
    ok: bool = True
    status: int = 200
    status_text: str = "OK"
    body: Any = None

    def json(self) -> Any:
        return self.body


class FakeApiClient:
    """
    In-memory stand-in for the API client capability.

    ``post`` echoes the payload back with a generated id; the next
    responses can be forced through ``fail_next_post``/``fail_deletes``.
    """

    def __init__(self):
        self.calls: List[Tuple[str, str, Optional[Dict[str, Any]]]] = []
        self.fail_deletes: set = set()
        self._forced_post: Optional[FakeResponse] = None
        self._counter = 0

    def fail_next_post(self, status: int = 500, status_text: str = "Internal Server Error"):
        self._forced_post = FakeResponse(ok=False, status=status, status_text=status_text)

    async def post(self, url: str, data: Any = None, **kwargs: Any) -> FakeResponse:
        self.calls.append(("POST", url, data))
        if self._forced_post is not None:
            response, self._forced_post = self._forced_post, None
            return response

        self._counter += 1
        kind = url.rstrip("/").rsplit("/", 1)[-1]
        return FakeResponse(status=201, status_text="Created",
                            body={"id": f"{kind}-{self._counter}", **data})

    async def delete(self, url: str, **kwargs: Any) -> FakeResponse:
        self.calls.append(("DELETE", url, None))
        if url in self.fail_deletes:
            return FakeResponse(ok=False, status=404, status_text="Not Found")
        return FakeResponse(status=204, status_text="No Content")

    def urls(self, method: str) -> List[str]:
        return [url for m, url, _ in self.calls if m == method]


@pytest.fixture
def fake_api_client() -> FakeApiClient:
    return FakeApiClient()


@pytest.fixture(autouse=True)
def isolated_runtime_config(monkeypatch, tmp_path):
    """Point the runtime configuration at an empty file for every test."""
    config_file = tmp_path / "runtime.yaml"
    config_file.write_text("{}\n", encoding="utf-8")
    monkeypatch.setenv(CONFIG_FILE_ENV, str(config_file))
    for key in ("RETRY_MAX_ATTEMPTS", "RETRY_TIMEOUT", "RETRY_DELAY"):
        monkeypatch.delenv(key, raising=False)

    RuntimeConfig.reset()
    yield config_file
    RuntimeConfig.reset()


@pytest.fixture(autouse=True)
def fresh_config_loader():
    yield
    ConfigLoader.reset()
