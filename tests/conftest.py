from types import SimpleNamespace

import pytest


class FakeSession:
    """Stands in for requests.Session; replays canned (status, reason) pairs."""

    def __init__(self, statuses=None):
        self.statuses = list(statuses or [])
        self.calls = []

    def post(self, url, data=None, headers=None, timeout=None):
        self.calls.append({"url": url, "data": data, "headers": headers, "timeout": timeout})
        status, reason = self.statuses.pop(0) if self.statuses else (200, "OK")
        if isinstance(status, Exception):
            raise status
        return SimpleNamespace(ok=200 <= status < 400, status_code=status, reason=reason)


@pytest.fixture
def session():
    return FakeSession()


@pytest.fixture
def log_file(tmp_path):
    path = tmp_path / "test.log"
    path.write_bytes(b"")
    return path
