"""
Pytest configuration and fixtures for stage3_dl tests.
"""

import hashlib
import sys
from pathlib import Path
from unittest.mock import patch

import pytest
import requests

# Make the package importable without installing it
sys.path.insert(0, str(Path(__file__).parent.parent))


SAMPLE_LISTING = """\
-----BEGIN PGP SIGNED MESSAGE-----
Hash: SHA512

# Latest as of Sat, 15 Jun 2024 17:00:14 +0000
# ts=1718470814
20240615T170014Z/stage3-amd64-openrc-20240615T170014Z.tar.xz 274382931
20240609T164903Z/stage3-amd64-systemd-20240609T164903Z.tar.xz 286421844
20240615T170014Z/stage3-amd64-desktop-openrc-20240615T170014Z.tar.xz 391028776
-----BEGIN PGP SIGNATURE-----

iQKTBAEBCgB9FiEEVPXQlzOXSlCHJglbxjXkKdWb6dwFAmZt2JZfFIAAAAAALgAo
=xyzw
-----END PGP SIGNATURE-----
"""


class FakeResponse:
    """Minimal stand-in for requests.Response (streaming + context manager)."""

    def __init__(self, status_code=200, body=b"", chunks=None, headers=None, fail_after=None):
        self.status_code = status_code
        self.content = body if chunks is None else b"".join(chunks)
        self._chunks = chunks if chunks is not None else ([body] if body else [])
        self.headers = dict(headers or {})
        self._fail_after = fail_after
        self.closed = False

    @property
    def text(self):
        return self.content.decode("utf-8", errors="replace")

    def iter_content(self, chunk_size=1):
        for i, chunk in enumerate(self._chunks):
            if self._fail_after is not None and i >= self._fail_after:
                raise requests.ConnectionError("connection reset")
            yield chunk

    def close(self):
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
        return False


class FakeSession:
    """requests.Session double: replays scripted results per URL, records calls.

    ``routes`` maps url -> FakeResponse | Exception | list of those (consumed in order).
    Unknown URLs answer 404.
    """

    def __init__(self, routes=None):
        self.routes = {k: (list(v) if isinstance(v, list) else v) for k, v in (routes or {}).items()}
        self.calls = []

    def get(self, url, **kwargs):
        self.calls.append(url)
        item = self.routes.get(url, FakeResponse(404))
        if isinstance(item, list):
            item = item.pop(0) if len(item) > 1 else item[0]
        if isinstance(item, BaseException):
            raise item
        return item


@pytest.fixture
def sample_listing():
    return SAMPLE_LISTING


@pytest.fixture
def artifact(tmp_path):
    """A small fake stage3 tarball and its SHA-256."""
    path = tmp_path / "stage3-amd64-openrc-20240615T170014Z.tar.xz"
    data = b"\xfd7zXZ\x00" + b"stage3 payload " * 512
    path.write_bytes(data)
    return path, hashlib.sha256(data).hexdigest()


@pytest.fixture
def no_sleep():
    with patch("stage3_dl.core.download.time.sleep") as mock_sleep:
        yield mock_sleep


@pytest.fixture
def no_gpg():
    with patch("stage3_dl.core.verify.gpg_binary", return_value=None) as mock_gpg:
        yield mock_gpg
