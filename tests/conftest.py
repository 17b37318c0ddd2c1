"""Shared fixtures for all tests."""

from collections.abc import Callable, Generator
from pathlib import Path

import pytest

from disk_rest.models import Link


@pytest.fixture
def mock_env_clear(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Clear all cloud-disk-related environment variables for testing.

    This ensures tests don't accidentally use real credentials from the environment.
    """
    env_vars_to_clear = [
        "DISK_TOKEN",
        "DISK_API_URL",
        "DISK_TRANSFER_CHUNK_SIZE",
        "DEBUG",
    ]
    for var in env_vars_to_clear:
        monkeypatch.delenv(var, raising=False)
    yield


@pytest.fixture
def mock_token() -> str:
    """Mock OAuth token for testing."""
    return "test_token_123456789"


@pytest.fixture
def payload() -> bytes:
    """Deterministic, non-repeating-per-chunk file content (5000 bytes)."""
    return bytes((i * 7 + i // 251) % 256 for i in range(5000))


@pytest.fixture
def make_file(tmp_path: Path) -> Callable[..., Path]:
    """Factory writing ``data`` to a file under ``tmp_path``."""

    def _make(data: bytes, name: str = "local.bin") -> Path:
        path = tmp_path / name
        path.write_bytes(data)
        return path

    return _make


@pytest.fixture
def upload_link() -> Link:
    return Link(href="https://uploader.disk.test/upload-target/abc123", method="PUT")


@pytest.fixture
def download_link() -> Link:
    return Link(href="https://downloader.disk.test/disk/report.pdf?sig=xyz", method="GET")


@pytest.fixture
def operation_link() -> Link:
    return Link(
        href="https://cloud-api.yandex.net/v1/disk/operations/op-42",
        method="GET",
    )
