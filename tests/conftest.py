import logging
import os
import sys
from pathlib import Path
from typing import Callable, Dict, Iterable

import pytest

# Ensure the project root is on sys.path for package imports during tests.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from bodytimeline.core.errors import EntryAccessError  # noqa: E402
from bodytimeline.core.record import TimelineRecord  # noqa: E402
from bodytimeline.platform.base import StatBundle, StatProvider  # noqa: E402
from bodytimeline.platform.posix import PosixStatProvider  # noqa: E402

# 2025-06-19 13:47:35 UTC, a Thursday
SAMPLE_INSTANT = 1750340855


@pytest.fixture(autouse=True)
def _clean_environment(monkeypatch: pytest.MonkeyPatch) -> Iterable[None]:
    for key in list(os.environ):
        if key.startswith("BODYTIMELINE_"):
            monkeypatch.delenv(key, raising=False)

    yield

    # CliRunner swaps stderr; drop console handlers bound to closed streams.
    logger = logging.getLogger("bodytimeline")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


class FakeStatProvider(StatProvider):
    """POSIX provider that fails on demand for selected paths."""

    name = "fake"

    def __init__(self, failures: Dict[str, EntryAccessError] | None = None):
        self.failures = dict(failures or {})
        self.calls: list[str] = []
        self._posix = PosixStatProvider()

    def stat(self, path: str) -> StatBundle:
        self.calls.append(path)
        if path in self.failures:
            raise self.failures[path]
        return self._posix.stat(path)


@pytest.fixture
def fake_provider() -> Callable[..., FakeStatProvider]:
    return FakeStatProvider


@pytest.fixture
def make_record() -> Callable[..., TimelineRecord]:
    def _make(path: str = "/evidence/file.txt", **overrides) -> TimelineRecord:
        values = {
            "path": path,
            "identity_number": 1234,
            "mode": 33188,
            "owner_id": 1000,
            "group_id": 1000,
            "size_bytes": 42,
            "access_time": SAMPLE_INSTANT,
            "modify_time": SAMPLE_INSTANT,
            "change_time": SAMPLE_INSTANT,
            "birth_time": SAMPLE_INSTANT,
        }
        values.update(overrides)
        return TimelineRecord(**values)

    return _make


@pytest.fixture
def write_bodyfile(tmp_path: Path) -> Callable[..., Path]:
    def _write(lines: Iterable[str], name: str = "evidence.body") -> Path:
        target = tmp_path / name
        target.write_text("".join(f"{line}\n" for line in lines), encoding="utf-8")
        return target

    return _write
