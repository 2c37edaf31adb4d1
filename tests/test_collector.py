from __future__ import annotations

import os
import re
from pathlib import Path

import pytest

from bodytimeline.bodyfile.format import parse_line
from bodytimeline.collector import collect, walk_paths, write_body_file
from bodytimeline.core.errors import EntryAccessError, OutputOpenError
from bodytimeline.core.logger import EntryErrorLog

ERROR_LINE = re.compile(r"^\[\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}\] (?P<rest>.+)$")


@pytest.fixture
def evidence_tree(tmp_path: Path) -> Path:
    root = tmp_path / "evidence"
    (root / "b_dir").mkdir(parents=True)
    (root / "a.txt").write_bytes(b"x" * 42)
    (root / "b_dir" / "inner.txt").write_text("inner", encoding="utf-8")
    (root / "c.txt").write_text("c", encoding="utf-8")
    return root


def test_walk_lists_files_before_directories(evidence_tree: Path) -> None:
    files, directories = walk_paths(str(evidence_tree))
    root = str(evidence_tree)

    assert files == [
        os.path.join(root, "a.txt"),
        os.path.join(root, "b_dir", "inner.txt"),
        os.path.join(root, "c.txt"),
    ]
    assert directories == [root, os.path.join(root, "b_dir")]


def test_collect_yields_files_then_directories(evidence_tree: Path) -> None:
    records = list(collect(evidence_tree))
    paths = [record.path for record in records]

    assert paths[-2:] == [str(evidence_tree), os.path.join(str(evidence_tree), "b_dir")]
    assert records[0].size_bytes == 42
    assert all(record.checksum == "0" for record in records)


@pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unsupported")
def test_symlinked_directory_is_not_followed(evidence_tree: Path, tmp_path: Path) -> None:
    outside = tmp_path / "outside"
    outside.mkdir()
    (outside / "secret.txt").write_text("s", encoding="utf-8")
    link = evidence_tree / "link"
    try:
        link.symlink_to(outside, target_is_directory=True)
    except OSError:
        pytest.skip("cannot create symlinks here")

    files, directories = walk_paths(str(evidence_tree))

    assert str(link) in files
    assert str(link) not in directories
    assert not any("secret.txt" in path for path in files)


def test_single_file_root(evidence_tree: Path) -> None:
    target = evidence_tree / "a.txt"

    assert walk_paths(str(target)) == ([str(target)], [])


def test_stat_failure_is_logged_and_skipped(
    evidence_tree: Path, tmp_path: Path, fake_provider
) -> None:
    failing = os.path.join(str(evidence_tree), "c.txt")
    provider = fake_provider(
        {failing: EntryAccessError(failing, EntryAccessError.ACCESS_DENIED, "Permission denied")}
    )
    output = tmp_path / "out.body"
    log_path = tmp_path / "out.body.errors.log"

    with EntryErrorLog(log_path) as error_log:
        summary = write_body_file(evidence_tree, output, provider, error_log=error_log)

    lines = output.read_text(encoding="utf-8").splitlines()
    assert summary.written == len(lines) == 4
    assert summary.errors == 1
    assert failing not in [parse_line(line).path for line in lines]

    (logged,) = log_path.read_text(encoding="utf-8").splitlines()
    match = ERROR_LINE.match(logged)
    assert match, logged
    assert match.group("rest") == (
        f"{failing}: failed to stat file: access-denied: Permission denied"
    )


def test_error_log_not_created_without_errors(evidence_tree: Path, tmp_path: Path) -> None:
    log_path = tmp_path / "out.body.errors.log"

    with EntryErrorLog(log_path) as error_log:
        write_body_file(evidence_tree, tmp_path / "out.body", error_log=error_log)

    assert error_log.count == 0
    assert not log_path.exists()


def test_output_is_appended(evidence_tree: Path, tmp_path: Path) -> None:
    output = tmp_path / "out.body"
    output.write_text("# earlier run\n", encoding="utf-8")

    write_body_file(evidence_tree / "a.txt", output)

    lines = output.read_text(encoding="utf-8").splitlines()
    assert lines[0] == "# earlier run"
    assert parse_line(lines[1]).path == str(evidence_tree / "a.txt")


def test_unopenable_output_raises(evidence_tree: Path, tmp_path: Path) -> None:
    with pytest.raises(OutputOpenError):
        write_body_file(evidence_tree, tmp_path / "missing" / "out.body")


def test_output_inside_root_is_not_collected(evidence_tree: Path) -> None:
    output = evidence_tree / "b_dir" / "case.body"

    summary = write_body_file(evidence_tree, output)

    paths = [parse_line(line).path for line in output.read_text(encoding="utf-8").splitlines()]
    assert str(output) not in paths
    assert summary.written == 5
