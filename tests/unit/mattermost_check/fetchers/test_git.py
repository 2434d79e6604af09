#!/usr/bin/env python3
# Copyright (C) 2019 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.

import subprocess
from collections.abc import Sequence

import pytest

from mattermost_check.fetchers import git
from mattermost_check.utils.exceptions import MissingDependency, RemoteRefsError
from mattermost_check.utils.version import RefMode

_LS_REMOTE_HEADS = """\
0f8e3a3d5f7b9c4c4be1b1d4c1b1b64e0e2b63d1\trefs/heads/release-5.12
6d3b4f3c2b6fbd3a7c1f2c8a5bb1e2d4f3a6c9e0\trefs/heads/release-5.13
"""


class _FakeRun:
    def __init__(self, returncode: int = 0, stdout: str = "", stderr: str = "") -> None:
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        self.cmd: Sequence[str] | None = None
        self.kwargs: dict[str, object] = {}

    def __call__(self, cmd: Sequence[str], **kwargs: object) -> subprocess.CompletedProcess:
        self.cmd = cmd
        self.kwargs = kwargs
        return subprocess.CompletedProcess(cmd, self.returncode, self.stdout, self.stderr)


@pytest.fixture(name="git_in_path")
def fixture_git_in_path(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(git.shutil, "which", lambda program: f"/usr/bin/{program}")


def test_ensure_git_available_missing(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(git.shutil, "which", lambda program: None)
    with pytest.raises(MissingDependency, match="git is required"):
        git.ensure_git_available()


@pytest.mark.usefixtures("git_in_path")
def test_ensure_git_available() -> None:
    assert git.ensure_git_available() == "/usr/bin/git"


@pytest.mark.usefixtures("git_in_path")
def test_list_remote_refs_branches(monkeypatch: pytest.MonkeyPatch) -> None:
    fake_run = _FakeRun(stdout=_LS_REMOTE_HEADS)
    monkeypatch.setattr(git.subprocess, "run", fake_run)

    assert git.list_remote_refs("https://example.com/repo.git", RefMode.BRANCH, timeout=5) == [
        "refs/heads/release-5.12",
        "refs/heads/release-5.13",
    ]
    assert fake_run.cmd == [
        "/usr/bin/git",
        "ls-remote",
        "--heads",
        "https://example.com/repo.git",
        "release-*",
    ]
    assert fake_run.kwargs["timeout"] == 5


@pytest.mark.usefixtures("git_in_path")
def test_list_remote_refs_tags(monkeypatch: pytest.MonkeyPatch) -> None:
    fake_run = _FakeRun(stdout="abc\trefs/tags/v5.13.3\ndef\trefs/tags/v5.13.3^{}\n")
    monkeypatch.setattr(git.subprocess, "run", fake_run)

    assert git.list_remote_refs("https://example.com/repo.git", RefMode.TAG) == [
        "refs/tags/v5.13.3",
        "refs/tags/v5.13.3^{}",
    ]
    assert fake_run.cmd is not None and "--tags" in fake_run.cmd


@pytest.mark.usefixtures("git_in_path")
def test_list_remote_refs_failure(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        git.subprocess,
        "run",
        _FakeRun(returncode=128, stderr="fatal: repository not found\n"),
    )
    with pytest.raises(RemoteRefsError, match="repository not found"):
        git.list_remote_refs("https://example.com/nope.git", RefMode.BRANCH)


@pytest.mark.usefixtures("git_in_path")
def test_list_remote_refs_timeout(monkeypatch: pytest.MonkeyPatch) -> None:
    def _raise_timeout(cmd: Sequence[str], **kwargs: object) -> subprocess.CompletedProcess:
        raise subprocess.TimeoutExpired(cmd, 3)

    monkeypatch.setattr(git.subprocess, "run", _raise_timeout)
    with pytest.raises(RemoteRefsError, match="timed out"):
        git.list_remote_refs("https://example.com/repo.git", RefMode.TAG, timeout=3)


def test_list_remote_refs_without_git(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(git.shutil, "which", lambda program: None)
    with pytest.raises(MissingDependency):
        git.list_remote_refs("https://example.com/repo.git", RefMode.BRANCH)
