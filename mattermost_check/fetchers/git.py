#!/usr/bin/env python3
# Copyright (C) 2019 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.

# The refs of the remote repository are listed with "git ls-remote", which
# is expected to be in the search path. Example output:
#
# 0f8e3a3d5f7b9c4c4be1b1d4c1b1b64e0e2b63d1	refs/heads/release-5.12
# 6d3b4f3c2b6fbd3a7c1f2c8a5bb1e2d4f3a6c9e0	refs/heads/release-5.13
#
# and for tags, where annotated tags come twice:
#
# 1b4c8d0e2f6a9b3c5d7e9f1a3b5c7d9e1f3a5b7c	refs/tags/v5.13.3
# 9e7c5a3b1d9f7e5c3a1b9d7f5e3c1a9b7d5f3e1c	refs/tags/v5.13.3^{}

import os
import shutil
import subprocess
from collections.abc import Sequence

from mattermost_check.utils.exceptions import MissingDependency, RemoteRefsError
from mattermost_check.utils.log import logger
from mattermost_check.utils.version import RefMode

GIT = "git"
DEFAULT_REPOSITORY = "https://github.com/mattermost/mattermost-server.git"
RELEASE_BRANCH_PATTERN = "release-*"


def ensure_git_available() -> str:
    if (git := shutil.which(GIT)) is None:
        raise MissingDependency(GIT)
    return git


def _ls_remote_command(git: str, repository_url: str, mode: RefMode) -> list[str]:
    """
    >>> _ls_remote_command("git", "https://example.com/repo.git", RefMode.BRANCH)
    ['git', 'ls-remote', '--heads', 'https://example.com/repo.git', 'release-*']
    >>> _ls_remote_command("git", "https://example.com/repo.git", RefMode.TAG)
    ['git', 'ls-remote', '--tags', 'https://example.com/repo.git']
    """
    if mode is RefMode.BRANCH:
        return [git, "ls-remote", "--heads", repository_url, RELEASE_BRANCH_PATTERN]
    return [git, "ls-remote", "--tags", repository_url]


def parse_ls_remote_output(output: str) -> list[str]:
    """
    >>> parse_ls_remote_output("abc\\trefs/heads/release-5.13\\n\\ndef\\trefs/tags/v5.13.3^{}\\n")
    ['refs/heads/release-5.13', 'refs/tags/v5.13.3^{}']
    """
    return [line.split("\t", 1)[-1].strip() for line in output.splitlines() if line.strip()]


def list_remote_refs(
    repository_url: str,
    mode: RefMode,
    *,
    timeout: float | None = None,
) -> Sequence[str]:
    cmd = _ls_remote_command(ensure_git_available(), repository_url, mode)
    logger.info("Executing: %s", subprocess.list2cmdline(cmd))

    try:
        completed_process = subprocess.run(
            cmd,
            capture_output=True,
            encoding="utf8",
            check=False,
            timeout=timeout,
            # never ask for credentials, the check runs unattended
            env={**os.environ, "GIT_TERMINAL_PROMPT": "0"},
        )
    except subprocess.TimeoutExpired as e:
        raise RemoteRefsError(f"git ls-remote timed out after {e.timeout} seconds") from e

    if completed_process.returncode:
        raise RemoteRefsError(
            "git ls-remote failed: %s"
            % (completed_process.stderr.strip() or completed_process.returncode)
        )

    refs = parse_ls_remote_output(completed_process.stdout)
    logger.info("Found %d refs in %s", len(refs), repository_url)
    return refs
