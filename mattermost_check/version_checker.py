#!/usr/bin/env python3
# Copyright (C) 2019 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.
"""Compare the running Mattermost version against the latest upstream release"""

from __future__ import annotations

import enum
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

from mattermost_check.utils.exceptions import NoRemoteVersionsFound, VersionHeaderNotFound
from mattermost_check.utils.log import logger, VERBOSE
from mattermost_check.utils.statename import service_state_name, State
from mattermost_check.utils.version import (
    determine_current_version,
    RefMode,
    select_latest_version,
    Version,
)

PRODUCT = "Mattermost"


class VersionHeaderFetcherProto(Protocol):
    def __call__(self, url: str) -> str: ...


class RemoteRefsListerProto(Protocol):
    def __call__(self, repository_url: str, mode: RefMode) -> Sequence[str]: ...


class Drift(enum.Enum):
    UP_TO_DATE = "up to date"
    TOO_OLD = "too old"
    TOO_NEW = "too new"


@dataclass(frozen=True)
class CheckResult:
    state: State
    summary: str

    def render(self) -> str:
        """
        >>> CheckResult(State.OK, "all fine").render()
        '[OK] all fine'
        >>> CheckResult(State.UNKNOWN, "no idea").render()
        'no idea'
        """
        if self.state is State.UNKNOWN:
            return self.summary
        return f"[{service_state_name(self.state)}] {self.summary}"


def compare_versions(current: Version, latest: Version, check_patch: bool) -> tuple[State, Drift]:
    """Major first, then minor, then (optionally) patch

    Being behind on major or minor is critical, being ahead only a warning, as
    the release branch of the running version may have been deleted upstream.
    Any patch level difference is a warning.

    >>> compare_versions(Version(5, 12, 3), Version(5, 13), False)
    (<State.CRIT: 2>, <Drift.TOO_OLD: 'too old'>)
    >>> compare_versions(Version(6, 0, 0), Version(5, 13), False)
    (<State.WARN: 1>, <Drift.TOO_NEW: 'too new'>)
    >>> compare_versions(Version(5, 13, 9), Version(5, 13, 3), False)
    (<State.OK: 0>, <Drift.UP_TO_DATE: 'up to date'>)
    """
    for latest_part, current_part in (
        (latest.major, current.major),
        (latest.minor, current.minor),
    ):
        if latest_part > current_part:
            return State.CRIT, Drift.TOO_OLD
        if latest_part < current_part:
            return State.WARN, Drift.TOO_NEW

    if not check_patch:
        return State.OK, Drift.UP_TO_DATE

    if latest.patch is None or current.patch is None:
        raise ValueError("Patch level precision requires the patch level of both versions")

    if latest.patch > current.patch:
        return State.WARN, Drift.TOO_OLD
    if latest.patch < current.patch:
        return State.WARN, Drift.TOO_NEW
    return State.OK, Drift.UP_TO_DATE


def classify(current: Version, latest: Version, check_patch: bool) -> CheckResult:
    state, drift = compare_versions(current, latest, check_patch)
    if drift is Drift.UP_TO_DATE:
        return CheckResult(state, f"{PRODUCT} version {current} is {drift.value}")

    # without patch precision the latest version is a release branch
    latest_str = str(latest) if check_patch else latest.short
    return CheckResult(
        state, f"{PRODUCT} version {current} is {drift.value}. Latest: {latest_str}"
    )


def check_version(
    *,
    url: str,
    repository_url: str,
    check_patch: bool,
    fetch_header: VersionHeaderFetcherProto,
    list_refs: RemoteRefsListerProto,
) -> CheckResult:
    try:
        current = determine_current_version(fetch_header(url), check_patch=check_patch)
    except VersionHeaderNotFound as e:
        logger.info("%s", e)
        return CheckResult(State.UNKNOWN, f"{PRODUCT} version could not be determined from {url}")
    logger.log(VERBOSE, "Current version: %s", current)

    mode = RefMode.from_check_patch(check_patch)
    try:
        latest = select_latest_version(list_refs(repository_url, mode), mode)
    except NoRemoteVersionsFound as e:
        logger.info("%s", e)
        return CheckResult(
            State.UNKNOWN,
            f"No {PRODUCT} release versions found in {repository_url}"
            f" (current version: {current})",
        )
    logger.log(VERBOSE, "Latest version (%s mode): %s", mode.value, latest)

    return classify(current, latest, check_patch)
