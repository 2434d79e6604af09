#!/usr/bin/env python3
# Copyright (C) 2019 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.
"""Parsing and ordering of Mattermost release versions.

Only the numeric scheme <major>.<minor>.<patch> is understood. Pre-release
and build suffixes are not part of it."""

from __future__ import annotations

import enum
import re
from collections.abc import Iterable
from dataclasses import dataclass

from mattermost_check.utils.exceptions import NoRemoteVersionsFound, VersionHeaderNotFound

# One or more dot-separated groups of digits, e.g. "5.12.3" or
# "5.12.0.5.12.3" as found in the X-Version-Id header
_PAT_VERSION = re.compile(r"\d+(?:\.\d+)+")


class RefMode(enum.Enum):
    BRANCH = "branch"
    TAG = "tag"

    @classmethod
    def from_check_patch(cls, check_patch: bool) -> RefMode:
        return cls.TAG if check_patch else cls.BRANCH


# The ref name has to end with the version. This keeps out pre-releases like
# "v5.13.0-rc1" and branches like "release-5.13.1" in branch mode.
_PAT_REF: dict[RefMode, re.Pattern[str]] = {
    RefMode.BRANCH: re.compile(r"(?<![\d.])(\d+)\.(\d+)$"),
    RefMode.TAG: re.compile(r"(?<![\d.])(\d+)\.(\d+)\.(\d+)$"),
}


@dataclass(frozen=True)
class Version:
    major: int
    minor: int
    # None means "not known", which is not the same as 0
    patch: int | None = None

    @property
    def short(self) -> str:
        return "%d.%d" % (self.major, self.minor)

    @property
    def sort_key(self) -> tuple[int, int, int]:
        return (self.major, self.minor, -1 if self.patch is None else self.patch)

    def __str__(self) -> str:
        if self.patch is None:
            return self.short
        return "%d.%d.%d" % (self.major, self.minor, self.patch)


def determine_current_version(raw_header_text: str, *, check_patch: bool = False) -> Version:
    """Extract the running version from the text of the version header

    >>> determine_current_version("5.12.3")
    Version(major=5, minor=12, patch=3)
    >>> determine_current_version("X-Version-Id: 5.12.0.5.12.3.0d4f2b8c.false")
    Version(major=5, minor=12, patch=0)
    >>> determine_current_version("5.13")
    Version(major=5, minor=13, patch=None)
    >>> determine_current_version("no version here")
    Traceback (most recent call last):
        ...
    mattermost_check.utils.exceptions.VersionHeaderNotFound: No version found in 'no version here'
    """
    if (match := _PAT_VERSION.search(raw_header_text)) is None:
        raise VersionHeaderNotFound(f"No version found in {raw_header_text!r}")

    parts = [int(p) for p in match.group(0).split(".")[:3]]
    if len(parts) < 3:
        if check_patch:
            raise VersionHeaderNotFound(
                f"Version {match.group(0)!r} does not contain a patch level"
            )
        return Version(parts[0], parts[1])
    return Version(parts[0], parts[1], parts[2])


def parse_ref_version(ref_name: str, mode: RefMode) -> Version | None:
    """Extract the version a branch or tag name refers to

    >>> parse_ref_version("refs/heads/release-5.13", RefMode.BRANCH)
    Version(major=5, minor=13, patch=None)
    >>> parse_ref_version("refs/tags/v5.13.3^{}", RefMode.TAG)
    Version(major=5, minor=13, patch=3)
    >>> parse_ref_version("refs/tags/v5.13.0-rc1", RefMode.TAG) is None
    True
    >>> parse_ref_version("refs/heads/master", RefMode.BRANCH) is None
    True
    """
    name = ref_name.strip().removesuffix("^{}")
    if (match := _PAT_REF[mode].search(name)) is None:
        return None

    if mode is RefMode.TAG:
        return Version(int(match.group(1)), int(match.group(2)), int(match.group(3)))
    return Version(int(match.group(1)), int(match.group(2)))


def select_latest_version(candidate_names: Iterable[str], mode: RefMode) -> Version:
    """Find the highest version among the branch or tag names

    The versions are compared numerically:

    >>> select_latest_version(["release-5.9", "release-5.10", "master"], RefMode.BRANCH)
    Version(major=5, minor=10, patch=None)
    >>> select_latest_version(["v5.13.1", "v5.13.10", "v5.13.2"], RefMode.TAG)
    Version(major=5, minor=13, patch=10)
    """
    versions = [
        version
        for name in candidate_names
        if (version := parse_ref_version(name, mode)) is not None
    ]
    if not versions:
        raise NoRemoteVersionsFound(f"No {mode.value} names with a version found")

    return max(versions, key=lambda v: v.sort_key)
