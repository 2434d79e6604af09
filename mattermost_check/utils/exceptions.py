#!/usr/bin/env python3
# Copyright (C) 2019 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.
"""User-defined exceptions of the version check.

Every error is terminal for the invocation. The active check catches them at
top level and ends with state UNKNOWN (exit code 3), in order to be compatible
with the monitoring plug-in API."""

__all__ = [
    "MissingArgument",
    "MissingDependency",
    "NoRemoteVersionsFound",
    "RemoteRefsError",
    "UnrecognizedArgument",
    "VersionCheckError",
    "VersionHeaderNotFound",
]


# never used directly in the code. Just some wrapper to make all of our
# exceptions handleable with one call
class VersionCheckError(Exception):
    pass


class MissingArgument(VersionCheckError):
    pass


class UnrecognizedArgument(VersionCheckError):
    def __init__(self, message: str, usage: str) -> None:
        super().__init__(message)
        self.usage = usage


class VersionHeaderNotFound(VersionCheckError):
    pass


class NoRemoteVersionsFound(VersionCheckError):
    pass


class MissingDependency(VersionCheckError):
    def __init__(self, program: str) -> None:
        super().__init__(f"{program} is required but could not be found in PATH")
        self.program = program


class RemoteRefsError(VersionCheckError):
    """Listing the refs of the remote repository failed."""
