#!/usr/bin/env python3
# Copyright (C) 2019 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.
"""check_mattermost_version - Check if a Mattermost instance runs the latest release"""

# The running version is read from the X-Version-Id header of the instance.
# The latest release is derived from the release branches (release-5.13) of
# the upstream repository, or from its tags (v5.13.3) if the patch level is
# to be checked as well. git is expected to be in the search path.

import argparse
import functools
import sys
from collections.abc import Sequence
from typing import NoReturn

from pydantic import BaseModel, ConfigDict, PositiveFloat

from mattermost_check import __version__
from mattermost_check.fetchers.git import DEFAULT_REPOSITORY, ensure_git_available, list_remote_refs
from mattermost_check.fetchers.http import DEFAULT_VERSION_HEADER, fetch_version_header
from mattermost_check.utils.exceptions import (
    MissingArgument,
    UnrecognizedArgument,
    VersionCheckError,
)
from mattermost_check.utils.log import logger, setup_console_logging
from mattermost_check.utils.statename import State
from mattermost_check.version_checker import (
    CheckResult,
    check_version,
    PRODUCT,
    RemoteRefsListerProto,
    VersionHeaderFetcherProto,
)

PROG = "check_mattermost_version"
AUTHOR = "check_mattermost_version developers"
LICENSE = "GNU General Public License v2"


class Args(BaseModel):
    model_config = ConfigDict(frozen=True)

    url: None | str
    check_patch: bool
    repository: str
    header: str
    timeout: PositiveFloat
    no_tls_verify: bool
    verbose: int
    debug: bool


def _positive_float(value: str) -> float:
    try:
        number = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid number: {value!r}")
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be greater than 0, got {value!r}")
    return number


class ArgParser(argparse.ArgumentParser):
    # Argument errors end up as UNKNOWN, not with the exit code 2 of argparse
    def error(self, message: str) -> NoReturn:
        if message.startswith("unrecognized arguments:"):
            message = "Unknown argument: %s" % message.split(":", 1)[1].strip()
        else:
            message = "Invalid arguments: %s" % message
        raise UnrecognizedArgument(message, self.format_usage())


def parse_arguments(argv: Sequence[str]) -> Args:
    parser = ArgParser(
        prog=PROG,
        # keeps the line breaks of the description and of the version output
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description="""Checks whether a Mattermost instance runs the latest release.
The running version is compared against the release branches of the upstream
repository, or against its tags if the patch level is checked as well.""",
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"{PROG} {__version__}\nAuthor: {AUTHOR}\nLicense: {LICENSE}",
    )
    parser.add_argument(
        "-u",
        "--url",
        type=str,
        metavar="URL",
        default=None,
        help="Base URL of the Mattermost instance, e.g. https://chat.example.com",
    )
    parser.add_argument(
        "-p",
        "--patch",
        dest="check_patch",
        action="store_true",
        help="Check the patch level as well. The latest version is then taken from the tags "
        "instead of the release branches.",
    )
    parser.add_argument(
        "-r",
        "--repository",
        type=str,
        metavar="REPOSITORY",
        default=DEFAULT_REPOSITORY,
        help=f"Repository to take the releases from (Default: {DEFAULT_REPOSITORY})",
    )
    parser.add_argument(
        "--header",
        type=str,
        metavar="HEADER",
        default=DEFAULT_VERSION_HEADER,
        help=f"Response header carrying the version (Default: {DEFAULT_VERSION_HEADER})",
    )
    parser.add_argument(
        "-t",
        "--timeout",
        type=_positive_float,
        metavar="TIMEOUT",
        default=10.0,
        help="Seconds before the request and git time out (Default: 10)",
    )
    parser.add_argument(
        "--no-tls-verify",
        action="store_true",
        help="Don't verify the TLS certificate of the Mattermost instance",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Verbose mode, log to stderr (specify multiple times for more output)",
    )
    parser.add_argument("--debug", action="store_true", help="Raise python exceptions.")

    return Args.model_validate(vars(parser.parse_args(argv)))


def output_check_result(s: str) -> None:
    sys.stdout.write("%s\n" % s)


def _check_mattermost_version_main(
    args: Args,
    fetch_header: VersionHeaderFetcherProto | None,
    list_refs: RemoteRefsListerProto | None,
) -> CheckResult:
    if list_refs is None:
        ensure_git_available()
        list_refs = functools.partial(list_remote_refs, timeout=args.timeout)

    if not args.url:
        raise MissingArgument(f"URL to {PRODUCT} missing")

    if fetch_header is None:
        fetch_header = functools.partial(
            fetch_version_header,
            header=args.header,
            timeout=args.timeout,
            verify=not args.no_tls_verify,
        )

    return check_version(
        url=args.url,
        repository_url=args.repository,
        check_patch=args.check_patch,
        fetch_header=fetch_header,
        list_refs=list_refs,
    )


def main(
    argv: Sequence[str] | None = None,
    fetch_header: VersionHeaderFetcherProto | None = None,
    list_refs: RemoteRefsListerProto | None = None,
) -> int:
    try:
        args = parse_arguments(sys.argv[1:] if argv is None else argv)
    except UnrecognizedArgument as e:
        output_check_result(f"{e}\n{e.usage.rstrip()}")
        return State.UNKNOWN

    setup_console_logging(args.verbose)
    for key, value in args.model_dump().items():
        logger.debug("argparse: %s = %r", key, value)

    try:
        result = _check_mattermost_version_main(args, fetch_header, list_refs)
    except VersionCheckError as e:
        if args.debug:
            raise
        result = CheckResult(State.UNKNOWN, str(e))
    except Exception as e:
        if args.debug:
            raise
        result = CheckResult(State.UNKNOWN, f"Unhandled exception: {e}")

    output_check_result(result.render())
    return result.state


if __name__ == "__main__":
    sys.exit(main())
