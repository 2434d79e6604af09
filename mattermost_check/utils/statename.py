#!/usr/bin/env python3
# Copyright (C) 2019 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.

import enum


class State(enum.IntEnum):
    """Service states. The value is the exit code of the active check."""

    OK = 0
    WARN = 1
    CRIT = 2
    UNKNOWN = 3


def service_state_names() -> dict[State, str]:
    return {
        State.OK: "OK",
        State.WARN: "WARNING",
        State.CRIT: "CRITICAL",
        State.UNKNOWN: "UNKNOWN",
    }


def service_state_name(state: State, deflt: str = "") -> str:
    return service_state_names().get(state, deflt)
