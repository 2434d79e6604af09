#!/usr/bin/env python3
# Copyright (C) 2019 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.

import requests
import urllib3

from mattermost_check import __version__
from mattermost_check.utils.log import logger

USER_AGENT = f"check_mattermost_version/{__version__}"
DEFAULT_VERSION_HEADER = "X-Version-Id"


def _get(session: requests.Session, url: str, timeout: float, verify: bool) -> requests.Response:
    return session.get(
        url,
        headers={"User-Agent": USER_AGENT},
        timeout=timeout,
        verify=verify,
    )


def fetch_version_header(
    url: str,
    *,
    header: str = DEFAULT_VERSION_HEADER,
    timeout: float = 10.0,
    verify: bool = True,
    session: requests.Session | None = None,
) -> str:
    """Request the instance and return the value of the version header

    An empty string is returned if the request fails or the header is missing:
    the caller can not tell the version in either case."""
    if not verify:
        urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

    logger.info("Requesting %s", url)
    try:
        if session is None:
            with requests.Session() as session:
                response = _get(session, url, timeout, verify)
        else:
            response = _get(session, url, timeout, verify)
    except requests.exceptions.RequestException as e:
        logger.warning("Request to %s failed: %s", url, e)
        return ""

    logger.debug("Response headers: %r", dict(response.headers))
    if (value := response.headers.get(header)) is None:
        logger.warning(
            "Response of %s has no %s header (HTTP %d)", url, header, response.status_code
        )
        return ""
    return value
