#!/usr/bin/env python3
# Copyright (C) 2019 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.

from setuptools import find_packages, setup

setup(
    name="check-mattermost-version",
    version="1.1.0",
    description="Active check comparing a Mattermost instance against the latest upstream release",
    license="GPL-2.0-only",
    packages=find_packages(include=["mattermost_check", "mattermost_check.*"]),
    include_package_data=True,
    python_requires=">=3.10",
    install_requires=["requests>=2.28", "urllib3>=1.26", "pydantic>=2.0"],
    extras_require={"test": ["pytest>=7.0"]},
    entry_points={
        "console_scripts": [
            "check_mattermost_version="
            "mattermost_check.active_checks.check_mattermost_version:main",
        ],
    },
)
