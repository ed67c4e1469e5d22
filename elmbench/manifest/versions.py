# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Semantic version handling for elm.json dependency pins.

Elm pins every package to an exact MAJOR.MINOR.PATCH version. Comparing
those as strings is wrong ("1.10.0" < "1.9.0" lexicographically), so every
comparison goes through packaging.version.Version. We also refuse anything
that isn't plain MAJOR.MINOR.PATCH: packaging would happily accept "1.0" or
"1.0.0rc1", but elm would not, and a merge built on a version elm rejects
only fails later with a far less helpful message.
"""

import re

from packaging.version import InvalidVersion, Version

from elmbench.pipeline.exceptions import VersionError

_ELM_VERSION_PATTERN = re.compile(r"[0-9]+\.[0-9]+\.[0-9]+")


def parse_version(package: str, value: object) -> Version:
    """
    Parse an elm.json version pin.

    Raises:
        VersionError: If `value` isn't a MAJOR.MINOR.PATCH string. The error
            names the package so the user knows which pin to fix.
    """
    if not isinstance(value, str) or not _ELM_VERSION_PATTERN.fullmatch(value):
        raise VersionError(package, value)
    try:
        return Version(value)
    except InvalidVersion as err:
        raise VersionError(package, value) from err


def is_newer(package: str, candidate: str, current: str) -> bool:
    """True if `candidate` is a strictly higher version than `current`."""
    return parse_version(package, candidate) > parse_version(package, current)


def higher_version(package: str, first: str, second: str) -> str:
    """
    Return whichever of two pins is higher. Ties return `first`, so the
    result is stable no matter how many times the same pin is seen.
    """
    return second if is_newer(package, second, first) else first
