# SPDX-License-Identifier: GPL-3.0-or-later

# Copyright (C) 2026 Darkmine Pty Ltd

# This file is part of holelog.

# holelog is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.

# holelog is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.

# You should have received a copy of the GNU General Public License
# along with holelog.  If not, see <https://www.gnu.org/licenses/>.

"""Alphanumeric sample identifier helpers."""

import re

_TRAILING_DIGITS = re.compile(r"^(.*?)(\d+)$")


def split_identifier(identifier):
    """Split an identifier into ``(prefix, digits)``.

    ``digits`` is ``None`` when the identifier has no trailing digit run.
    """
    match = _TRAILING_DIGITS.match(identifier or "")
    if match is None:
        return identifier or "", None
    return match.group(1), match.group(2)


def format_identifier(prefix, number, width):
    return f"{prefix}{str(number).zfill(width)}"


def increment_identifier(identifier):
    """Return the next identifier in sequence.

    The trailing digit run is incremented and re-padded to its original width,
    growing past it only when the number needs more digits. Identifiers without
    trailing digits get ``"1"`` appended.

    Examples
    --------
    >>> increment_identifier("S00099")
    'S00100'
    >>> increment_identifier("AB9")
    'AB10'
    >>> increment_identifier("")
    '1'
    """
    prefix, digits = split_identifier(identifier)
    if digits is None:
        return f"{prefix}1"
    return format_identifier(prefix, int(digits) + 1, len(digits))


def is_blank_identifier(identifier):
    return identifier is None or not str(identifier).strip()


def identifier_ending(number):
    """Last two digits of a sequence number, as used by QC triggers."""
    return f"{number % 100:02d}"
