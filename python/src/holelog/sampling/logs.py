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

"""Per-metre condition and recovery logs.

Each track is a table of non-overlapping ``from``/``to``/``code`` intervals.
Edits are made on a dense metre-by-metre view and collapsed back into the
fewest contiguous runs.
"""

import logging
import math

import numpy as np

from holelog.datamodel import (
    CODE,
    CONDITION,
    CONDITION_CODE,
    FROM,
    LOG_TRACKS,
    NO_SAMPLE,
    NOT_LOGGED,
    RECOVERY_CODE,
    TO,
)
from holelog.errors import HoleLogError, IntervalValidationError
from holelog.sampling.data import combined_frame, log_frame

logger = logging.getLogger(__name__)


def _metre_range(frm, to):
    return range(int(math.floor(frm)), int(math.ceil(to)))


def expand_track(track):
    """Dense ``{metre: code}`` view of a log track."""
    codes = {}
    for frm, to, code in log_frame(track).itertuples(index=False):
        if code is None:
            continue
        for metre in _metre_range(frm, to):
            codes[metre] = code
    return codes


def collapse_track(codes, depth):
    """Collapse a dense metre map into contiguous runs clipped to ``depth``."""
    rows = []
    current = None
    for metre in range(int(math.ceil(depth))):
        code = codes.get(metre)
        if code is None:
            if current is not None:
                rows.append(current)
            current = None
            continue
        end = float(min(metre + 1, depth))
        if current is not None and current[CODE] == code:
            current[TO] = end
        else:
            if current is not None:
                rows.append(current)
            current = {FROM: float(metre), TO: end, CODE: code}
    if current is not None:
        rows.append(current)
    return log_frame(rows)


def update_interval_log(track, from_depth, to_depth, code, depth):
    """Overwrite ``[from_depth, to_depth)`` of a track with ``code``."""
    if from_depth < 0 or to_depth <= from_depth:
        raise IntervalValidationError(f"Invalid log interval [{from_depth}, {to_depth})")
    if depth is None or depth <= 0:
        raise IntervalValidationError("Hole depth must be set before logging intervals")
    codes = expand_track(track)
    for metre in _metre_range(from_depth, min(to_depth, depth)):
        codes[metre] = code
    return collapse_track(codes, depth)


def apply_log_code(condition, recovery, track, from_depth, to_depth, code, depth):
    """Set ``code`` on one track and return the updated ``(condition, recovery)`` pair.

    No-Sample is shared by both tracks: setting it on either one forces the
    same range to No-Sample on the other.
    """
    if track not in LOG_TRACKS:
        raise HoleLogError(f"Unknown log track {track!r}; expected one of {sorted(LOG_TRACKS)}")
    if code not in LOG_TRACKS[track]:
        raise HoleLogError(f"Code {code!r} is not valid for the {track} log")

    condition = log_frame(condition)
    recovery = log_frame(recovery)
    if track == CONDITION:
        condition = update_interval_log(condition, from_depth, to_depth, code, depth)
        if code == NO_SAMPLE:
            recovery = update_interval_log(recovery, from_depth, to_depth, NO_SAMPLE, depth)
    else:
        recovery = update_interval_log(recovery, from_depth, to_depth, code, depth)
        if code == NO_SAMPLE:
            condition = update_interval_log(condition, from_depth, to_depth, NO_SAMPLE, depth)
    logger.debug("Logged %s=%s over [%s, %s)", track, code, from_depth, to_depth)
    return condition, recovery


def _code_at(track, depth):
    hit = track[(track[FROM] <= depth) & (depth < track[TO])]
    if hit.empty:
        return NOT_LOGGED
    return hit[CODE].iloc[0]


def combine(condition, recovery, depth):
    """Merge condition and recovery tracks into maximal intervals sharing both codes.

    Every boundary from either track plus ``0`` and ``depth`` splits the hole;
    each piece takes the codes found at its midpoint (``"N/A"`` when a track
    does not cover it) and neighbouring pieces with identical code pairs are
    merged.
    """
    if depth is None or depth <= 0:
        return combined_frame()
    condition = log_frame(condition)
    recovery = log_frame(recovery)

    points = np.unique(np.concatenate([
        [0.0, float(depth)],
        condition[FROM].to_numpy(dtype=float),
        condition[TO].to_numpy(dtype=float),
        recovery[FROM].to_numpy(dtype=float),
        recovery[TO].to_numpy(dtype=float),
    ]))
    points = points[(points >= 0) & (points <= depth)]

    merged = []
    for frm, to in zip(points[:-1], points[1:]):
        mid = frm + (to - frm) / 2
        row = {
            FROM: float(frm),
            TO: float(to),
            CONDITION_CODE: _code_at(condition, mid),
            RECOVERY_CODE: _code_at(recovery, mid),
        }
        last = merged[-1] if merged else None
        if last is not None and (last[CONDITION_CODE], last[RECOVERY_CODE]) == (row[CONDITION_CODE], row[RECOVERY_CODE]):
            last[TO] = row[TO]
        else:
            merged.append(row)
    return combined_frame(merged)

