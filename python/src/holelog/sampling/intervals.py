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

"""Primary sampling intervals: generation, gap reconciliation, split and merge.

All functions return *raw* sample tables. Identifiers are assigned afterwards by
:func:`holelog.sampling.sequence.renumber`.
"""

import logging
import math

from holelog.datamodel import (
    CATEGORY,
    CHIPS_METHOD,
    CHIPS_TYPE,
    COMPOSITE_METHOD,
    COMPOSITE_TYPE,
    DEFAULT_INTERVAL,
    FROM,
    ID_STATUS,
    NOT_SAMPLED,
    PRIMARY,
    QC_CATEGORIES,
    SAMPLE_ID,
    SAMPLE_METHOD,
    SAMPLE_TYPE,
    SAMPLE_UUID,
    SYNTHETIC,
    TO,
)
from holelog.errors import IntervalValidationError
from holelog.sampling.data import new_uuid, samples_frame

logger = logging.getLogger(__name__)

_DEPTH_DP = 3


def _round(depth):
    return round(float(depth), _DEPTH_DP)


def _is_close(a, b):
    return math.isclose(a, b, abs_tol=10 ** -_DEPTH_DP / 2)


def _windows(start, end, length):
    windows = []
    current = _round(start)
    end = _round(end)
    while current < end:
        to = min(_round(current + length), end)
        if to > current:
            windows.append((current, to))
        current = to
    return windows


def _primary(frm, to, sample_type=None, sample_method=None, **extra):
    row = {
        SAMPLE_UUID: new_uuid(),
        FROM: frm,
        TO: to,
        CATEGORY: PRIMARY,
        SAMPLE_TYPE: sample_type,
        SAMPLE_METHOD: sample_method,
    }
    row.update(extra)
    return row


def _has_stranded_metre(main_span, interval):
    if main_span <= interval:
        return False
    return _is_close(math.fmod(main_span, interval), 1.0)


def primary_windows(depth, interval=DEFAULT_INTERVAL):
    """Ordered ``(from, to, composite)`` windows covering ``[0, depth)``.

    With a 1 m interval the hole is cut into consecutive metres, the last one
    clipped to ``depth``. With a longer interval the final metre is reserved as
    a discrete chip window and the span above it is composited. When that span
    would leave a single stranded metre ahead of the terminal window, the last
    composite and the stranded metre are redistributed into an
    ``(interval - 1)`` m window followed by the remainder.
    """
    if depth is None or depth < 0:
        raise IntervalValidationError(f"Hole depth must be non-negative, got {depth}")
    if interval is None or interval <= 0:
        raise IntervalValidationError(f"Sample interval must be positive, got {interval}")
    depth = _round(depth)
    if depth == 0:
        return []

    if interval <= 1:
        return [(f, t, False) for f, t in _windows(0.0, depth, interval)]

    last_metre_start = _round(max(0.0, depth - 1))
    main = _windows(0.0, last_metre_start, interval)
    if _has_stranded_metre(last_metre_start, interval):
        tail_from = main[-2][0]
        split_at = _round(tail_from + interval - 1)
        logger.debug(
            "Redistributing stranded metre: [%s, %s) -> [%s, %s) + [%s, %s)",
            tail_from, last_metre_start, tail_from, split_at, split_at, last_metre_start,
        )
        main = main[:-2] + [(tail_from, split_at), (split_at, last_metre_start)]

    windows = [(f, t, True) for f, t in main]
    if last_metre_start < depth:
        windows.append((last_metre_start, depth, False))
    return windows


def generate_primary(depth, interval=DEFAULT_INTERVAL):
    """Generate the primary sample table for a hole of ``depth`` metres."""
    rows = []
    for frm, to, composite in primary_windows(depth, interval):
        if composite:
            rows.append(_primary(frm, to, COMPOSITE_TYPE, COMPOSITE_METHOD))
        else:
            rows.append(_primary(frm, to, CHIPS_TYPE, CHIPS_METHOD))
    logger.debug("Generated %d primary windows for depth=%s interval=%s", len(rows), depth, interval)
    return samples_frame(rows)


def validate_gap(gap_from, gap_to, depth):
    try:
        gap_from = float(gap_from)
        gap_to = float(gap_to)
    except (TypeError, ValueError):
        raise IntervalValidationError("Please enter valid numbers for From and To.") from None
    if math.isnan(gap_from) or math.isnan(gap_to):
        raise IntervalValidationError("Please enter valid numbers for From and To.")
    if gap_from < 0:
        raise IntervalValidationError("'From' depth cannot be negative.")
    if gap_to > depth:
        raise IntervalValidationError(f"'To' depth cannot exceed the total hole depth of {depth}m.")
    if gap_from >= gap_to:
        raise IntervalValidationError("'From' depth must be less than 'To' depth.")
    return gap_from, gap_to


def find_qc_conflict(samples, gap_from, gap_to):
    """First duplicate/standard/blank sample overlapping ``[gap_from, gap_to)``, or ``None``."""
    df = samples_frame(samples)
    for row in df.sort_values([FROM, TO], kind="mergesort").to_dict("records"):
        if row[CATEGORY] not in QC_CATEGORIES:
            continue
        if max(row[FROM], gap_from) < min(row[TO], gap_to):
            return row
    return None


def _depth_label(depth):
    return f"{depth:g}"


def not_sampled_id(hole_id, gap_from, gap_to):
    return f"NS_{hole_id or ''}_{_depth_label(gap_from)}_{_depth_label(gap_to)}"


def _cut_primaries(rows, gap_from, gap_to):
    out = []
    for row in rows:
        if row[CATEGORY] != PRIMARY:
            out.append(row)
            continue
        frm, to = row[FROM], row[TO]
        if to <= gap_from or frm >= gap_to:
            out.append(row)
        elif frm >= gap_from and to <= gap_to:
            continue
        elif frm < gap_from and to > gap_to:
            out.append({**row, TO: gap_from})
            out.append({**row, SAMPLE_UUID: new_uuid(), FROM: gap_to})
        elif frm < gap_from:
            out.append({**row, TO: gap_from})
        else:
            out.append({**row, FROM: gap_to})
    return out


def reconcile_gap(samples, gap_from, gap_to, hole_id="", depth=None):
    """Carve a not-sampled gap out of the primary samples.

    Primary samples inside the gap are removed, samples spanning it are split,
    and samples overlapping one edge are truncated. Other categories are left
    where they are. A ``Not Sampled`` row covering exactly the gap is appended
    with a synthetic identifier derived from ``hole_id`` and the bounds.

    Parameters
    ----------
    samples : pd.DataFrame
        Current sample table of the hole.
    gap_from, gap_to : float
        Gap bounds in metres.
    hole_id : str
        Hole identifier used in the synthetic sample id.
    depth : float, optional
        Hole depth. When given, bounds are checked against ``[0, depth]``.
    """
    if depth is not None:
        gap_from, gap_to = validate_gap(gap_from, gap_to, depth)
    elif not (0 <= gap_from < gap_to):
        raise IntervalValidationError("'From' depth must be less than 'To' depth.")
    gap_from = _round(gap_from)
    gap_to = _round(gap_to)

    df = samples_frame(samples)
    rows = _cut_primaries(df.to_dict("records"), gap_from, gap_to)
    rows.append({
        SAMPLE_UUID: new_uuid(),
        FROM: gap_from,
        TO: gap_to,
        CATEGORY: NOT_SAMPLED,
        SAMPLE_ID: not_sampled_id(hole_id, gap_from, gap_to),
        ID_STATUS: SYNTHETIC,
    })
    logger.debug("Reconciled not-sampled gap [%s, %s) against %d samples", gap_from, gap_to, len(df))
    return samples_frame(rows)


def apply_existing_gaps(samples):
    """Re-cut primary samples against every ``Not Sampled`` interval already in the table."""
    df = samples_frame(samples)
    rows = df.to_dict("records")
    gaps = df.loc[df[CATEGORY] == NOT_SAMPLED, [FROM, TO]].itertuples(index=False)
    for gap_from, gap_to in gaps:
        rows = _cut_primaries(rows, gap_from, gap_to)
    return samples_frame(rows)


def fill_gap(gap_from, gap_to, interval=DEFAULT_INTERVAL):
    """Primary windows refilling a former gap, used when a not-sampled interval is removed."""
    if interval > 1:
        sample_type, method = COMPOSITE_TYPE, COMPOSITE_METHOD
    else:
        sample_type, method = CHIPS_TYPE, CHIPS_METHOD
    rows = [_primary(frm, to, sample_type, method) for frm, to in _windows(gap_from, gap_to, interval)]
    return samples_frame(rows)


def split_primary(samples, sample_uuids):
    """Split selected primary samples longer than 1 m into 1 m chip samples."""
    df = samples_frame(samples)
    targets = set(sample_uuids)
    to_split = (
        df[SAMPLE_UUID].isin(targets)
        & (df[CATEGORY] == PRIMARY)
        & ((df[TO] - df[FROM]) > 1)
    )
    if not to_split.any():
        return df

    rows = df.loc[~to_split].to_dict("records")
    for row in df.loc[to_split].to_dict("records"):
        for frm, to in _windows(row[FROM], row[TO], 1):
            rows.append(_primary(frm, to, CHIPS_TYPE, CHIPS_METHOD))
    logger.debug("Split %d primary samples into 1 m windows", int(to_split.sum()))
    return samples_frame(rows)


def merge_primary(samples, sample_uuids, composite_interval=DEFAULT_INTERVAL):
    """Merge contiguous runs of selected 1 m primary samples into single samples.

    A merged run whose length equals ``composite_interval`` is tagged as a
    composite; other lengths keep no collection metadata.
    """
    df = samples_frame(samples)
    targets = set(sample_uuids)
    selected = df[
        df[SAMPLE_UUID].isin(targets)
        & (df[CATEGORY] == PRIMARY)
        & ((df[TO] - df[FROM]).map(lambda length: _is_close(length, 1.0)))
    ].sort_values([FROM, TO], kind="mergesort")
    if len(selected) < 2:
        return df

    groups = []
    current = []
    for row in selected.to_dict("records"):
        if current and _is_close(row[FROM], current[-1][TO]):
            current.append(row)
            continue
        if len(current) > 1:
            groups.append(current)
        current = [row]
    if len(current) > 1:
        groups.append(current)
    if not groups:
        return df

    merged_uuids = {row[SAMPLE_UUID] for group in groups for row in group}
    rows = df.loc[~df[SAMPLE_UUID].isin(merged_uuids)].to_dict("records")
    for group in groups:
        frm = group[0][FROM]
        to = group[-1][TO]
        if _is_close(to - frm, composite_interval):
            rows.append(_primary(frm, to, COMPOSITE_TYPE, COMPOSITE_METHOD))
        else:
            rows.append(_primary(frm, to))
    logger.debug("Merged %d runs of 1 m primary samples", len(groups))
    return samples_frame(rows)


def is_covered(windows, depth):
    """True when ``windows`` tile ``[0, depth)`` exactly with no gaps or overlaps."""
    ordered = sorted((f, t) for f, t, *_ in windows)
    if not ordered:
        return depth == 0
    if not _is_close(ordered[0][0], 0.0) or not _is_close(ordered[-1][1], depth):
        return False
    return all(_is_close(prev[1], cur[0]) for prev, cur in zip(ordered, ordered[1:]))
