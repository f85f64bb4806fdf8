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

"""Sample numbering within a hole and across the chain of holes.

Holes form an ordered chain: the first numbered sample of hole ``i + 1``
continues from the last numbered sample of hole ``i``. Numbering a hole is
:func:`renumber`; pushing a change down the chain is :func:`cascade`.
"""

import logging

from holelog.datamodel import (
    CATEGORY,
    DEFAULT_START_ID,
    DUPLICATE,
    FROM,
    ID_STATUS,
    LINKED_PRIMARY_ID,
    NOT_SAMPLED,
    NUMBERED,
    NUMBERED_CATEGORIES,
    PRIMARY,
    QC_AUTO_CLEAN,
    QC_AUTO_STALE,
    SAMPLE_ID,
    SYNTHETIC,
    TO,
    UNSEEDED,
)
from holelog.sampling.data import samples_frame
from holelog.sampling.identifiers import increment_identifier, is_blank_identifier

logger = logging.getLogger(__name__)


def sort_samples(samples):
    """Order samples by ``(from, to)``; a duplicate sorts after the primary it shares an interval with."""
    df = samples_frame(samples)
    if df.empty:
        return df
    rank = (df[CATEGORY] == DUPLICATE).astype(int)
    return (
        df.assign(_rank=rank)
        .sort_values([FROM, TO, "_rank"], kind="mergesort")
        .drop(columns="_rank")
        .reset_index(drop=True)
    )


def renumber(samples, start_id):
    """Assign sequential identifiers to a hole's samples.

    Samples are sorted by depth and every Primary, Duplicate, Standard and
    Blank sample takes the next identifier starting from ``start_id``.
    Not-sampled rows keep their synthetic identifier. Each duplicate is then
    linked to the primary sample covering the same ``(from, to)`` interval.

    A blank ``start_id`` does not raise: identifiers are left empty and the
    numbered samples are flagged ``unseeded`` so the caller can ask for a seed.
    """
    df = sort_samples(samples)
    if df.empty:
        return df

    seeded = not is_blank_identifier(start_id)
    if not seeded:
        logger.warning("No start identifier set; %d samples left unseeded", int(df[CATEGORY].isin(NUMBERED_CATEGORIES).sum()))
    cursor = str(start_id).strip() if seeded else None

    ids = []
    statuses = []
    for category, current_id in zip(df[CATEGORY], df[SAMPLE_ID]):
        if category == NOT_SAMPLED:
            ids.append(current_id)
            statuses.append(SYNTHETIC if current_id else None)
        elif seeded:
            ids.append(cursor)
            statuses.append(NUMBERED)
            cursor = increment_identifier(cursor)
        else:
            ids.append(None)
            statuses.append(UNSEEDED)
    df[SAMPLE_ID] = ids
    df[ID_STATUS] = statuses

    primaries = df[df[CATEGORY] == PRIMARY]
    primary_ids = dict(zip(zip(primaries[FROM], primaries[TO]), primaries[SAMPLE_ID]))
    df[LINKED_PRIMARY_ID] = [
        primary_ids.get((frm, to)) if category == DUPLICATE else None
        for frm, to, category in zip(df[FROM], df[TO], df[CATEGORY])
    ]
    return df


def last_identifier(samples):
    """Identifier of the deepest numbered sample, or ``None``."""
    df = samples_frame(samples)
    if df.empty:
        return None
    ordered = df.sort_values(FROM, kind="mergesort").iloc[::-1]
    for category, sample_id in zip(ordered[CATEGORY], ordered[SAMPLE_ID]):
        if category != NOT_SAMPLED and not is_blank_identifier(sample_id):
            return sample_id
    return None


def derive_start(previous_hole):
    """Start identifier for the hole following ``previous_hole``.

    Continues from the previous hole's last numbered sample; when it has none,
    its own start identifier is carried forward unchanged (possibly empty).
    """
    if previous_hole is None:
        return DEFAULT_START_ID
    last_id = last_identifier(previous_hole.samples)
    if last_id is not None:
        return increment_identifier(last_id)
    return previous_hole.start_id


def qc_state_after_renumber(qc_state, before, after):
    """An auto-applied QC layout goes stale once renumbering moves its identifiers."""
    if qc_state != QC_AUTO_CLEAN:
        return qc_state
    if list(sort_samples(before)[SAMPLE_ID]) != list(sort_samples(after)[SAMPLE_ID]):
        return QC_AUTO_STALE
    return qc_state


def renumber_hole(hole, start_id):
    """Return ``hole`` with ``start_id`` applied and its samples renumbered."""
    samples = renumber(hole.samples, start_id)
    return hole.evolve(
        start_id=start_id,
        samples=samples,
        qc_state=qc_state_after_renumber(hole.qc_state, hole.samples, samples),
    )


def cascade(holes, changed_index):
    """Propagate numbering from ``holes[changed_index]`` down the rest of the chain.

    Each later hole whose derived start differs from its current start is
    renumbered; holes whose start is unchanged are skipped but the walk
    continues to the end of the chain. Returns a new list.
    """
    holes = list(holes)
    first = max(changed_index + 1, 1)
    for index in range(first, len(holes)):
        next_start = derive_start(holes[index - 1])
        current = holes[index]
        if next_start == current.start_id:
            logger.debug("Hole %d start %s unchanged; skipping", index, next_start)
            continue
        logger.debug("Hole %d start %s -> %s", index, current.start_id, next_start)
        holes[index] = renumber_hole(current, next_start)
    return holes
