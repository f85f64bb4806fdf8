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

"""QA/QC checks for a hole's sample list."""

import math

from holelog.datamodel import (
    CATEGORY,
    DUPLICATE,
    FROM,
    ID_STATUS,
    LINKED_PRIMARY_ID,
    NOT_SAMPLED,
    PRIMARY,
    QC_AUTO_STALE,
    SAMPLE_ID,
    TO,
    UNSEEDED,
)
from holelog.sampling.data import samples_frame
from holelog.sampling.qc import is_unassigned_material
from holelog.sampling.sequence import sort_samples


def validate_intervals(samples, depth=None):
    """Check that primary and not-sampled intervals tile the hole without overlaps.

    Returns a list of issue dicts with a ``type`` of ``non_positive_length``,
    ``overlap``, ``gap`` or ``beyond_depth``.
    """
    df = sort_samples(samples)
    issues = []
    prev_to = 0.0
    for row in df[df[CATEGORY].isin([PRIMARY, NOT_SAMPLED])].to_dict("records"):
        frm = row[FROM]
        to = row[TO]
        if to <= frm:
            issues.append({"type": "non_positive_length", "row": row})
        if frm < prev_to and not math.isclose(frm, prev_to):
            issues.append({"type": "overlap", "row": row})
        elif frm > prev_to and not math.isclose(frm, prev_to):
            issues.append({"type": "gap", "from": prev_to, "to": frm})
        if depth is not None and to > depth and not math.isclose(to, depth):
            issues.append({"type": "beyond_depth", "row": row})
        prev_to = max(prev_to, to)
    if depth is not None and len(df) and prev_to < depth and not math.isclose(prev_to, depth):
        issues.append({"type": "gap", "from": prev_to, "to": depth})
    return issues


def validate_qc(samples):
    """Flag duplicates without a primary, unassigned standard/blank materials and unseeded samples."""
    df = samples_frame(samples)
    issues = []
    for row in df.to_dict("records"):
        if row[CATEGORY] == DUPLICATE and row[LINKED_PRIMARY_ID] is None:
            issues.append({"type": "unlinked_duplicate", "sample_id": row[SAMPLE_ID], "row": row})
        if is_unassigned_material(row):
            issues.append({"type": "unassigned_material", "sample_id": row[SAMPLE_ID], "row": row})
        if row[ID_STATUS] == UNSEEDED:
            issues.append({"type": "unseeded", "row": row})
    return issues


def validate_hole(hole):
    issues = []
    if not hole.info_complete():
        issues.append({"type": "hole_info_incomplete"})
    if hole.qc_state == QC_AUTO_STALE:
        issues.append({"type": "stale_auto_qc"})
    issues.extend(validate_intervals(hole.samples, depth=hole.depth))
    issues.extend(validate_qc(hole.samples))
    return [{"hole_id": hole.hole_id, **issue} for issue in issues]


def validate_chain(chain):
    issues = []
    for hole in chain:
        issues.extend(validate_hole(hole))
    return issues
