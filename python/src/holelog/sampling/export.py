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

"""Flat comma-delimited export of samples and combined condition/recovery intervals."""

import logging

import pandas as pd

from holelog.datamodel import (
    ASSAY_TYPE,
    CATEGORY,
    COMMENT,
    CONDITION_CODE,
    FROM,
    LINKED_PRIMARY_ID,
    MATERIAL_NAME,
    RECOVERY_CODE,
    SAMPLE_ID,
    SAMPLE_METHOD,
    SAMPLE_TYPE,
    TO,
)

logger = logging.getLogger(__name__)

SAMPLE_HEADERS = [
    "Project Code",
    "Hole ID",
    "Sampled By",
    "Sampled Date",
    "Sample ID",
    "From (m)",
    "To (m)",
    "Length (m)",
    "Category",
    "Assay Type",
    "PSample ID",
    "Sample Type",
    "Sample Method",
    "Std/Blk ID",
    "Comment",
]

INTERVAL_HEADERS = ["Project", "Hole ID", "From", "To", "Condition", "Recovery", "Sampled By", "Date"]


def _depth(value):
    return f"{value:.2f}"


def _text(value):
    return "" if value is None else str(value)


def _selected_holes(chain, hole_uuids=None):
    if hole_uuids is None:
        return list(chain)
    wanted = set(hole_uuids)
    return [hole for hole in chain if hole.uuid in wanted]


def samples_table(chain, hole_uuids=None):
    """One export row per sample of the selected holes, in stored order."""
    reference = chain.reference
    rows = []
    for hole in _selected_holes(chain, hole_uuids):
        project = reference.project_code(hole.project_uuid)
        sampler = reference.sampler_name(hole.sampler_uuid)
        for sample in hole.samples.to_dict("records"):
            rows.append([
                project,
                hole.hole_id,
                sampler,
                hole.sampled_date,
                _text(sample[SAMPLE_ID]),
                _depth(sample[FROM]),
                _depth(sample[TO]),
                _depth(sample[TO] - sample[FROM]),
                sample[CATEGORY],
                _text(sample[ASSAY_TYPE]),
                _text(sample[LINKED_PRIMARY_ID]),
                _text(sample[SAMPLE_TYPE]),
                _text(sample[SAMPLE_METHOD]),
                _text(sample[MATERIAL_NAME]),
                _text(sample[COMMENT]),
            ])
    return pd.DataFrame(rows, columns=SAMPLE_HEADERS)


def intervals_table(chain, hole_uuids=None):
    """One export row per combined condition/recovery interval of the selected holes."""
    reference = chain.reference
    rows = []
    for hole in _selected_holes(chain, hole_uuids):
        project = reference.project_code(hole.project_uuid)
        sampler = reference.sampler_name(hole.sampler_uuid)
        for interval in hole.combined_intervals().to_dict("records"):
            rows.append([
                project,
                hole.hole_id,
                _depth(interval[FROM]),
                _depth(interval[TO]),
                interval[CONDITION_CODE],
                interval[RECOVERY_CODE],
                sampler,
                hole.sampled_date,
            ])
    return pd.DataFrame(rows, columns=INTERVAL_HEADERS)


def _write(table, path_or_buf, label):
    if table.empty:
        logger.warning("Selected drillholes have no %s to export", label)
    else:
        logger.info("Exporting %d %s rows", len(table), label)
    return table.to_csv(path_or_buf, index=False, lineterminator="\n")


def write_samples_csv(chain, path_or_buf=None, hole_uuids=None):
    """Write the sample export. Returns the CSV text when ``path_or_buf`` is ``None``."""
    return _write(samples_table(chain, hole_uuids), path_or_buf, "sample")


def write_intervals_csv(chain, path_or_buf=None, hole_uuids=None):
    """Write the condition/recovery export. Returns the CSV text when ``path_or_buf`` is ``None``."""
    return _write(intervals_table(chain, hole_uuids), path_or_buf, "condition/recovery")
