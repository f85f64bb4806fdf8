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

"""
Holelog Sample Data Model

Provides a consistent schema for sample and interval-log tables throughout the library.

Every engine function reads and writes DataFrames keyed by these column names.
"""

HOLE_ID = "hole_id"
FROM = "from"
TO = "to"
SAMPLE_UUID = "sample_uuid"
SAMPLE_ID = "sample_id"
CATEGORY = "category"
ID_STATUS = "id_status"
LINKED_PRIMARY_ID = "linked_primary_id"
MATERIAL_NAME = "material_name"
MATERIAL_UUID = "material_uuid"
SAMPLE_TYPE = "sample_type"
SAMPLE_METHOD = "sample_method"
ASSAY_TYPE = "assay_type"
COMMENT = "comment"
CODE = "code"
CONDITION_CODE = "condition_code"
RECOVERY_CODE = "recovery_code"

# Sample categories
PRIMARY = "Primary"
DUPLICATE = "Duplicate"
STANDARD = "Standard"
BLANK = "Blank"
NOT_SAMPLED = "Not Sampled"

SAMPLE_CATEGORIES = (PRIMARY, DUPLICATE, STANDARD, BLANK, NOT_SAMPLED)
# Categories that consume an identifier from the hole sequence
NUMBERED_CATEGORIES = (PRIMARY, DUPLICATE, STANDARD, BLANK)
QC_CATEGORIES = (DUPLICATE, STANDARD, BLANK)
MATERIAL_CATEGORIES = (STANDARD, BLANK)

# Identifier status
NUMBERED = "numbered"
UNSEEDED = "unseeded"
SYNTHETIC = "synthetic"

# QC layout state of a hole
QC_MANUAL = "manual"
QC_AUTO_CLEAN = "auto_clean"
QC_AUTO_STALE = "auto_stale"
QC_STATES = (QC_MANUAL, QC_AUTO_CLEAN, QC_AUTO_STALE)

# Collection metadata for generated windows
COMPOSITE_TYPE = "COMP"
COMPOSITE_METHOD = "SCOOP"
CHIPS_TYPE = "CHIPS"
CHIPS_METHOD = "CONE"

UNASSIGNED_MATERIAL = "unassigned"
DEFAULT_START_ID = "S00001"
DEFAULT_INTERVAL = 4

# Condition log codes
DRY = "D"
MOIST = "M"
WET = "W"
# Recovery log codes
GOOD = "G"
MEDIUM = "M"
POOR = "P"
# Shared by both tracks
NO_SAMPLE = "NS"
NOT_LOGGED = "N/A"

CONDITION = "condition"
RECOVERY = "recovery"
CONDITION_CODES = (DRY, MOIST, WET, NO_SAMPLE)
RECOVERY_CODES = (GOOD, MEDIUM, POOR, NO_SAMPLE)
LOG_TRACKS = {CONDITION: CONDITION_CODES, RECOVERY: RECOVERY_CODES}

SAMPLE_COLUMNS = [
    SAMPLE_UUID,
    FROM,
    TO,
    CATEGORY,
    SAMPLE_ID,
    ID_STATUS,
    LINKED_PRIMARY_ID,
    MATERIAL_NAME,
    MATERIAL_UUID,
    SAMPLE_TYPE,
    SAMPLE_METHOD,
    ASSAY_TYPE,
    COMMENT,
]
LOG_COLUMNS = [FROM, TO, CODE]
COMBINED_COLUMNS = [FROM, TO, CONDITION_CODE, RECOVERY_CODE]
