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

"""Table construction and column normalization for sample lists and log tracks.

Raw sample lists arrive from the editing layer as records, DataFrames, or
nothing at all. Everything is funnelled through :func:`samples_frame` /
:func:`log_frame` so the engine can expect the holelog data model columns,
numeric depths and ``None`` for missing text.
"""

import uuid

import pandas as pd

from holelog.datamodel import (
    ASSAY_TYPE,
    CATEGORY,
    CODE,
    COMBINED_COLUMNS,
    COMMENT,
    FROM,
    LINKED_PRIMARY_ID,
    LOG_COLUMNS,
    MATERIAL_NAME,
    MATERIAL_UUID,
    SAMPLE_CATEGORIES,
    SAMPLE_COLUMNS,
    SAMPLE_ID,
    SAMPLE_METHOD,
    SAMPLE_TYPE,
    SAMPLE_UUID,
    TO,
)


# 'Best guess' mapping of common source column names onto the holelog data model.
# Keys are normalized to lowercase and stripped before lookup.
DEFAULT_COLUMN_MAP = {
    SAMPLE_UUID: ["sample_uuid", "uuid"],
    SAMPLE_ID: ["sample_id", "sampleid", "sample id", "id", "samp_id"],
    FROM: ["from", "depth_from", "from_depth", "samp_from", "sample_from", "sampfrom", "fromdepth", "from (m)"],
    TO: ["to", "depth_to", "to_depth", "samp_to", "sample_to", "sampto", "todepth", "to (m)"],
    CATEGORY: ["category", "type", "sample_category"],
    LINKED_PRIMARY_ID: ["linked_primary_id", "psampleid", "psample_id", "psample id", "parent_sample_id"],
    MATERIAL_NAME: ["material_name", "materialname", "std/blk id", "standard", "blank"],
    MATERIAL_UUID: ["material_uuid", "materialuuid"],
    SAMPLE_TYPE: ["sample_type", "sampletype", "sample type", "collection_type"],
    SAMPLE_METHOD: ["sample_method", "samplemethod", "sample method", "collection_method"],
    ASSAY_TYPE: ["assay_type", "assaytype", "assay type", "analyte_group", "analyte group"],
    COMMENT: ["comment", "comments", "remarks"],
    CODE: ["code", "log_code"],
}

_COLUMN_LOOKUP = {}
for standard_col, variations in DEFAULT_COLUMN_MAP.items():
    for variation in variations:
        _COLUMN_LOOKUP[variation.lower().strip()] = standard_col

_TEXT_COLUMNS = [col for col in SAMPLE_COLUMNS if col not in (FROM, TO)]


def _frame(df):
    if df is None:
        return pd.DataFrame()
    if isinstance(df, pd.DataFrame):
        return df.copy()
    return pd.DataFrame(list(df))


def new_uuid():
    return str(uuid.uuid4())


def standardize_columns(df, source_column_map=None):
    lookup = dict(_COLUMN_LOOKUP)
    if source_column_map:
        lookup.update({
            str(raw_name).lower().strip(): str(expected_name).lower().strip()
            for raw_name, expected_name in source_column_map.items()
            if raw_name is not None and expected_name is not None
        })
    renamed = {}
    for col in df.columns:
        key = str(col).lower().strip()
        renamed[col] = lookup.get(key, key)
    out = df.rename(columns=renamed)
    if not out.columns.is_unique:
        out = out.T.groupby(level=0, sort=False).first().T
    return out


def _none_for_missing(series):
    out = series.astype(object)
    blank = out.map(lambda v: isinstance(v, str) and v.strip() == "").astype(bool)
    mask = out.isna().astype(bool) | blank
    return out.where(~mask, None)


def samples_frame(samples=None, source_column_map=None):
    """Build a sample table with every data model column present.

    Rows without a ``sample_uuid`` receive a fresh one so identity survives
    renumbering. Unknown categories raise ``ValueError``.
    """
    df = standardize_columns(_frame(samples), source_column_map=source_column_map)
    for col in SAMPLE_COLUMNS:
        if col not in df.columns:
            df[col] = None
    extra = [col for col in df.columns if col not in SAMPLE_COLUMNS]
    df = df[SAMPLE_COLUMNS + extra].reset_index(drop=True)

    df[FROM] = pd.to_numeric(df[FROM], errors="coerce").astype(float)
    df[TO] = pd.to_numeric(df[TO], errors="coerce").astype(float)
    for col in _TEXT_COLUMNS:
        df[col] = _none_for_missing(df[col])

    if df.empty:
        return df

    invalid = df[FROM].isna() | df[TO].isna() | (df[TO] < df[FROM])
    if invalid.any():
        raise ValueError(
            f"Sample table has missing or invalid interval values: {df.loc[invalid, [FROM, TO]].head(5).to_dict('records')}"
        )
    unknown = ~df[CATEGORY].isin(SAMPLE_CATEGORIES)
    if unknown.any():
        raise ValueError(f"Unknown sample categories: {sorted(set(map(str, df.loc[unknown, CATEGORY])))}")

    missing_uuid = df[SAMPLE_UUID].isna()
    if missing_uuid.any():
        df.loc[missing_uuid, SAMPLE_UUID] = [new_uuid() for _ in range(int(missing_uuid.sum()))]
    return df


def log_frame(track=None):
    df = standardize_columns(_frame(track))
    for col in LOG_COLUMNS:
        if col not in df.columns:
            df[col] = None
    df = df[LOG_COLUMNS].reset_index(drop=True)
    df[FROM] = pd.to_numeric(df[FROM], errors="coerce").astype(float)
    df[TO] = pd.to_numeric(df[TO], errors="coerce").astype(float)
    df[CODE] = _none_for_missing(df[CODE])
    return df


def combined_frame(rows=None):
    df = _frame(rows)
    if df.empty:
        return pd.DataFrame(columns=COMBINED_COLUMNS)
    return df[COMBINED_COLUMNS].reset_index(drop=True)
