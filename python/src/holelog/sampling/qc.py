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

"""Rule-based insertion of QC samples (standards, blanks, duplicates).

A rule fires when the last two digits of a sample identifier match one of its
triggers. Standards and blanks are inserted as zero-length markers ahead of
the primary sample whose identifier they would otherwise take; duplicates
follow the primary whose own identifier matches.
"""

import logging
from collections.abc import Mapping
from pathlib import Path

import yaml

from holelog.datamodel import (
    ASSAY_TYPE,
    BLANK,
    CATEGORY,
    DUPLICATE,
    FROM,
    ID_STATUS,
    LINKED_PRIMARY_ID,
    MATERIAL_CATEGORIES,
    MATERIAL_NAME,
    NOT_SAMPLED,
    NUMBERED,
    PRIMARY,
    SAMPLE_ID,
    SAMPLE_METHOD,
    SAMPLE_TYPE,
    SAMPLE_UUID,
    STANDARD,
    TO,
    UNASSIGNED_MATERIAL,
)
from holelog.errors import QCConfigError, SeedIdentifierError
from holelog.sampling.data import new_uuid, samples_frame
from holelog.sampling.identifiers import format_identifier, identifier_ending, split_identifier
from holelog.sampling.sequence import sort_samples

logger = logging.getLogger(__name__)

DISABLED = 0
# 1-in-N insertion rates
QC_RATES = (DISABLED, 10, 20, 25, 50)


def _normalize_trigger(trigger):
    text = str(trigger).strip()
    if not text.isdigit() or len(text) > 2:
        raise QCConfigError(f"QC trigger must be a two-digit ending, got {trigger!r}")
    return text.zfill(2)


def max_triggers(rate):
    if rate == DISABLED:
        return 0
    return 100 // rate


def suggest_triggers(rate, offset=0):
    """Evenly spaced endings for a 1-in-``rate`` rule, shifted by ``offset``."""
    if rate not in QC_RATES:
        raise QCConfigError(f"Unsupported QC rate: {rate}")
    if rate == DISABLED:
        return []
    return [f"{(start + offset) % 100:02d}" for start in range(0, 100, rate)]


class QCRule:
    def __init__(self, rate=DISABLED, triggers=None):
        if rate not in QC_RATES:
            raise QCConfigError(f"Unsupported QC rate: {rate}; expected one of {QC_RATES}")
        normalized = [_normalize_trigger(t) for t in (triggers or [])]
        if len(set(normalized)) != len(normalized):
            raise QCConfigError(f"Duplicate QC triggers: {normalized}")
        if rate != DISABLED and len(normalized) > max_triggers(rate):
            raise QCConfigError(
                f"A 1-in-{rate} rule allows at most {max_triggers(rate)} triggers, got {len(normalized)}"
            )
        self.rate = rate
        self.triggers = tuple(normalized)

    @property
    def active(self):
        return self.rate != DISABLED and bool(self.triggers)

    def matches(self, ending):
        return self.active and ending in self.triggers

    def to_dict(self):
        return {"rate": self.rate, "triggers": list(self.triggers)}

    def __repr__(self):
        return f"QCRule(rate={self.rate}, triggers={list(self.triggers)})"


def _rule(value):
    if value is None:
        return QCRule()
    if isinstance(value, QCRule):
        return value
    if isinstance(value, Mapping):
        return QCRule(rate=value.get("rate", DISABLED), triggers=value.get("triggers"))
    raise QCConfigError(f"Cannot build a QC rule from {value!r}")


class QCConfig:
    def __init__(self, standard=None, blank=None, duplicate=None, enabled=False):
        self.standard = _rule(standard)
        self.blank = _rule(blank)
        self.duplicate = _rule(duplicate)
        self.enabled = bool(enabled)
        overlap = set(self.standard.triggers) & set(self.blank.triggers)
        if self.standard.active and self.blank.active and overlap:
            logger.warning("Standard and blank triggers overlap on %s; standards take priority", sorted(overlap))

    def update(self, **kwargs):
        values = self.to_dict()
        values.update(kwargs)
        return QCConfig(**values)

    def to_dict(self):
        return {
            "standard": self.standard.to_dict(),
            "blank": self.blank.to_dict(),
            "duplicate": self.duplicate.to_dict(),
            "enabled": self.enabled,
        }


def load_qc_config(source):
    """Build a :class:`QCConfig` from a mapping or a YAML file.

    Example YAML::

        enabled: true
        standard: {rate: 20, triggers: ["05", "25", "45", "65", "85"]}
        blank: {rate: 50, triggers: ["10", "60"]}
        duplicate: {rate: 25, triggers: ["00", "25", "50", "75"]}
    """
    if isinstance(source, QCConfig):
        return source
    if isinstance(source, Mapping):
        values = dict(source)
    else:
        with Path(source).open("r", encoding="utf-8") as f:
            values = yaml.safe_load(f) or {}
        if not isinstance(values, Mapping):
            raise QCConfigError(f"QC configuration in {source} must be a mapping")
    unknown = set(values) - {"standard", "blank", "duplicate", "enabled"}
    if unknown:
        raise QCConfigError(f"Unknown QC configuration keys: {sorted(unknown)}")
    return QCConfig(**values)


def _marker(category, depth, sample_id):
    return {
        SAMPLE_UUID: new_uuid(),
        FROM: depth,
        TO: depth,
        CATEGORY: category,
        SAMPLE_ID: sample_id,
        ID_STATUS: NUMBERED,
        MATERIAL_NAME: UNASSIGNED_MATERIAL,
    }


def apply_qc_rules(samples, start_id, config):
    """Rebuild a hole's sample list with QC samples placed by ``config``.

    Only primary and not-sampled rows are kept from ``samples``; any existing
    QC is discarded. Identifiers are simulated from ``start_id``, which must
    end in a digit run.

    Raises
    ------
    SeedIdentifierError
        If ``start_id`` has no trailing digits.
    """
    prefix, digits = split_identifier((start_id or "").strip())
    if digits is None:
        raise SeedIdentifierError(
            f"Start identifier {start_id!r} must end in a number before QC rules can be applied"
        )
    width = len(digits)
    cursor = int(digits)
    config = load_qc_config(config)

    df = samples_frame(samples)
    clean = sort_samples(df[df[CATEGORY].isin([PRIMARY, NOT_SAMPLED])])

    rows = []
    inserted = {STANDARD: 0, BLANK: 0, DUPLICATE: 0}
    for row in clean.to_dict("records"):
        if row[CATEGORY] == NOT_SAMPLED:
            rows.append(row)
            continue

        ending = identifier_ending(cursor)
        marker = None
        if config.standard.matches(ending):
            marker = STANDARD
        elif config.blank.matches(ending):
            marker = BLANK
        if marker is not None:
            rows.append(_marker(marker, row[FROM], format_identifier(prefix, cursor, width)))
            inserted[marker] += 1
            cursor += 1

        primary_id = format_identifier(prefix, cursor, width)
        rows.append({**row, SAMPLE_ID: primary_id, ID_STATUS: NUMBERED, LINKED_PRIMARY_ID: None})
        if config.duplicate.matches(identifier_ending(cursor)):
            cursor += 1
            rows.append({
                SAMPLE_UUID: new_uuid(),
                FROM: row[FROM],
                TO: row[TO],
                CATEGORY: DUPLICATE,
                SAMPLE_ID: format_identifier(prefix, cursor, width),
                ID_STATUS: NUMBERED,
                LINKED_PRIMARY_ID: primary_id,
                SAMPLE_TYPE: row[SAMPLE_TYPE],
                SAMPLE_METHOD: row[SAMPLE_METHOD],
                ASSAY_TYPE: row[ASSAY_TYPE],
            })
            inserted[DUPLICATE] += 1
        cursor += 1

    logger.info(
        "QC rules inserted %d standards, %d blanks, %d duplicates",
        inserted[STANDARD], inserted[BLANK], inserted[DUPLICATE],
    )
    return samples_frame(rows)


def is_unassigned_material(row):
    if row.get(CATEGORY) not in MATERIAL_CATEGORIES:
        return False
    name = row.get(MATERIAL_NAME)
    return name is None or name == UNASSIGNED_MATERIAL
