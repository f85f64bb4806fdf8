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

"""Container objects for a chain of sampled drillholes.

A :class:`HoleChain` is an immutable snapshot: every editing action returns a
new chain with the affected hole renumbered and the change cascaded down the
holes that follow it. DataFrames are copied on the way in so no two snapshots
share a table.
"""

import datetime
import logging

import pandas as pd

from holelog.datamodel import (
    BLANK,
    CATEGORY,
    DEFAULT_INTERVAL,
    DEFAULT_START_ID,
    DUPLICATE,
    FROM,
    MATERIAL_CATEGORIES,
    MATERIAL_NAME,
    MATERIAL_UUID,
    NOT_SAMPLED,
    PRIMARY,
    QC_AUTO_CLEAN,
    QC_AUTO_STALE,
    QC_CATEGORIES,
    QC_MANUAL,
    QC_STATES,
    SAMPLE_METHOD,
    SAMPLE_TYPE,
    SAMPLE_UUID,
    STANDARD,
    TO,
)
from holelog.errors import (
    HoleInfoIncompleteError,
    HoleLogError,
    HoleNotFoundError,
    IntervalValidationError,
    QCConfigError,
)
from holelog.sampling import data, intervals, logs
from holelog.sampling.identifiers import increment_identifier, is_blank_identifier
from holelog.sampling.qc import QCConfig, apply_qc_rules, load_qc_config
from holelog.sampling.sequence import cascade, derive_start, renumber, renumber_hole

logger = logging.getLogger(__name__)

HOLE_INFO_FIELDS = ("hole_id", "depth", "start_id", "project_uuid", "sampler_uuid", "sampled_date")


def _structural_edit(qc_state):
    if qc_state == QC_AUTO_CLEAN:
        return QC_AUTO_STALE
    return qc_state


class ReferenceData:
    """Lookup lists maintained by the admin screens, keyed by opaque uuid."""

    def __init__(self, projects=None, samplers=None, standards=None, blanks=None):
        self.projects = dict(projects or {})
        self.samplers = dict(samplers or {})
        self.standards = dict(standards or {})
        self.blanks = dict(blanks or {})

    def update(self, **kwargs):
        values = self.to_dict()
        values.update(kwargs)
        return ReferenceData(**values)

    def project_code(self, project_uuid):
        return self.projects.get(project_uuid, "")

    def sampler_name(self, sampler_uuid):
        return self.samplers.get(sampler_uuid, "")

    def material_uuid(self, category, name):
        materials = self.standards if category == STANDARD else self.blanks
        for material_uuid, material_name in materials.items():
            if material_name == name:
                return material_uuid
        return None

    def to_dict(self):
        return {
            "projects": dict(self.projects),
            "samplers": dict(self.samplers),
            "standards": dict(self.standards),
            "blanks": dict(self.blanks),
        }


class DrillHole:
    def __init__(self,
        hole_id="",
        depth=0.0,
        start_id="",
        samples=None,
        condition=None,
        recovery=None,
        project_uuid=None,
        sampler_uuid=None,
        sampled_date=None,
        qc_state=QC_MANUAL,
        uuid=None):
        if depth is None or float(depth) < 0:
            raise HoleLogError(f"Hole depth must be non-negative, got {depth}")
        if qc_state not in QC_STATES:
            raise HoleLogError(f"Unknown QC state {qc_state!r}")
        self.uuid = uuid or data.new_uuid()
        self.hole_id = hole_id or ""
        self.depth = float(depth)
        self.start_id = start_id or ""
        self.samples = data.samples_frame(samples)
        self.condition = data.log_frame(condition)
        self.recovery = data.log_frame(recovery)
        self.project_uuid = project_uuid
        self.sampler_uuid = sampler_uuid
        self.sampled_date = sampled_date or datetime.date.today().isoformat()
        self.qc_state = qc_state

    @property
    def qc_auto_applied(self):
        return self.qc_state == QC_AUTO_CLEAN

    def evolve(self, **changes):
        values = self.to_dict()
        values.update(changes)
        return DrillHole(**values)

    def copy(self):
        return self.evolve()

    def sample(self, sample_uuid):
        match = self.samples[self.samples[SAMPLE_UUID] == sample_uuid]
        if match.empty:
            raise HoleLogError(f"Sample {sample_uuid} not found in hole {self.hole_id or self.uuid}")
        return match.iloc[0].to_dict()

    def info_complete(self):
        return bool(
            self.project_uuid
            and self.hole_id.strip()
            and self.sampler_uuid
            and self.sampled_date
            and self.depth > 0
            and not is_blank_identifier(self.start_id)
        )

    def combined_intervals(self):
        return logs.combine(self.condition, self.recovery, self.depth)

    def to_dict(self):
        return {
            "uuid": self.uuid,
            "hole_id": self.hole_id,
            "depth": self.depth,
            "start_id": self.start_id,
            "samples": self.samples,
            "condition": self.condition,
            "recovery": self.recovery,
            "project_uuid": self.project_uuid,
            "sampler_uuid": self.sampler_uuid,
            "sampled_date": self.sampled_date,
            "qc_state": self.qc_state,
        }

    def __repr__(self):
        return f"DrillHole(hole_id={self.hole_id!r}, depth={self.depth}, start_id={self.start_id!r}, samples={len(self.samples)})"


class HoleChain:
    def __init__(self, holes=None, reference=None, qc_config=None, interval=DEFAULT_INTERVAL):
        self.holes = tuple(holes or ())
        self.reference = reference or ReferenceData()
        self.qc_config = load_qc_config(qc_config) if qc_config is not None else QCConfig()
        self.interval = interval

    @classmethod
    def new(cls, reference=None, qc_config=None, interval=DEFAULT_INTERVAL):
        return cls([DrillHole(start_id=DEFAULT_START_ID)], reference=reference, qc_config=qc_config, interval=interval)

    def __len__(self):
        return len(self.holes)

    def __iter__(self):
        return iter(self.holes)

    def _with_holes(self, holes):
        return HoleChain(holes, reference=self.reference, qc_config=self.qc_config, interval=self.interval)

    def update(self, **kwargs):
        values = {
            "holes": self.holes,
            "reference": self.reference,
            "qc_config": self.qc_config,
            "interval": self.interval,
        }
        values.update(kwargs)
        return HoleChain(**values)

    def index_of(self, hole_uuid):
        for index, hole in enumerate(self.holes):
            if hole.uuid == hole_uuid:
                return index
        raise HoleNotFoundError(f"Hole {hole_uuid} not found")

    def hole(self, hole_uuid):
        return self.holes[self.index_of(hole_uuid)]

    def _replace(self, index, hole):
        holes = list(self.holes)
        holes[index] = hole
        return self._with_holes(cascade(holes, index))

    def _modify_samples(self, hole_uuid, modifier, qc_state=None):
        index = self.index_of(hole_uuid)
        hole = self.holes[index]
        raw = modifier(hole)
        samples = renumber(raw, hole.start_id)
        updated = hole.evolve(samples=samples, qc_state=hole.qc_state if qc_state is None else qc_state)
        return self._replace(index, updated)

    # ------------------------------------------------------------------
    # Holes
    # ------------------------------------------------------------------

    def add_hole(self):
        last = self.holes[-1] if self.holes else None
        hole_id = increment_identifier(last.hole_id) if last is not None and last.hole_id else ""
        hole = DrillHole(
            hole_id=hole_id,
            start_id=derive_start(last),
            project_uuid=last.project_uuid if last is not None else None,
            sampler_uuid=last.sampler_uuid if last is not None else None,
        )
        logger.info("Added hole %r starting at %s", hole.hole_id, hole.start_id)
        return self._with_holes(self.holes + (hole,))

    def delete_hole(self, hole_uuid):
        index = self.index_of(hole_uuid)
        holes = list(self.holes[:index] + self.holes[index + 1:])
        logger.info("Deleted hole %r", self.holes[index].hole_id)
        return self._with_holes(cascade(holes, index - 1))

    def update_hole_info(self, hole_uuid, **fields):
        unknown = set(fields) - set(HOLE_INFO_FIELDS)
        if unknown:
            raise HoleLogError(f"Unknown hole fields: {sorted(unknown)}")
        index = self.index_of(hole_uuid)
        hole = self.holes[index]
        updated = hole.evolve(**fields)
        if "start_id" in fields and updated.start_id != hole.start_id:
            updated = renumber_hole(updated, updated.start_id)
            return self._replace(index, updated)
        holes = list(self.holes)
        holes[index] = updated
        return self._with_holes(holes)

    def hole_info_complete(self, hole_uuid):
        return self.hole(hole_uuid).info_complete()

    # ------------------------------------------------------------------
    # Primary samples
    # ------------------------------------------------------------------

    def generate_samples(self, hole_uuid, interval=None):
        """Regenerate the primary samples of a hole, keeping QC and not-sampled rows."""
        hole = self.hole(hole_uuid)
        if not hole.info_complete():
            raise HoleInfoIncompleteError(f"Complete the hole information for {hole.hole_id or hole_uuid} before generating samples")
        interval = interval or self.interval

        def modifier(current):
            kept = current.samples[current.samples[CATEGORY] != PRIMARY]
            generated = intervals.generate_primary(current.depth, interval)
            return intervals.apply_existing_gaps(pd.concat([kept, generated], ignore_index=True))

        logger.info("Generating %s m samples for hole %r", interval, hole.hole_id)
        return self._modify_samples(hole_uuid, modifier, _structural_edit(hole.qc_state))

    def split_samples(self, hole_uuid, sample_uuids):
        hole = self.hole(hole_uuid)
        return self._modify_samples(
            hole_uuid,
            lambda current: intervals.split_primary(current.samples, sample_uuids),
            _structural_edit(hole.qc_state),
        )

    def merge_samples(self, hole_uuid, sample_uuids):
        hole = self.hole(hole_uuid)
        return self._modify_samples(
            hole_uuid,
            lambda current: intervals.merge_primary(current.samples, sample_uuids, composite_interval=self.interval),
            _structural_edit(hole.qc_state),
        )

    def add_not_sampled(self, hole_uuid, gap_from, gap_to):
        """Declare ``[gap_from, gap_to)`` as not sampled.

        When the hole's QC layout was produced by the rule engine and is still
        clean, QC is regenerated around the new gap. Otherwise the gap may not
        overlap an existing duplicate.
        """
        hole = self.hole(hole_uuid)
        gap_from, gap_to = intervals.validate_gap(gap_from, gap_to, hole.depth)
        regenerate = hole.qc_auto_applied
        if not regenerate:
            conflict = intervals.find_qc_conflict(hole.samples, gap_from, gap_to)
            if conflict is not None:
                raise IntervalValidationError(
                    f"Cannot add interval. It conflicts with a non-primary sample "
                    f"({conflict['sample_id']} from {conflict[FROM]} to {conflict[TO]})."
                )

        def modifier(current):
            reconciled = intervals.reconcile_gap(current.samples, gap_from, gap_to, hole_id=current.hole_id)
            if regenerate:
                return apply_qc_rules(reconciled, current.start_id, self.qc_config)
            return reconciled

        logger.info("Added not-sampled interval [%s, %s) to hole %r", gap_from, gap_to, hole.hole_id)
        return self._modify_samples(hole_uuid, modifier)

    # ------------------------------------------------------------------
    # Manual QC
    # ------------------------------------------------------------------

    def add_duplicate(self, hole_uuid, sample_uuid):
        hole = self.hole(hole_uuid)
        target = hole.sample(sample_uuid)
        if target[CATEGORY] != PRIMARY:
            raise HoleLogError("Duplicates can only be added to primary samples")
        samples = hole.samples
        existing = samples[
            (samples[CATEGORY] == DUPLICATE) & (samples[FROM] == target[FROM]) & (samples[TO] == target[TO])
        ]
        if not existing.empty:
            logger.debug("Interval [%s, %s) already has a duplicate", target[FROM], target[TO])
            return self

        duplicate = {
            FROM: target[FROM],
            TO: target[TO],
            CATEGORY: DUPLICATE,
            SAMPLE_TYPE: target[SAMPLE_TYPE],
            SAMPLE_METHOD: target[SAMPLE_METHOD],
        }
        return self._modify_samples(
            hole_uuid,
            lambda current: pd.concat([current.samples, data.samples_frame([duplicate])], ignore_index=True),
            QC_MANUAL,
        )

    def _insert_marker(self, hole_uuid, sample_uuid, category, material):
        hole = self.hole(hole_uuid)
        target = hole.sample(sample_uuid)
        marker = {
            FROM: target[TO],
            TO: target[TO],
            CATEGORY: category,
            MATERIAL_NAME: material,
            MATERIAL_UUID: self.reference.material_uuid(category, material),
        }
        return self._modify_samples(
            hole_uuid,
            lambda current: pd.concat([current.samples, data.samples_frame([marker])], ignore_index=True),
            QC_MANUAL,
        )

    def insert_standard(self, hole_uuid, sample_uuid, material=None):
        return self._insert_marker(hole_uuid, sample_uuid, STANDARD, material)

    def insert_blank(self, hole_uuid, sample_uuid, material=None):
        return self._insert_marker(hole_uuid, sample_uuid, BLANK, material)

    def assign_material(self, hole_uuid, sample_uuid, material):
        index = self.index_of(hole_uuid)
        hole = self.holes[index]
        target = hole.sample(sample_uuid)
        if target[CATEGORY] not in MATERIAL_CATEGORIES:
            raise HoleLogError("Materials can only be assigned to standards and blanks")
        samples = hole.samples.copy()
        mask = samples[SAMPLE_UUID] == sample_uuid
        samples.loc[mask, MATERIAL_NAME] = material
        samples.loc[mask, MATERIAL_UUID] = self.reference.material_uuid(target[CATEGORY], material)
        holes = list(self.holes)
        holes[index] = hole.evolve(samples=samples)
        return self._with_holes(holes)

    def delete_samples(self, hole_uuid, sample_uuids):
        """Delete non-primary samples.

        Removing a not-sampled row refills its gap with primary samples of the
        chain's current interval. Primary samples are never deleted.
        """
        hole = self.hole(hole_uuid)
        targets = set(sample_uuids)
        samples = hole.samples
        doomed = samples[samples[SAMPLE_UUID].isin(targets) & (samples[CATEGORY] != PRIMARY)]
        if doomed.empty:
            return self

        gaps = doomed[doomed[CATEGORY] == NOT_SAMPLED]
        removes_qc = doomed[CATEGORY].isin(QC_CATEGORIES).any()
        qc_state = QC_MANUAL if removes_qc else _structural_edit(hole.qc_state)

        def modifier(current):
            kept = current.samples[~current.samples[SAMPLE_UUID].isin(set(doomed[SAMPLE_UUID]))]
            refills = [intervals.fill_gap(frm, to, self.interval) for frm, to in zip(gaps[FROM], gaps[TO])]
            return pd.concat([kept] + refills, ignore_index=True)

        logger.info("Deleted %d samples from hole %r", len(doomed), hole.hole_id)
        return self._modify_samples(hole_uuid, modifier, qc_state)

    # ------------------------------------------------------------------
    # Automatic QC
    # ------------------------------------------------------------------

    def apply_auto_qc(self, hole_uuid):
        """Reset the hole's QC and regenerate it from the chain's QC rules."""
        if not self.qc_config.enabled:
            raise QCConfigError("Automatic QC is disabled")
        hole = self.hole(hole_uuid)
        logger.info("Applying QC rules to hole %r from %s", hole.hole_id, hole.start_id)
        return self._modify_samples(
            hole_uuid,
            lambda current: apply_qc_rules(current.samples, current.start_id, self.qc_config),
            QC_AUTO_CLEAN,
        )

    # ------------------------------------------------------------------
    # Condition and recovery logs
    # ------------------------------------------------------------------

    def update_interval_log(self, hole_uuid, track, from_depth, to_depth, code):
        index = self.index_of(hole_uuid)
        hole = self.holes[index]
        condition, recovery = logs.apply_log_code(
            hole.condition, hole.recovery, track, from_depth, to_depth, code, hole.depth
        )
        holes = list(self.holes)
        holes[index] = hole.evolve(condition=condition, recovery=recovery)
        return self._with_holes(holes)

    def combined_intervals(self, hole_uuid):
        return self.hole(hole_uuid).combined_intervals()
