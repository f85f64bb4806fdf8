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

import pytest

from holelog.errors import (
    HoleInfoIncompleteError,
    HoleLogError,
    HoleNotFoundError,
    IntervalValidationError,
    QCConfigError,
)
from holelog.sampling.model import DrillHole, HoleChain

AUTO_QC = {
    "enabled": True,
    "standard": {"rate": 20, "triggers": ["05"]},
    "duplicate": {"rate": 20, "triggers": ["10"]},
}


def _ids(hole):
    return hole.samples["sample_id"].tolist()


def _by_category(hole, category):
    return hole.samples[hole.samples["category"] == category]


def _sample_at(hole, frm, category="Primary"):
    df = hole.samples
    return df[(df["from"] == frm) & (df["category"] == category)]["sample_uuid"].iloc[0]


def _three_holes(chain):
    first = chain.holes[0]
    chain = chain.generate_samples(first.uuid)
    chain = chain.add_hole()
    second = chain.holes[1]
    chain = chain.update_hole_info(second.uuid, depth=5)
    chain = chain.generate_samples(second.uuid)
    chain = chain.add_hole()
    third = chain.holes[2]
    chain = chain.update_hole_info(third.uuid, depth=2)
    return chain.generate_samples(third.uuid)


# ---------------------------------------------------------------------------
# Holes
# ---------------------------------------------------------------------------

def test_new_chain_starts_with_default_identifier():
    chain = HoleChain.new()
    assert len(chain) == 1
    assert chain.holes[0].start_id == "S00001"
    assert not chain.hole_info_complete(chain.holes[0].uuid)


def test_hole_info_completeness(ready_chain):
    hole = ready_chain.holes[0]
    assert ready_chain.hole_info_complete(hole.uuid)
    blank_start = ready_chain.update_hole_info(hole.uuid, start_id=" ")
    assert not blank_start.hole_info_complete(hole.uuid)


def test_unknown_hole_fields_are_rejected(ready_chain):
    with pytest.raises(HoleLogError):
        ready_chain.update_hole_info(ready_chain.holes[0].uuid, colour="red")


def test_missing_hole_raises_not_found(ready_chain):
    with pytest.raises(HoleNotFoundError):
        ready_chain.hole("nope")
    with pytest.raises(KeyError):
        ready_chain.delete_hole("nope")


def test_add_hole_inherits_header_and_continues_numbering(ready_chain):
    chain = ready_chain.generate_samples(ready_chain.holes[0].uuid)
    chain = chain.add_hole()
    added = chain.holes[1]
    assert added.hole_id == "RC002"
    assert added.start_id == "S00005"
    assert added.project_uuid == "p1"
    assert added.sampler_uuid == "s1"
    assert added.samples.empty


def test_negative_depth_is_rejected():
    with pytest.raises(HoleLogError):
        DrillHole(depth=-1)


# ---------------------------------------------------------------------------
# Primary samples
# ---------------------------------------------------------------------------

def test_generate_requires_complete_hole_info():
    chain = HoleChain.new()
    with pytest.raises(HoleInfoIncompleteError):
        chain.generate_samples(chain.holes[0].uuid)


def test_generate_numbers_primary_samples(ready_chain):
    chain = ready_chain.generate_samples(ready_chain.holes[0].uuid)
    hole = chain.holes[0]
    assert _ids(hole) == ["S00001", "S00002", "S00003", "S00004"]
    assert hole.samples["to"].tolist() == [4.0, 8.0, 12.0, 13.0]
    assert ready_chain.holes[0].samples.empty


def test_split_and_merge_round_trip(ready_chain):
    chain = ready_chain.generate_samples(ready_chain.holes[0].uuid)
    hole = chain.holes[0]
    chain = chain.split_samples(hole.uuid, [_sample_at(hole, 0.0)])
    hole = chain.holes[0]
    assert _ids(hole) == [f"S{n:05d}" for n in range(1, 8)]
    one_metre = hole.samples[hole.samples["to"] <= 4]["sample_uuid"].tolist()
    chain = chain.merge_samples(hole.uuid, one_metre)
    hole = chain.holes[0]
    assert hole.samples["to"].tolist() == [4.0, 8.0, 12.0, 13.0]
    assert hole.samples["sample_type"].iloc[0] == "COMP"


def test_not_sampled_gap_and_refill(ready_chain):
    uuid = ready_chain.holes[0].uuid
    chain = ready_chain.generate_samples(uuid)
    chain = chain.add_not_sampled(uuid, 4, 8)
    hole = chain.holes[0]
    assert _ids(hole) == ["S00001", "NS_RC001_4_8", "S00002", "S00003"]

    chain = chain.delete_samples(uuid, [_sample_at(hole, 4.0, "Not Sampled")])
    hole = chain.holes[0]
    assert _ids(hole) == ["S00001", "S00002", "S00003", "S00004"]
    refill = hole.samples[hole.samples["from"] == 4.0].iloc[0]
    assert (refill["to"], refill["sample_type"], refill["sample_method"]) == (8.0, "COMP", "SCOOP")


def test_not_sampled_gap_cannot_cut_manual_duplicate(ready_chain):
    uuid = ready_chain.holes[0].uuid
    chain = ready_chain.generate_samples(uuid)
    chain = chain.add_duplicate(uuid, _sample_at(chain.holes[0], 4.0))
    with pytest.raises(IntervalValidationError, match="conflicts"):
        chain.add_not_sampled(uuid, 5, 6)


def test_invalid_gap_leaves_chain_untouched(ready_chain):
    uuid = ready_chain.holes[0].uuid
    chain = ready_chain.generate_samples(uuid)
    with pytest.raises(IntervalValidationError):
        chain.add_not_sampled(uuid, 10, 20)
    assert _ids(chain.holes[0]) == ["S00001", "S00002", "S00003", "S00004"]


# ---------------------------------------------------------------------------
# Manual QC
# ---------------------------------------------------------------------------

def test_add_duplicate_links_and_is_idempotent(ready_chain):
    uuid = ready_chain.holes[0].uuid
    chain = ready_chain.generate_samples(uuid)
    target = _sample_at(chain.holes[0], 0.0)
    chain = chain.add_duplicate(uuid, target)
    assert chain.add_duplicate(uuid, target) is chain
    hole = chain.holes[0]
    duplicate = _by_category(hole, "Duplicate").iloc[0]
    assert duplicate["sample_id"] == "S00002"
    assert duplicate["linked_primary_id"] == "S00001"
    assert duplicate["sample_type"] == "COMP"
    assert hole.qc_state == "manual"


def test_insert_standard_after_sample_with_material(ready_chain):
    uuid = ready_chain.holes[0].uuid
    chain = ready_chain.generate_samples(uuid)
    chain = chain.insert_standard(uuid, _sample_at(chain.holes[0], 0.0), material="OREAS-25c")
    hole = chain.holes[0]
    standard = _by_category(hole, "Standard").iloc[0]
    assert (standard["from"], standard["to"]) == (4.0, 4.0)
    assert standard["sample_id"] == "S00002"
    assert standard["material_uuid"] == "std1"
    assert _ids(hole)[-1] == "S00005"


def test_assign_material_to_blank(ready_chain):
    uuid = ready_chain.holes[0].uuid
    chain = ready_chain.generate_samples(uuid)
    chain = chain.insert_blank(uuid, _sample_at(chain.holes[0], 8.0))
    blank = _by_category(chain.holes[0], "Blank").iloc[0]
    assert blank["material_name"] is None
    chain = chain.assign_material(uuid, blank["sample_uuid"], "Silica Blank")
    blank = _by_category(chain.holes[0], "Blank").iloc[0]
    assert (blank["material_name"], blank["material_uuid"]) == ("Silica Blank", "blk1")


def test_material_only_for_standards_and_blanks(ready_chain):
    uuid = ready_chain.holes[0].uuid
    chain = ready_chain.generate_samples(uuid)
    with pytest.raises(HoleLogError):
        chain.assign_material(uuid, _sample_at(chain.holes[0], 0.0), "OREAS-25c")


def test_primary_samples_are_never_deleted(ready_chain):
    uuid = ready_chain.holes[0].uuid
    chain = ready_chain.generate_samples(uuid)
    assert chain.delete_samples(uuid, [_sample_at(chain.holes[0], 0.0)]) is chain


# ---------------------------------------------------------------------------
# Automatic QC
# ---------------------------------------------------------------------------

def test_auto_qc_disabled_raises(ready_chain):
    with pytest.raises(QCConfigError):
        ready_chain.apply_auto_qc(ready_chain.holes[0].uuid)


def test_auto_qc_layout(ready_chain):
    chain = ready_chain.update(qc_config=AUTO_QC)
    uuid = chain.holes[0].uuid
    chain = chain.generate_samples(uuid, interval=1)
    chain = chain.apply_auto_qc(uuid)
    hole = chain.holes[0]
    assert len(hole.samples) == 15
    assert hole.qc_state == "auto_clean"
    standard = _by_category(hole, "Standard").iloc[0]
    assert (standard["sample_id"], standard["from"]) == ("S00005", 4.0)
    duplicate = _by_category(hole, "Duplicate").iloc[0]
    assert (duplicate["sample_id"], duplicate["linked_primary_id"]) == ("S00011", "S00010")
    assert _ids(hole)[-1] == "S00015"


def test_not_sampled_gap_regenerates_clean_auto_qc(ready_chain):
    chain = ready_chain.update(qc_config=AUTO_QC)
    uuid = chain.holes[0].uuid
    chain = chain.generate_samples(uuid, interval=1)
    chain = chain.apply_auto_qc(uuid)
    chain = chain.add_not_sampled(uuid, 0, 2)
    hole = chain.holes[0]
    assert len(hole.samples) == 14
    assert hole.qc_state == "auto_clean"
    standard = _by_category(hole, "Standard").iloc[0]
    assert (standard["sample_id"], standard["from"]) == ("S00005", 6.0)
    duplicate = _by_category(hole, "Duplicate").iloc[0]
    assert (duplicate["from"], duplicate["to"], duplicate["linked_primary_id"]) == (10.0, 11.0, "S00010")


def test_structural_and_manual_edits_change_qc_state(ready_chain):
    chain = ready_chain.update(qc_config=AUTO_QC)
    uuid = chain.holes[0].uuid
    chain = chain.generate_samples(uuid, interval=1)
    chain = chain.apply_auto_qc(uuid)
    hole = chain.holes[0]
    stale = chain.merge_samples(uuid, [_sample_at(hole, 0.0), _sample_at(hole, 1.0)])
    assert stale.holes[0].qc_state == "auto_stale"
    standard = _by_category(chain.holes[0], "Standard")
    manual = chain.delete_samples(uuid, standard["sample_uuid"].tolist())
    assert manual.holes[0].qc_state == "manual"


# ---------------------------------------------------------------------------
# Cascading across holes
# ---------------------------------------------------------------------------

def test_chain_numbering_across_three_holes(ready_chain):
    chain = _three_holes(ready_chain)
    assert [hole.start_id for hole in chain] == ["S00001", "S00005", "S00007"]
    assert _ids(chain.holes[2]) == ["S00007", "S00008"]


def test_delete_hole_cascades(ready_chain):
    chain = _three_holes(ready_chain)
    chain = chain.delete_hole(chain.holes[1].uuid)
    assert len(chain) == 2
    assert chain.holes[1].start_id == "S00005"
    assert _ids(chain.holes[1]) == ["S00005", "S00006"]


def test_qc_insert_cascades_down_chain(ready_chain):
    chain = _three_holes(ready_chain)
    first = chain.holes[0]
    chain = chain.add_duplicate(first.uuid, _sample_at(first, 0.0))
    assert [hole.start_id for hole in chain] == ["S00001", "S00006", "S00008"]


def test_start_change_renumbers_and_cascades(ready_chain):
    chain = _three_holes(ready_chain)
    chain = chain.update_hole_info(chain.holes[0].uuid, start_id="A0001")
    assert _ids(chain.holes[0]) == ["A0001", "A0002", "A0003", "A0004"]
    assert chain.holes[1].start_id == "A0005"
    assert chain.holes[2].start_id == "A0007"


def test_earlier_snapshots_are_unchanged(ready_chain):
    chain = _three_holes(ready_chain)
    edited = chain.update_hole_info(chain.holes[0].uuid, start_id="A0001")
    assert chain.holes[1].start_id == "S00005"
    assert edited.holes[1].start_id == "A0005"


# ---------------------------------------------------------------------------
# Condition and recovery logs
# ---------------------------------------------------------------------------

def test_interval_log_on_chain(ready_chain):
    uuid = ready_chain.holes[0].uuid
    chain = ready_chain.update_interval_log(uuid, "condition", 0, 13, "D")
    chain = chain.update_interval_log(uuid, "recovery", 6, 8, "NS")
    combined = chain.combined_intervals(uuid)
    rows = [(r["from"], r["to"], r["condition_code"], r["recovery_code"]) for r in combined.to_dict("records")]
    assert rows == [
        (0.0, 6.0, "D", "N/A"),
        (6.0, 8.0, "NS", "NS"),
        (8.0, 13.0, "D", "N/A"),
    ]
