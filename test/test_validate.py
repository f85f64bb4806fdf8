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

from holelog.sampling.model import DrillHole, HoleChain
from holelog.sampling.validate import validate_chain, validate_hole, validate_intervals, validate_qc


def _types(issues):
    return [issue["type"] for issue in issues]


def test_generated_hole_has_no_interval_issues(ready_chain):
    chain = ready_chain.generate_samples(ready_chain.holes[0].uuid)
    hole = chain.holes[0]
    assert validate_intervals(hole.samples, depth=hole.depth) == []
    assert validate_hole(hole) == []


def test_interval_overlap_and_gap_detection():
    samples = [
        {"from": 0.0, "to": 4.0, "category": "Primary"},
        {"from": 3.0, "to": 6.0, "category": "Primary"},
        {"from": 7.0, "to": 8.0, "category": "Not Sampled"},
    ]
    issues = validate_intervals(samples, depth=10)
    assert _types(issues) == ["overlap", "gap", "gap"]
    assert (issues[1]["from"], issues[1]["to"]) == (6.0, 7.0)
    assert (issues[2]["from"], issues[2]["to"]) == (8.0, 10.0)


def test_qc_markers_do_not_break_tiling():
    samples = [
        {"from": 0.0, "to": 2.0, "category": "Primary"},
        {"from": 2.0, "to": 2.0, "category": "Standard", "material_name": "OREAS-25c"},
        {"from": 2.0, "to": 4.0, "category": "Primary"},
    ]
    assert validate_intervals(samples, depth=4) == []


def test_qc_issue_detection():
    samples = [
        {"from": 0.0, "to": 2.0, "category": "Duplicate", "sample_id": "S00002"},
        {"from": 2.0, "to": 2.0, "category": "Blank", "sample_id": "S00003", "material_name": "unassigned"},
        {"from": 2.0, "to": 4.0, "category": "Primary", "id_status": "unseeded"},
    ]
    assert _types(validate_qc(samples)) == ["unlinked_duplicate", "unassigned_material", "unseeded"]


def test_chain_validation_reports_hole_ids():
    chain = HoleChain([DrillHole(hole_id="RC009", depth=5, start_id="S00001")])
    issues = validate_chain(chain)
    assert _types(issues) == ["hole_info_incomplete"]
    assert issues[0]["hole_id"] == "RC009"


def test_stale_auto_qc_is_reported(ready_chain):
    chain = ready_chain.update(qc_config={"enabled": True, "standard": {"rate": 10, "triggers": ["02"]}})
    uuid = chain.holes[0].uuid
    chain = chain.generate_samples(uuid)
    chain = chain.apply_auto_qc(uuid)
    chain = chain.split_samples(uuid, [chain.holes[0].samples.iloc[0]["sample_uuid"]])
    issues = validate_hole(chain.holes[0])
    assert "stale_auto_qc" in _types(issues)
    assert "unassigned_material" in _types(issues)
