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

from conftest import SAMPLED_DATE
from holelog.sampling import export


def test_samples_csv_headers_and_rows(ready_chain):
    uuid = ready_chain.holes[0].uuid
    chain = ready_chain.generate_samples(uuid)
    text = export.write_samples_csv(chain)
    lines = text.splitlines()
    assert lines[0] == (
        "Project Code,Hole ID,Sampled By,Sampled Date,Sample ID,From (m),To (m),Length (m),"
        "Category,Assay Type,PSample ID,Sample Type,Sample Method,Std/Blk ID,Comment"
    )
    assert lines[1] == f"REB,RC001,Sam Ulrich,{SAMPLED_DATE},S00001,0.00,4.00,4.00,Primary,,,COMP,SCOOP,,"
    assert len(lines) == 5


def test_samples_export_carries_qc_links_and_materials(ready_chain):
    uuid = ready_chain.holes[0].uuid
    chain = ready_chain.generate_samples(uuid)
    first = chain.holes[0].samples.iloc[0]["sample_uuid"]
    chain = chain.add_duplicate(uuid, first)
    chain = chain.insert_standard(uuid, first, material="OREAS-25c")
    table = export.samples_table(chain)
    duplicate = table[table["Category"] == "Duplicate"].iloc[0]
    assert duplicate["PSample ID"] == "S00001"
    standard = table[table["Category"] == "Standard"].iloc[0]
    assert standard["Std/Blk ID"] == "OREAS-25c"
    assert standard["Length (m)"] == "0.00"


def test_intervals_csv(ready_chain):
    uuid = ready_chain.holes[0].uuid
    chain = ready_chain.update_interval_log(uuid, "condition", 0, 13, "D")
    lines = export.write_intervals_csv(chain).splitlines()
    assert lines[0] == "Project,Hole ID,From,To,Condition,Recovery,Sampled By,Date"
    assert lines[1:] == [f"REB,RC001,0.00,13.00,D,N/A,Sam Ulrich,{SAMPLED_DATE}"]


def test_export_selected_holes_only(ready_chain):
    chain = ready_chain.generate_samples(ready_chain.holes[0].uuid)
    chain = chain.add_hole()
    second = chain.holes[1]
    chain = chain.update_hole_info(second.uuid, depth=2)
    chain = chain.generate_samples(second.uuid)
    table = export.samples_table(chain, hole_uuids=[second.uuid])
    assert table["Hole ID"].unique().tolist() == ["RC002"]
    assert table["Sample ID"].tolist() == ["S00005", "S00006"]


def test_empty_export_writes_header_and_warns(ready_chain, tmp_path, caplog):
    path = tmp_path / "samples.csv"
    with caplog.at_level("WARNING"):
        export.write_samples_csv(ready_chain, path)
    assert "no sample" in caplog.text
    assert path.read_text(encoding="utf-8").splitlines() == [",".join(export.SAMPLE_HEADERS)]
