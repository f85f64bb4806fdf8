# SPDX-License-Identifier: GPL-3.0-or-later

# Copyright (C) 2026 Darkmine Pty Ltd

from pathlib import Path
import sys

import pytest


ROOT = Path(__file__).resolve().parents[1]
PYTHON_SRC_PATH = ROOT / "python" / "src"

if str(PYTHON_SRC_PATH) not in sys.path:
    sys.path.insert(0, str(PYTHON_SRC_PATH))


SAMPLED_DATE = "2026-03-14"


@pytest.fixture
def reference():
    from holelog.sampling.model import ReferenceData

    return ReferenceData(
        projects={"p1": "REB"},
        samplers={"s1": "Sam Ulrich"},
        standards={"std1": "OREAS-25c"},
        blanks={"blk1": "Silica Blank"},
    )


@pytest.fixture
def ready_chain(reference):
    """Single 13 m hole RC001 with complete hole information and no samples yet."""
    from holelog.sampling.model import HoleChain

    chain = HoleChain.new(reference=reference)
    first = chain.holes[0]
    return chain.update_hole_info(
        first.uuid,
        hole_id="RC001",
        depth=13,
        project_uuid="p1",
        sampler_uuid="s1",
        sampled_date=SAMPLED_DATE,
    )
