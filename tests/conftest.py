import pandas as pd
import pytest

from bagel_tables import Bagel


@pytest.fixture
def scenario_records():
    """Sample A: X x3, Y x1. Sample B: Y x2."""
    return pd.DataFrame(
        {
            "sample": ["A", "A", "B", "A", "A", "B"],
            "category": ["X", "X", "Y", "X", "Y", "Y"],
        }
    )


@pytest.fixture
def sbs_variants():
    """Three samples of SBS tokens; S3 has no classifiable events."""
    return pd.DataFrame(
        {
            "sample": ["S1", "S1", "S2", "S1", "S2", "S2", "S3"],
            "motif": [
                "C>A_ACA",
                "C>T_ACG",
                "C>T_ACG",
                "T>G_TTT",
                "C>A_ACA",
                "C>T_ACG",
                None,
            ],
            "strand": ["T", "U", "T", "T", "U", None, "U"],
        }
    )


@pytest.fixture
def bagel(sbs_variants):
    return Bagel(variants=sbs_variants)
