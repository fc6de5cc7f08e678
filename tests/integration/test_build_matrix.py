import os

import numpy as np
import pandas as pd
import pytest
from click.testing import CliRunner

from bagel_tables import SBS96_LEVELS, load_variants
from bagel_tables.cli import cli
from bagel_tables.variants import load_counts_matrix

SAMPLES = ["TCGA-01", "TCGA-02", "TCGA-03", "TCGA-04"]


@pytest.fixture(scope="session")
def variants_path(tmp_path_factory):
    """
    Write a small variant table with SBS tokens, ref/alt/context and a
    strand annotation for four samples.
    """
    rng = np.random.default_rng(7)
    rows = []
    for i, sample in enumerate(SAMPLES):
        # Each sample favours a different block of the 96 classes.
        weights = np.ones(96)
        weights[i * 24:(i + 1) * 24] = 20
        weights /= weights.sum()
        for motif in rng.choice(SBS96_LEVELS, size=60, p=weights):
            rows.append(
                {
                    "sample": sample,
                    "motif": motif,
                    "strand": rng.choice(["T", "U"]),
                }
            )
    out = tmp_path_factory.mktemp("variants") / "variants.tsv"
    pd.DataFrame(rows).to_csv(out, sep="\t", index=False)
    return str(out)


# name, extra CLI args, expected row labels (None = data driven)
MATRIX_CASES = [
    ("sbs96", ["--mode", "sbs96"], list(SBS96_LEVELS)),
    ("strand_levels", ["--mode", "custom", "--column", "strand", "--levels", "T,U,B"],
     ["T", "U", "B"]),
    ("strand_observed", ["--mode", "custom", "--column", "strand"], None),
]


@pytest.fixture(params=MATRIX_CASES, ids=[c[0] for c in MATRIX_CASES])
def matrix_case(request, variants_path, tmp_path):
    name, args, expected_rows = request.param
    out_path = str(tmp_path / f"{name}.tsv")
    return name, args, expected_rows, variants_path, out_path


class TestBuildCommand:
    @staticmethod
    def _assert_matrix_basic(matrix: pd.DataFrame, name: str):
        assert isinstance(matrix, pd.DataFrame), f"{name}: result is not a DataFrame"
        assert not matrix.empty, f"{name}: matrix is empty"
        assert list(matrix.columns) == SAMPLES, f"{name}: unexpected sample columns"
        assert (matrix.sum(axis=0) == 60).all(), f"{name}: column totals are off"

    def test_build(self, matrix_case):
        name, args, expected_rows, variants_path, out_path = matrix_case

        result = CliRunner().invoke(
            cli, ["build", "--variants", variants_path, "--out-matrix", out_path, *args]
        )
        assert result.exit_code == 0, result.output
        assert "Counts matrix saved to" in result.output

        matrix = load_counts_matrix(out_path)
        self._assert_matrix_basic(matrix, name)
        if expected_rows is not None:
            assert list(matrix.index) == expected_rows
        else:
            assert list(matrix.index) == ["T", "U"]

    def test_missing_column_reported(self, variants_path, tmp_path):
        result = CliRunner().invoke(
            cli,
            ["build", "--variants", variants_path, "--out-matrix", str(tmp_path / "x.tsv"),
             "--mode", "custom", "--column", "gene"],
        )
        assert result.exit_code != 0
        assert "existing annotations are: sample, motif, strand" in result.output

    def test_missing_variants_file(self, tmp_path):
        result = CliRunner().invoke(
            cli,
            ["build", "--variants", str(tmp_path / "none.tsv"), "--out-matrix",
             str(tmp_path / "x.tsv")],
        )
        assert result.exit_code != 0
        assert "does not exist" in result.output


class TestNmfCommand:
    def test_nmf_outputs(self, variants_path, tmp_path):
        matrix_path = str(tmp_path / "SBS96.tsv")
        outdir = str(tmp_path / "nmf")
        runner = CliRunner()

        result = runner.invoke(
            cli, ["build", "--variants", variants_path, "--out-matrix", matrix_path]
        )
        assert result.exit_code == 0, result.output

        result = runner.invoke(
            cli, ["nmf", "--matrix", matrix_path, "--outdir", outdir, "--components", "2"]
        )
        assert result.exit_code == 0, result.output

        signatures = pd.read_csv(os.path.join(outdir, "signatures.tsv"), sep="\t", index_col=0)
        exposures = pd.read_csv(os.path.join(outdir, "exposures.tsv"), sep="\t", index_col=0)
        assert signatures.shape == (2, 96)
        assert list(signatures.columns) == list(SBS96_LEVELS)
        assert list(exposures.index) == SAMPLES
        assert (signatures.to_numpy() >= 0).all()


def test_load_variants_requires_sample_column(tmp_path):
    path = tmp_path / "variants.csv"
    pd.DataFrame({"patient": ["a"], "motif": ["C>A_ACA"]}).to_csv(path, index=False)
    with pytest.raises(KeyError):
        load_variants(str(path))
    assert len(load_variants(str(path), sample_column="patient")) == 1
