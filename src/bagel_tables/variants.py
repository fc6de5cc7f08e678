import logging
import os

import pandas as pd

from .errors import InvalidShapeError, UnknownColumnError

log = logging.getLogger(__name__)


def _guess_sep(path: str) -> str:
    name = path[:-3] if path.endswith(".gz") else path
    return "," if name.endswith(".csv") else "\t"


def load_variants(path: str, sep=None, sample_column="sample") -> pd.DataFrame:
    """
    Read a delimited variant table (one row per variant).

    The separator is taken from the extension when ``sep`` is None
    (``.csv`` -> comma, anything else -> tab). Gzipped files are accepted.
    """
    if sep is None:
        sep = _guess_sep(path)
    variants = pd.read_csv(path, sep=sep)
    if sample_column not in variants.columns:
        raise UnknownColumnError(
            f"Variant table {os.path.basename(path)} has no '{sample_column}' column",
            "existing columns are: " + ", ".join(map(str, variants.columns)),
        )
    log.info("Loaded %d variants for %d samples from %s",
             len(variants), variants[sample_column].nunique(), path)
    return variants


def save_counts_matrix(matrix, output_path):
    matrix.to_csv(output_path, sep="\t")


def load_counts_matrix(path: str) -> pd.DataFrame:
    """Read a categories x samples count matrix written as TSV or CSV."""
    for sep in ["\t", ","]:
        try:
            df = pd.read_csv(path, index_col=0, sep=sep)
        except (pd.errors.ParserError, UnicodeDecodeError):
            continue
        if df.shape[1] > 0 and df.select_dtypes(include="number").shape[1] == df.shape[1]:
            return df
    raise InvalidShapeError(f"Unable to read {path} as a numeric count matrix")
