"""Count tables for mutational signature analysis."""

__version__ = "0.1.0"

from .count_table import CountTable, create_count_table
from .errors import (
    BagelError,
    ClassificationError,
    DuplicateNameError,
    InvalidShapeError,
    MissingDependentFieldError,
    MissingTableError,
    NotABagelError,
    TableWarning,
    UnknownColumnError,
)
from .matrix_builder import (
    build_count_table,
    build_custom_table,
    build_standard_table,
    count_by_sample,
)
from .motifs import SBS96_LEVELS, classify_token, classify_tokens, mutation_token, sbs96_levels
from .nmf import run_nmf_decomposition
from .registry import (
    Bagel,
    CountTableRegistry,
    combine_count_tables,
    drop_count_table,
    extract_count_matrix,
    extract_count_tables,
    subset_count_tables,
)
from .variants import load_variants, save_counts_matrix

__all__ = [
    'Bagel',
    'CountTable',
    'CountTableRegistry',
    'create_count_table',
    'build_count_table',
    'build_custom_table',
    'build_standard_table',
    'count_by_sample',
    'SBS96_LEVELS',
    'sbs96_levels',
    'classify_token',
    'classify_tokens',
    'mutation_token',
    'extract_count_tables',
    'extract_count_matrix',
    'combine_count_tables',
    'drop_count_table',
    'subset_count_tables',
    'run_nmf_decomposition',
    'load_variants',
    'save_counts_matrix',
    'BagelError',
    'NotABagelError',
    'MissingTableError',
    'DuplicateNameError',
    'InvalidShapeError',
    'MissingDependentFieldError',
    'UnknownColumnError',
    'ClassificationError',
    'TableWarning',
]
