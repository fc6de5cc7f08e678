import copy
import itertools
import logging
import warnings
from dataclasses import dataclass, field
from typing import Optional

import numpy as np
import pandas as pd

from .errors import (
    InvalidShapeError,
    MissingDependentFieldError,
    TableWarning,
    UnknownColumnError,
)

log = logging.getLogger(__name__)


@dataclass
class CountTable:
    """
    A categories x samples count matrix plus the metadata used to plot it.

    Use :func:`create_count_table` to build one with validation.
    """

    name: str
    matrix: pd.DataFrame
    features: Optional[pd.DataFrame] = None
    type: Optional[pd.Categorical] = None
    annotation: Optional[pd.DataFrame] = None
    color_variable: Optional[str] = None
    color_mapping: Optional[dict] = None
    description: str = field(default="")

    @property
    def categories(self):
        return list(self.matrix.index)

    @property
    def samples(self):
        return list(self.matrix.columns)

    @property
    def shape(self):
        return self.matrix.shape

    def type_runs(self):
        """Yield ``(label, run_length)`` for each run of repeated ``type`` values."""
        if self.type is None:
            return
        for label, run in itertools.groupby(self.type):
            yield label, sum(1 for _ in run)

    def copy(self):
        return copy.deepcopy(self)


def _as_matrix(count_table):
    if isinstance(count_table, pd.DataFrame):
        matrix = count_table.copy()
    elif isinstance(count_table, np.ndarray):
        if count_table.ndim != 2:
            raise InvalidShapeError(
                "The count table must be a 2-dimensional matrix",
                f"got an array with {count_table.ndim} dimension(s)",
            )
        matrix = pd.DataFrame(count_table)
    else:
        raise InvalidShapeError(
            "The count table must be a matrix or array",
            f"got {type(count_table).__name__}",
        )

    if matrix.size and not all(pd.api.types.is_numeric_dtype(dt) for dt in matrix.dtypes):
        raise InvalidShapeError("The count table must contain numeric counts")
    if matrix.size and (matrix.to_numpy() < 0).any():
        raise InvalidShapeError("The count table must not contain negative counts")
    return matrix


def _check_metadata(name, features, type, annotation, color_variable, color_mapping, warn=True):
    if features is not None and type is None:
        raise MissingDependentFieldError("'type' must be supplied when including 'features'")
    if type is not None:
        n_features = len(features) if features is not None else None
        if n_features is None or len(type) != n_features:
            raise InvalidShapeError(
                "'type' must be the same length as the number of rows in 'features'",
                f"len(type)={len(type)}, nrow(features)={n_features}",
            )

    if color_mapping is not None and annotation is None:
        raise MissingDependentFieldError(
            "In order to set 'color_mapping', the 'annotation' data frame must be supplied"
        )
    if annotation is not None and color_variable is not None:
        if color_variable not in annotation.columns:
            raise UnknownColumnError(
                f"'{color_variable}' is not a column of 'annotation'",
                "available columns are: " + ", ".join(map(str, annotation.columns)),
            )
        if color_mapping is not None and warn:
            uncovered = sorted(set(annotation[color_variable].dropna()) - set(color_mapping),
                               key=str)
            if uncovered:
                msg = (f"'color_mapping' for table '{name}' has no color for: "
                       + ", ".join(map(str, uncovered)))
                log.warning(msg)
                warnings.warn(msg, TableWarning, stacklevel=3)


def validate_count_table(table):
    """
    Check an assembled :class:`CountTable` against the same rules as
    :func:`create_count_table`. Returns a normalised copy; ``table`` itself
    is left alone.
    """
    if not isinstance(table, CountTable):
        raise TypeError(f"expected a CountTable, got {type(table).__name__}")
    if not isinstance(table.matrix, pd.DataFrame):
        raise InvalidShapeError(
            "The count table must be a matrix or array",
            f"got {type(table.matrix).__name__}",
        )
    checked = table.copy()
    checked.matrix = _as_matrix(checked.matrix)
    _check_metadata(checked.name, checked.features, checked.type, checked.annotation,
                    checked.color_variable, checked.color_mapping, warn=False)
    if checked.type is not None and not isinstance(checked.type, pd.Categorical):
        checked.type = pd.Categorical(checked.type)
    return checked


def create_count_table(
    name,
    count_table,
    features=None,
    type=None,
    annotation=None,
    color_variable=None,
    color_mapping=None,
    description="",
):
    """
    Validate the pieces of a count table and assemble a :class:`CountTable`.

    Raises
    ------
    InvalidShapeError
        ``count_table`` is not a 2-D DataFrame/ndarray, or ``type`` does not
        line up with the rows of ``features``.
    MissingDependentFieldError
        ``features`` given without ``type`` or ``color_mapping`` given
        without ``annotation``.
    UnknownColumnError
        ``color_variable`` is not a column of ``annotation``.
    """
    matrix = _as_matrix(count_table)
    _check_metadata(name, features, type, annotation, color_variable, color_mapping)
    if type is not None and not isinstance(type, pd.Categorical):
        type = pd.Categorical(type)

    return CountTable(
        name=name,
        matrix=matrix,
        features=features,
        type=type,
        annotation=annotation,
        color_variable=color_variable,
        color_mapping=dict(color_mapping) if color_mapping is not None else None,
        description=description,
    )
