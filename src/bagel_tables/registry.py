import logging
import warnings

import pandas as pd

from .count_table import create_count_table, validate_count_table
from .errors import (
    DuplicateNameError,
    InvalidShapeError,
    MissingTableError,
    NotABagelError,
    TableWarning,
)

log = logging.getLogger(__name__)


class CountTableRegistry:
    """
    Named collection of count tables owned by one :class:`Bagel`.

    Tables are stored as copies, so a table is never shared between two
    registries. ``insert``, ``drop`` and ``combine`` mutate the registry they
    are called on; ``subset`` returns a new registry. Indexing, iteration and
    ``tables`` hand out the stored tables themselves; copy them before editing.
    """

    def __init__(self, tables=None):
        self._tables = {}
        for table in tables or []:
            self.insert(table)

    def __contains__(self, name):
        return name in self._tables

    def __getitem__(self, name):
        self._require(name)
        return self._tables[name]

    def __iter__(self):
        return iter(self._tables.values())

    def __len__(self):
        return len(self._tables)

    def __repr__(self):
        return f"CountTableRegistry({self.names})"

    @property
    def names(self):
        return list(self._tables)

    @property
    def tables(self):
        return dict(self._tables)

    def _require(self, name):
        if not self._tables:
            raise MissingTableError(
                "The counts table is either missing or malformed",
                "please create tables e.g. with build_standard_table first",
            )
        if name not in self._tables:
            raise MissingTableError(
                f"'{name}' does not exist",
                "current table names are: " + ", ".join(self.names),
            )

    def insert(self, table, overwrite=False):
        """
        Store a validated copy of ``table`` under ``table.name``.

        Nothing is stored when validation or the name check fails.
        """
        checked = validate_count_table(table)
        if checked.name in self._tables:
            if not overwrite:
                raise DuplicateNameError(
                    "Table names must be unique",
                    "current table names are: " + ", ".join(self.names),
                )
            msg = f"Overwriting counts table: {checked.name}"
            log.warning(msg)
            warnings.warn(msg, TableWarning, stacklevel=2)

        self._tables[checked.name] = checked
        log.info("Stored count table '%s' (%d x %d)", checked.name, *checked.shape)

    def get_matrix(self, name):
        return self[name].matrix

    def drop(self, name):
        self._require(name)
        del self._tables[name]
        log.info("Dropped count table '%s'", name)

    def combine(self, names, new_name, description=""):
        """
        Stack the matrices of ``names`` row-wise into a new table ``new_name``.

        All tables must cover the same samples; columns follow the order of
        the first table.
        """
        names = list(names)
        if new_name in self._tables:
            raise DuplicateNameError(
                "Table names must be unique",
                "current table names are: " + ", ".join(self.names),
            )
        if not names:
            raise MissingTableError("No tables were given to combine")
        missing = [n for n in names if n not in self._tables]
        if missing:
            raise MissingTableError(
                "User specified table(s) " + ", ".join(map(repr, missing))
                + " do not exist, please create prior to creating compound table",
                "current table names are: " + ", ".join(self.names),
            )

        parts = [self._tables[n] for n in names]
        samples = parts[0].samples
        for part in parts[1:]:
            if set(part.samples) != set(samples) or len(part.samples) != len(samples):
                raise InvalidShapeError(
                    "Tables can only be combined when they share the same samples",
                    f"'{parts[0].name}' and '{part.name}' differ",
                )

        matrix = pd.concat([p.matrix.loc[:, samples] for p in parts], axis=0)
        features, type_ = _combine_features(parts)
        annotation, color_variable, color_mapping = _combine_annotation(parts)

        combined = create_count_table(
            name=new_name,
            count_table=matrix,
            features=features,
            type=type_,
            annotation=annotation,
            color_variable=color_variable,
            color_mapping=color_mapping,
            description=description,
        )
        self._tables[new_name] = combined
        log.info("Combined %s into '%s' (%d x %d)", ", ".join(names), new_name, *combined.shape)
        return combined.copy()

    def subset(self, samples):
        """
        Return a new registry whose matrices keep only the columns in ``samples``.

        Column order, rows and all other metadata are left as they are.
        """
        if isinstance(samples, str):
            samples = [samples]
        keep = set(samples)
        subset = CountTableRegistry()
        for table in self._tables.values():
            sub = table.copy()
            sub.matrix = sub.matrix.loc[:, [s for s in sub.matrix.columns if s in keep]]
            subset._tables[sub.name] = sub
        return subset


def _combine_features(parts):
    if all(p.features is not None and p.type is not None for p in parts):
        features = pd.concat([p.features for p in parts], axis=0, ignore_index=True)
        labels = [label for p in parts for label in p.type]
        categories = list(dict.fromkeys(c for p in parts for c in p.type.categories))
        return features, pd.Categorical(labels, categories=categories)
    return None, None


def _combine_annotation(parts):
    if any(p.annotation is None for p in parts):
        return None, None, None
    annotation = pd.concat([p.annotation for p in parts], axis=0, ignore_index=True)

    variables = {p.color_variable for p in parts}
    if len(variables) != 1 or None in variables or variables.pop() not in annotation.columns:
        return annotation, None, None
    color_variable = parts[0].color_variable

    if any(p.color_mapping is None for p in parts):
        return annotation, color_variable, None
    color_mapping = {}
    for p in parts:
        color_mapping.update(p.color_mapping)
    return annotation, color_variable, color_mapping


class Bagel:
    """
    Analysis session: the variants, sample annotations and count tables.

    Parameters
    ----------
    variants : pandas.DataFrame, optional
        One row per variant with a sample column.
    sample_annotations : pandas.DataFrame, optional
        Descriptive columns keyed by sample.
    """

    def __init__(self, variants=None, sample_annotations=None):
        self.variants = variants
        self.sample_annotations = sample_annotations
        self.count_tables = CountTableRegistry()

    def __repr__(self):
        n_variants = 0 if self.variants is None else len(self.variants)
        return f"Bagel(variants={n_variants}, count_tables={self.count_tables.names})"


def require_bagel(bagel):
    if not isinstance(bagel, Bagel):
        raise NotABagelError(details=f"got {type(bagel).__name__}")
    return bagel


def extract_count_tables(bagel):
    """Return the count tables of ``bagel`` as a list, in insertion order."""
    require_bagel(bagel)
    return list(bagel.count_tables)


def extract_count_matrix(bagel, table_name):
    require_bagel(bagel)
    return bagel.count_tables.get_matrix(table_name)


def combine_count_tables(bagel, to_comb, name, description=""):
    require_bagel(bagel)
    return bagel.count_tables.combine(to_comb, name, description=description)


def drop_count_table(bagel, table_name):
    require_bagel(bagel)
    bagel.count_tables.drop(table_name)


def subset_count_tables(bagel, samples):
    """Return a new registry restricted to ``samples``; ``bagel`` is not modified."""
    require_bagel(bagel)
    return bagel.count_tables.subset(samples)
