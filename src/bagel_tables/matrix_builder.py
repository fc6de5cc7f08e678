import logging

import numpy as np
import pandas as pd

from .colors import SBS96_COLORS, hue_palette
from .count_table import create_count_table
from .errors import ClassificationError, DuplicateNameError, UnknownColumnError
from .motifs import SBS96_LEVELS, classify_tokens, mutation_token, summarize_motifs
from .registry import require_bagel

log = logging.getLogger(__name__)

DEFAULT_TYPE = "unknown"
DEFAULT_COLOR_VARIABLE = "motif"


def _require_columns(records, columns):
    missing = [c for c in columns if c not in records.columns]
    if missing:
        raise UnknownColumnError(
            "That variant annotation does not exist: " + ", ".join(map(str, missing)),
            "existing annotations are: " + ", ".join(map(str, records.columns)),
        )


def _default_levels(values):
    # Categorical columns keep their declared order, anything else is sorted.
    if isinstance(values.dtype, pd.CategoricalDtype):
        return list(values.cat.categories)
    observed = values.dropna().unique()
    try:
        return sorted(observed)
    except TypeError:
        # mixed types
        return sorted(observed, key=str)


def count_by_sample(records, category_column, partition_key="sample", levels=None):
    """
    Count category values per sample.

    Parameters
    ----------
    records : pandas.DataFrame
        One row per variant.
    category_column : str
        Column whose values become the matrix rows.
    partition_key : str, default "sample"
        Column identifying the sample each row belongs to.
    levels : sequence, optional
        Full, ordered set of categories. Categories that are never observed
        still get a row of zeros. If omitted, the distinct observed values are
        used (declared order for categorical columns, sorted otherwise), which
        makes the row set depend on the data.

    Returns
    -------
    pandas.DataFrame
        int64 counts with one row per level and one column per sample, in
        the order samples first appear in ``records``.
    """
    if not isinstance(records, pd.DataFrame):
        raise TypeError("records must be a pandas.DataFrame")
    _require_columns(records, [partition_key, category_column])

    values = records[category_column]
    samples = list(pd.unique(records[partition_key]))

    if levels is None:
        levels = _default_levels(values)
        log.debug("No levels supplied for '%s'; using %d observed values",
                  category_column, len(levels))
    else:
        levels = list(levels)
        observed = values.dropna()
        unexpected = sorted(set(observed.astype(object)) - set(levels), key=str)
        if unexpected:
            raise ClassificationError(
                f"Values of '{category_column}' are not in the supplied levels",
                ", ".join(map(str, unexpected)),
            )

    df = pd.DataFrame(
        {
            "sample": records[partition_key].to_numpy(),
            "category": values.astype(object).to_numpy(),
        }
    ).dropna(subset=["category"])

    if df.empty:
        counts = pd.DataFrame(0, index=pd.Index(levels), columns=pd.Index(samples))
    else:
        counts = (
            df
            .groupby(["category", "sample"], sort=False)
            .size()
            .unstack(fill_value=0)
            .reindex(index=levels, columns=samples, fill_value=0)
        )

    counts = counts.astype("int64")
    counts.index.name = None
    counts.columns.name = None
    return counts


def build_count_table(
    records,
    name,
    category_column,
    partition_key="sample",
    levels=None,
    description="",
    features=None,
    type=None,
    annotation=None,
    color_variable=None,
    color_mapping=None,
):
    """
    Build a :class:`~bagel_tables.count_table.CountTable` from variant records.

    Metadata left as ``None`` is filled in before validation:

    - ``type``: ``"unknown"`` for every counted event
    - ``features``: one row per counted event, column ``mutation``
    - ``annotation``: one column ``motif`` holding the row identifiers
    - ``color_variable``: ``"motif"``
    - ``color_mapping``: evenly spaced hues keyed by ``annotation[color_variable]``

    ``type`` and ``features`` are only defaulted when both are omitted.
    """
    counts = count_by_sample(records, category_column, partition_key=partition_key, levels=levels)
    motif = list(counts.index)

    if features is None and type is None:
        row_totals = counts.sum(axis=1).to_numpy()
        features = pd.DataFrame({"mutation": np.repeat(np.asarray(motif, dtype=object), row_totals)})
        type = pd.Categorical([DEFAULT_TYPE] * len(features))
    if annotation is None:
        annotation = pd.DataFrame({DEFAULT_COLOR_VARIABLE: motif})
        if color_variable is None:
            color_variable = DEFAULT_COLOR_VARIABLE
    if color_mapping is None and color_variable is not None and color_variable in annotation.columns:
        color_mapping = hue_palette(pd.unique(annotation[color_variable].dropna()))

    table = create_count_table(
        name=name,
        count_table=counts,
        features=features,
        type=type,
        annotation=annotation,
        color_variable=color_variable,
        color_mapping=color_mapping,
        description=description,
    )
    log.info("Built count table '%s' with %d categories x %d samples",
             name, counts.shape[0], counts.shape[1])
    return table


def _check_name_free(bagel, name, overwrite):
    if name in bagel.count_tables and not overwrite:
        raise DuplicateNameError(
            "Table names must be unique",
            "current table names are: " + ", ".join(bagel.count_tables.names),
        )


def build_custom_table(
    bagel,
    variant_annotation,
    name,
    description="",
    data_factor=None,
    annotation_df=None,
    features=None,
    type=None,
    color_variable=None,
    color_mapping=None,
    return_instead=False,
    overwrite=False,
    sample_column="sample",
):
    """
    Build a count table from any column of ``bagel.variants``.

    Parameters
    ----------
    bagel : Bagel
        Session holding the variants and the registry to store the table in.
    variant_annotation : str
        Column of ``bagel.variants`` to count.
    name : str
        Table name; must be unique unless ``overwrite`` is set.
    data_factor : sequence, optional
        Full set of table values, in case some are missing from the data.
    return_instead : bool, default False
        Return the table instead of inserting it into ``bagel.count_tables``.
    overwrite : bool, default False
        Replace an existing table with the same name.

    Returns
    -------
    CountTable or None
        The table when ``return_instead`` is True.
    """
    require_bagel(bagel)
    if not return_instead:
        _check_name_free(bagel, name, overwrite)

    table = build_count_table(
        bagel.variants,
        name,
        variant_annotation,
        partition_key=sample_column,
        levels=data_factor,
        description=description,
        features=features,
        type=type,
        annotation=annotation_df,
        color_variable=color_variable,
        color_mapping=color_mapping,
    )
    if return_instead:
        return table
    bagel.count_tables.insert(table, overwrite=overwrite)
    return None


def classify_variants(records, token_column="motif"):
    """
    Return a categorical of SBS96 identifiers, one per row of ``records``.

    Uses ``token_column`` when present, otherwise derives tokens from the
    ``ref``, ``alt`` and ``context`` columns.
    """
    if token_column in records.columns:
        tokens = records[token_column]
    elif {"ref", "alt", "context"}.issubset(records.columns):
        tokens = [
            mutation_token(ref, alt, context)
            for ref, alt, context in zip(records["ref"], records["alt"], records["context"])
        ]
    else:
        raise UnknownColumnError(
            f"Variants need a '{token_column}' column or 'ref', 'alt' and 'context' columns",
            "existing annotations are: " + ", ".join(map(str, records.columns)),
        )
    return classify_tokens(tokens, SBS96_LEVELS)


def build_standard_table(
    bagel,
    name="SBS96",
    token_column="motif",
    description="Single base substitutions in trinucleotide context",
    return_instead=False,
    overwrite=False,
    sample_column="sample",
):
    """
    Build the 96-class single base substitution table for ``bagel``.

    The matrix always has the 96 rows of ``SBS96_LEVELS``, in that order,
    whether or not every class is observed.
    """
    require_bagel(bagel)
    if not return_instead:
        _check_name_free(bagel, name, overwrite)

    variants = bagel.variants
    _require_columns(variants, [sample_column])
    records = pd.DataFrame(
        {
            sample_column: variants[sample_column].to_numpy(),
            "motif": classify_variants(variants, token_column),
        }
    )

    counts = count_by_sample(records, "motif", partition_key=sample_column, levels=SBS96_LEVELS)
    features = summarize_motifs(counts.sum(axis=1))
    annotation = pd.DataFrame(
        {
            "motif": list(SBS96_LEVELS),
            "mutation": [m[0:3] for m in SBS96_LEVELS],
            "context": [m[4:7] for m in SBS96_LEVELS],
        }
    )

    table = create_count_table(
        name=name,
        count_table=counts,
        features=features,
        type=features["Type"].to_numpy(),
        annotation=annotation,
        color_variable="mutation",
        color_mapping=SBS96_COLORS,
        description=description,
    )
    log.info("Built standard table '%s' from %d variants across %d samples",
             name, int(counts.to_numpy().sum()), counts.shape[1])
    if return_instead:
        return table
    bagel.count_tables.insert(table, overwrite=overwrite)
    return None
