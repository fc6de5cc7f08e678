import logging

import pandas as pd

from .errors import ClassificationError

log = logging.getLogger(__name__)

BASES = ("A", "C", "G", "T")
PYRIMIDINES = ("C", "T")
FORWARD_CHANGE = ("C>A", "C>G", "C>T", "T>A", "T>C", "T>G")

_COMPLEMENT = str.maketrans("ACGTN", "TGCAN")


def sbs96_levels():
    """
    Enumerate the 96 single base substitution classes.

    The order is 5' base (slowest), reference pyrimidine, substitution,
    3' base (fastest), e.g. ``C>A_ACA, C>A_ACC, ..., T>G_TTT``. Identifiers
    have the form ``"<substitution>_<5' base><ref><3' base>"``.

    Returns
    -------
    list of str
        96 distinct identifiers in a fixed order.
    """
    levels = []
    for i in range(96):
        five_prime = BASES[i // 24]
        ref = PYRIMIDINES[(i // 12) % 2]
        three_prime = BASES[i % 4]
        change = FORWARD_CHANGE[(i // 4) % 6]
        levels.append(f"{change}_{five_prime}{ref}{three_prime}")
    return levels


SBS96_LEVELS = tuple(sbs96_levels())
_SBS96_SET = frozenset(SBS96_LEVELS)


def reverse_complement(seq: str) -> str:
    return seq.upper().translate(_COMPLEMENT)[::-1]


def mutation_token(ref: str, alt: str, context: str) -> str:
    """
    Build a ``"C>A_ACA"`` style token from a substitution and its context.

    Purine references are folded onto the pyrimidine strand, so ``G>T`` in
    ``TGT`` becomes ``C>A`` in ``ACA``.
    """
    ref = str(ref).upper()
    alt = str(alt).upper()
    context = str(context).upper()
    if len(ref) != 1 or len(alt) != 1 or len(context) != 3:
        raise ClassificationError(
            "Only single base substitutions with a trinucleotide context can be classified",
            f"ref={ref!r}, alt={alt!r}, context={context!r}",
        )
    if context[1] != ref:
        raise ClassificationError(
            "Reference base does not match the centre of its context",
            f"ref={ref!r}, context={context!r}",
        )
    if ref in ("A", "G"):
        ref = reverse_complement(ref)
        alt = reverse_complement(alt)
        context = reverse_complement(context)
    return f"{ref}>{alt}_{context}"


def _parse_token(token):
    # Substitution code at characters 1-3, context at 5-7.
    if len(token) < 7:
        return None
    return f"{token[0:3]}_{token[4:7]}"


def classify_token(token, levels=SBS96_LEVELS):
    """
    Map one annotated mutation token onto its category identifier.

    The substitution code is read from characters 1-3 and the trinucleotide
    context from characters 5-7; anything after position 7 is ignored.
    """
    token = str(token)
    category = _parse_token(token)
    if category is None:
        raise ClassificationError("Mutation token is too short to classify", repr(token))

    allowed = _SBS96_SET if levels is SBS96_LEVELS else set(levels)
    if category not in allowed:
        raise ClassificationError("Mutation token does not map to a known category", repr(token))
    return category


def classify_tokens(tokens, levels=SBS96_LEVELS) -> pd.Categorical:
    """
    Classify a sequence of tokens into a categorical over ``levels``.

    Missing tokens stay missing. All unknown tokens are reported together.
    """
    levels = list(levels)
    allowed = set(levels)
    categories = []
    bad = []
    for token in tokens:
        if token is None or (not isinstance(token, str) and pd.isna(token)):
            categories.append(None)
            continue
        token = str(token)
        category = _parse_token(token)
        if category is None or category not in allowed:
            bad.append(token)
            continue
        categories.append(category)

    if bad:
        shown = ", ".join(repr(t) for t in bad[:10])
        if len(bad) > 10:
            shown += f", ... ({len(bad)} total)"
        raise ClassificationError("Mutation tokens do not map to a known category", shown)

    log.debug("Classified %d tokens into %d levels", len(categories), len(levels))
    return pd.Categorical(categories, categories=levels)


def summarize_motifs(counts) -> pd.DataFrame:
    """
    Expand motif counts into one row per event.

    Parameters
    ----------
    counts : mapping or pandas.Series
        Motif identifier -> number of events.

    Returns
    -------
    pandas.DataFrame
        Columns ``mutation`` (categorical over the 96 levels), ``Type``
        (substitution, e.g. ``C>A``) and ``Context`` (e.g. ``ACA``).
    """
    counts = pd.Series(counts).astype("int64")
    expanded = counts.index.repeat(counts.to_numpy()).astype(str)
    return pd.DataFrame(
        {
            "mutation": pd.Categorical(expanded, categories=SBS96_LEVELS),
            "Type": [m[0:3] for m in expanded],
            "Context": [m[4:7] for m in expanded],
        }
    )
