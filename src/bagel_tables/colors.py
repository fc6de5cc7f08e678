import seaborn as sns

# Conventional colors for the six pyrimidine substitution classes.
SBS96_COLORS = {
    "C>A": "#5ABCEB",
    "C>G": "#050708",
    "C>T": "#D33C32",
    "T>A": "#CBCACB",
    "T>C": "#ABCD72",
    "T>G": "#E7C9C6",
}


def hue_palette(keys):
    """
    Assign evenly spaced hues (constant lightness and saturation) to ``keys``.

    Returns a dict of key -> hex color in the order the keys were given.
    """
    keys = list(keys)
    if not keys:
        return {}
    colors = sns.husl_palette(len(keys), h=15 / 360, s=0.9, l=0.65).as_hex()
    return dict(zip(keys, colors))
