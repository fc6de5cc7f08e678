import logging
import os

import pandas as pd
from sklearn.decomposition import NMF

from .errors import InvalidShapeError
from .registry import extract_count_matrix

log = logging.getLogger(__name__)


def run_nmf_decomposition(bagel, table_name, n_components=3, random_state=42, max_iter=1000):
    """
    Run NMF decomposition on one count table of a Bagel.

    Args:
        bagel (Bagel): Session holding the count table
        table_name (str): Name of the count table to decompose
        n_components (int): Number of signatures
        random_state (int): Random state for reproducibility
        max_iter (int): Maximum number of NMF iterations

    Returns:
        tuple: ``(signatures, exposures)`` where ``signatures`` is
        signatures x categories and ``exposures`` is samples x signatures.
    """
    counts_df = extract_count_matrix(bagel, table_name)

    if counts_df.empty or counts_df.to_numpy().sum() == 0:
        raise InvalidShapeError(f"Count table '{table_name}' is empty")

    log.info("Running NMF on '%s' (%d categories x %d samples) with %d components",
             table_name, counts_df.shape[0], counts_df.shape[1], n_components)

    # Samples are observations, categories are features.
    X = counts_df.T.to_numpy(dtype=float)

    nmf = NMF(n_components=n_components, random_state=random_state, max_iter=max_iter)
    W = nmf.fit_transform(X)  # Sample exposures
    H = nmf.components_  # Signature profiles

    signature_names = [f'Signature_{i + 1}' for i in range(n_components)]
    signatures_df = pd.DataFrame(H, columns=counts_df.index, index=signature_names)
    exposures_df = pd.DataFrame(W, index=counts_df.columns, columns=signature_names)

    log.info("Reconstruction error: %.6f", nmf.reconstruction_err_)
    return signatures_df, exposures_df


def save_nmf_results(signatures_df, exposures_df, output_dir):
    os.makedirs(output_dir, exist_ok=True)
    signatures_df.to_csv(os.path.join(output_dir, 'signatures.tsv'), sep='\t')
    exposures_df.to_csv(os.path.join(output_dir, 'exposures.tsv'), sep='\t')
