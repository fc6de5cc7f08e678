import logging
import os

import click

from .count_table import create_count_table
from .errors import BagelError
from .matrix_builder import build_custom_table, build_standard_table
from .nmf import run_nmf_decomposition, save_nmf_results
from .registry import Bagel, extract_count_matrix
from .variants import load_counts_matrix, load_variants, save_counts_matrix


@click.group()
@click.option('-v', '--verbose', is_flag=True, help='Log progress to stderr')
def cli(verbose):
    """Count tables for mutational signature analysis."""
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )


@cli.command()
@click.option('--variants', 'variants_path', required=True, help='Variant table (TSV or CSV)')
@click.option('--out-matrix', required=True, help='Output counts matrix file')
@click.option('--mode', default='sbs96', type=click.Choice(['sbs96', 'custom']),
              help='Table type to build')
@click.option('--column', default=None,
              help="Column to count (custom mode) or token column (sbs96 mode, default 'motif')")
@click.option('--levels', default=None,
              help='Comma separated full set of categories for custom tables')
@click.option('--sample-column', default='sample', help='Column holding sample identifiers')
@click.option('--name', default=None, help="Table name (default: 'SBS96' or the column name)")
def build(variants_path, out_matrix, mode, column, levels, sample_column, name):
    """Build a count table from a variant table and save its matrix."""

    if not os.path.exists(variants_path):
        raise click.ClickException(f"Variant table does not exist: {variants_path}")

    click.echo(f"Loading variants from: {variants_path}")
    click.echo(f"Using mode: {mode}")

    try:
        bagel = Bagel(variants=load_variants(variants_path, sample_column=sample_column))
        if mode == 'sbs96':
            name = name or 'SBS96'
            build_standard_table(bagel, name=name, token_column=column or 'motif',
                                 sample_column=sample_column)
        else:
            if column is None:
                raise click.ClickException("--column is required in custom mode")
            name = name or column
            data_factor = [lvl.strip() for lvl in levels.split(',')] if levels else None
            build_custom_table(bagel, column, name, data_factor=data_factor,
                               sample_column=sample_column)
        counts_df = extract_count_matrix(bagel, name)
    except BagelError as e:
        raise click.ClickException(str(e))

    save_counts_matrix(counts_df, out_matrix)
    click.echo(f"Counts matrix saved to: {out_matrix}")
    click.echo(f"Matrix shape: {counts_df.shape}")
    click.echo(f"Mutation types: {len(counts_df.index)}")


@cli.command()
@click.option('--matrix', required=True, help='Input counts matrix file')
@click.option('--outdir', required=True, help='Output directory for NMF results')
@click.option('--components', default=3, help='Number of components for NMF')
def nmf(matrix, outdir, components):
    """Run NMF decomposition on a counts matrix."""

    if not os.path.exists(matrix):
        raise click.ClickException(f"Counts matrix file does not exist: {matrix}")

    click.echo(f"Running NMF decomposition on: {matrix}")
    click.echo(f"Output directory: {outdir}")
    click.echo(f"Number of components: {components}")

    name = os.path.splitext(os.path.basename(matrix))[0]
    try:
        bagel = Bagel()
        bagel.count_tables.insert(create_count_table(name, load_counts_matrix(matrix)))
        signatures_df, exposures_df = run_nmf_decomposition(bagel, name, n_components=components)
    except BagelError as e:
        raise click.ClickException(str(e))

    save_nmf_results(signatures_df, exposures_df, outdir)
    click.echo("NMF analysis completed successfully.")


if __name__ == '__main__':
    cli()
