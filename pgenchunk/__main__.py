#!/usr/bin/env python

import click
from pathlib import Path
from typing import Tuple
from contextlib import contextmanager


CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])
VERBOSITY_LEVELS = ["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "NOTSET"]


def _parse_range(ctx, param, value: str) -> Tuple[int, int]:
    """
    Parse a half-open START:END range, where either side may be omitted

    An omitted START is 0 and an omitted END is None, meaning "through the last one"
    """
    if value is None:
        return (0, None)
    start, sep, end = value.partition(":")
    try:
        start = int(start) if start else 0
        end = int(end) if end else None
    except ValueError:
        raise click.BadParameter(f"'{value}' is not of the form START:END")
    if not sep:
        raise click.BadParameter(f"'{value}' is not of the form START:END")
    return (start, end)


@contextmanager
def _open_pgen(genotypes: Path, log):
    """
    Open a PGEN fileset for the duration of a command

    Errors from the fileset are reported to the user as a ClickException
    """
    from .data import PGEN
    from .errors import PgenError

    pgen = PGEN(genotypes, log=log)
    try:
        pgen.open()
        yield pgen
    except PgenError as err:
        raise click.ClickException(str(err))
    finally:
        pgen.close()


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option()
def main():
    """
    pgenchunk: Chunked, random-access reading of PLINK2 PGEN files

    Only the fixed-width, biallelic, unphased storage mode is supported. The .pvar and
    .psam files must sit beside the .pgen file.
    """
    pass


@main.command(context_settings=CONTEXT_SETTINGS)
@click.argument("genotypes", type=click.Path(exists=True, path_type=Path))
@click.option(
    "-v",
    "--verbosity",
    type=click.Choice(VERBOSITY_LEVELS),
    default="INFO",
    show_default=True,
    help="The level of verbosity desired",
)
def info(genotypes: Path, verbosity: str = "INFO"):
    """
    Summarize the dimensions of a PGEN file

    Ex: pgenchunk info tests/data/simple.pgen
    """
    from haptools import logging

    log = logging.getLogger(name="pgenchunk.info", level=verbosity)

    with _open_pgen(genotypes, log) as pgen:
        log.info(f"Read header from {pgen}")
        click.echo(f"Variant count\t{pgen.variant_count}")
        click.echo(f"Sample count\t{pgen.sample_count}")
        click.echo(f"File size\t{pgen.file_size}")
        for records in (pgen.variants, pgen.samples):
            found = records.count_records()
            if found != records.count:
                log.warning(
                    f"{records} has {found} records but the PGEN header expects"
                    f" {records.count}"
                )


@main.command(context_settings=CONTEXT_SETTINGS)
@click.argument("genotypes", type=click.Path(exists=True, path_type=Path))
@click.option(
    "-V",
    "--variants",
    "variant_range",
    type=str,
    default=None,
    callback=_parse_range,
    show_default="all variants",
    help="A half-open range of variant indices to read (ex: '0:32')",
)
@click.option(
    "-S",
    "--samples",
    "sample_range",
    type=str,
    default=None,
    callback=_parse_range,
    show_default="all samples",
    help="A half-open range of sample indices to read (ex: '64:128')",
)
@click.option(
    "-o",
    "--output",
    type=click.Path(path_type=Path, allow_dash=True),
    default="-",
    show_default="stdout",
    help="A TSV file with one row per sample and one column per variant",
)
@click.option(
    "-v",
    "--verbosity",
    type=click.Choice(VERBOSITY_LEVELS),
    default="INFO",
    show_default=True,
    help="The level of verbosity desired",
)
def tile(
    genotypes: Path,
    variant_range: Tuple[int, int] = (0, None),
    sample_range: Tuple[int, int] = (0, None),
    output: Path = Path("-"),
    verbosity: str = "INFO",
):
    """
    Extract a tile of genotypes as a TSV

    Missing genotypes are written as '.'

    Ex: pgenchunk tile -V 0:2 -S 0:2 tests/data/simple.pgen
    """
    from haptools import logging
    from .tile import GenotypeCode

    log = logging.getLogger(name="pgenchunk.tile", level=verbosity)

    with _open_pgen(genotypes, log) as pgen:
        start_variant, end_variant = variant_range
        start_sample, end_sample = sample_range
        if end_variant is None:
            end_variant = pgen.variant_count
        if end_sample is None:
            end_sample = pgen.sample_count
        gts = pgen.read_tile(start_variant, end_variant, start_sample, end_sample)
        variant_ids = pgen.read_variant_ids(start_variant, end_variant)
        sample_ids = pgen.read_sample_ids(start_sample, end_sample)
        log.info("Read a tile with {} samples and {} variants".format(*gts.shape))

    with click.open_file(str(output), "w") as out:
        out.write("\t".join(["sample"] + variant_ids) + "\n")
        for sample_id, row in zip(sample_ids, gts.data):
            calls = (
                "." if gt == GenotypeCode.MISSING else str(gt) for gt in row.tolist()
            )
            out.write("\t".join([sample_id, *calls]) + "\n")


@main.command(context_settings=CONTEXT_SETTINGS)
@click.argument("genotypes", type=click.Path(exists=True, path_type=Path))
@click.option(
    "--variant-chunk",
    type=click.IntRange(min=1),
    default=32,
    show_default=True,
    help="The number of variants in each tile",
)
@click.option(
    "--sample-chunk",
    type=click.IntRange(min=1),
    default=64,
    show_default=True,
    help="The number of samples in each tile",
)
@click.option(
    "-v",
    "--verbosity",
    type=click.Choice(VERBOSITY_LEVELS),
    default="INFO",
    show_default=True,
    help="The level of verbosity desired",
)
def walk(
    genotypes: Path,
    variant_chunk: int = 32,
    sample_chunk: int = 64,
    verbosity: str = "INFO",
):
    """
    Read an entire PGEN file, one tile at a time

    Outputs the number of tiles, genotypes, and missing genotypes that were read

    Ex: pgenchunk walk --variant-chunk 2 --sample-chunk 1 tests/data/simple.pgen
    """
    from haptools import logging

    log = logging.getLogger(name="pgenchunk.walk", level=verbosity)

    num_tiles = num_gts = num_missing = 0
    with _open_pgen(genotypes, log) as pgen:
        log.info(
            f"Walking {pgen.variant_count} variants and {pgen.sample_count} samples in"
            f" tiles of {variant_chunk} x {sample_chunk}"
        )
        for gts in pgen.walk(variant_chunk, sample_chunk):
            num_tiles += 1
            num_gts += gts.data.size
            num_missing += gts.num_missing
            log.debug(
                f"Tile {num_tiles}: variants [{gts.start_variant}, {gts.end_variant})"
                f" x samples [{gts.start_sample}, {gts.end_sample})"
            )

    click.echo(f"Tiles\t{num_tiles}")
    click.echo(f"Genotypes\t{num_gts}")
    click.echo(f"Missing\t{num_missing}")


@main.command(context_settings=CONTEXT_SETTINGS)
@click.argument("genotypes", type=click.Path(exists=True, path_type=Path))
@click.argument("axis", type=click.Choice(["variants", "samples"]))
@click.option(
    "-r",
    "--range",
    "id_range",
    type=str,
    default=None,
    callback=_parse_range,
    show_default="all records",
    help="A half-open range of record indices to read (ex: '10:20')",
)
@click.option(
    "-v",
    "--verbosity",
    type=click.Choice(VERBOSITY_LEVELS),
    default="INFO",
    show_default=True,
    help="The level of verbosity desired",
)
def ids(
    genotypes: Path,
    axis: str,
    id_range: Tuple[int, int] = (0, None),
    verbosity: str = "INFO",
):
    """
    Output the IDs of a range of variants or samples, one per line

    Ex: pgenchunk ids -r 1:3 tests/data/simple.pgen variants
    """
    from haptools import logging

    log = logging.getLogger(name="pgenchunk.ids", level=verbosity)

    with _open_pgen(genotypes, log) as pgen:
        records = pgen.variants if axis == "variants" else pgen.samples
        start, end = id_range
        if end is None:
            end = records.count
        record_ids = records.read(start, end)

    for record_id in record_ids:
        click.echo(record_id)


if __name__ == "__main__":
    # run the CLI if someone tries 'python -m pgenchunk' on the command line
    main(prog_name="pgenchunk")
