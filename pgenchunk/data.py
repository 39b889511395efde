from __future__ import annotations
from pathlib import Path
from logging import Logger
from typing import Iterator, IO
from abc import ABC, abstractmethod

from haptools.logging import getLogger

from .errors import OpenError
from .tile import Tile, read_tile
from .tiling import iter_tiles, DEFAULT_VARIANT_CHUNK, DEFAULT_SAMPLE_CHUNK
from .header import MatrixHeader, read_header
from .metadata import (
    read_id_range,
    count_records,
    VARIANT_ID_FIELD,
    SAMPLE_ID_FIELD,
)


class Data(ABC):
    """
    Abstract class for accessing read-only data files

    Attributes
    ----------
    fname : Path
        The path to the read-only file containing the data
    handle : IO
        The open file, or None if the file has not been opened yet
    log: Logger
        A logging instance for recording debug statements.
    """

    def __init__(self, fname: Path, log: Logger = None):
        self.fname = Path(fname)
        self.handle = None
        self.log = log or getLogger(self.__class__.__name__)
        super().__init__()

    def __repr__(self):
        return str(self.fname)

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()

    @property
    def is_open(self) -> bool:
        return self.handle is not None

    @abstractmethod
    def open(self):
        """
        Open the file and read anything needed to serve later requests

        Raises
        ------
        AssertionError
            If the file is already open
        OpenError
            If the file cannot be opened
        """
        if self.is_open:
            raise AssertionError(f"{self.fname} has already been opened.")

    def _open(self, mode: str) -> IO:
        self.log.debug(f"Opening {self.fname}")
        try:
            self.handle = open(self.fname, mode)
        except OSError as err:
            raise OpenError(f"Failed to open {self.fname}: {err.strerror}") from err
        return self.handle

    def close(self):
        """
        Close the file. It is safe to call this more than once.
        """
        if self.is_open:
            self.handle.close()
            self.handle = None

    def _check_open(self):
        if not self.is_open:
            raise AssertionError(f"{self.fname} must be opened before it can be read.")


class Genotypes(Data):
    """
    A genotype matrix stored in a PGEN file

    Attributes
    ----------
    header : MatrixHeader
        The header of the file, once it has been opened

    Examples
    --------
    >>> with Genotypes('tests/data/simple.pgen') as gts:
    ...     tile = gts.read(0, 4, 0, 2)
    """

    def __init__(self, fname: Path, log: Logger = None):
        super().__init__(fname, log)
        self.header = None

    def open(self):
        """
        Open the PGEN file and parse its header

        Raises
        ------
        FormatError
            If the header is invalid. The file is closed before this is raised.
        """
        super().open()
        self._open("rb")
        try:
            self.header = read_header(self.handle)
        except Exception:
            self.close()
            raise
        self.log.debug(
            "Found {} variants and {} samples in {} bytes".format(
                self.header.variant_count,
                self.header.sample_count,
                self.header.file_size,
            )
        )

    def read(
        self, start_variant: int, end_variant: int, start_sample: int, end_sample: int
    ) -> Tile:
        """
        Read a tile of genotypes

        See :py:func:`~.tile.read_tile` for details
        """
        self._check_open()
        return read_tile(
            self.handle,
            self.header,
            start_variant,
            end_variant,
            start_sample,
            end_sample,
            log=self.log,
        )


class Records(Data):
    """
    Abstract class for the records in a tab-delimited sidecar file

    Attributes
    ----------
    count : int
        The number of records that the file should contain
    field : int
        The 0-based column of each line that holds the record ID
    """

    field: int
    suffix: str

    def __init__(self, fname: Path, count: int, log: Logger = None):
        super().__init__(fname, log)
        self.count = count

    def open(self):
        super().open()
        self._open("r")

    def read(self, start: int, end: int) -> list[str]:
        """
        Read the IDs of records [start, end)

        See :py:func:`~.metadata.read_id_range` for details
        """
        self._check_open()
        self.log.debug(f"Reading IDs of records [{start}, {end}) from {self.fname}")
        return read_id_range(self.handle, start, end, self.count, self.field)

    def count_records(self) -> int:
        """
        Count the records actually present in the file
        """
        self._check_open()
        return count_records(self.handle)


class Variants(Records):
    field = VARIANT_ID_FIELD
    suffix = ".pvar"


class Samples(Records):
    field = SAMPLE_ID_FIELD
    suffix = ".psam"


class PGEN:
    """
    A PLINK2 fileset: a PGEN genotype matrix with its .pvar and .psam files

    A PGEN object is not safe to share between threads, since every request moves
    the position of the underlying files. Open one PGEN object per worker, instead.

    Attributes
    ----------
    genotypes : Genotypes
        The genotype matrix
    variants : Variants
        The variant IDs
    samples : Samples
        The sample IDs
    log: Logger
        A logging instance for recording debug statements.

    Examples
    --------
    >>> with PGEN('tests/data/simple.pgen') as pgen:
    ...     tile = pgen.read_tile(0, pgen.variant_count, 0, pgen.sample_count)
    ...     samples = pgen.read_sample_ids(0, pgen.sample_count)
    """

    def __init__(
        self, pgen: Path, pvar: Path = None, psam: Path = None, log: Logger = None
    ):
        """
        Set up (but do not yet open) a PLINK2 fileset

        Parameters
        ----------
        pgen : Path
            The path to the PGEN file
        pvar : Path, optional
            The path to the .pvar file. Defaults to the PGEN path with a .pvar suffix.
        psam : Path, optional
            The path to the .psam file. Defaults to the PGEN path with a .psam suffix.
        log : Logger, optional
            A logging instance for recording debug statements
        """
        self.log = log or getLogger(self.__class__.__name__)
        pgen = Path(pgen)
        self.genotypes = Genotypes(pgen, log=self.log)
        self.variants = Variants(
            pvar or pgen.with_suffix(Variants.suffix), count=None, log=self.log
        )
        self.samples = Samples(
            psam or pgen.with_suffix(Samples.suffix), count=None, log=self.log
        )

    @classmethod
    def from_prefix(cls, prefix: Path, log: Logger = None) -> PGEN:
        """
        Set up a PLINK2 fileset from the path shared by its three files

        Parameters
        ----------
        prefix : Path
            The path to the files, without the .pgen, .pvar, or .psam suffix

        Returns
        -------
        PGEN
            An unopened PGEN object
        """
        prefix = str(prefix)
        return cls(
            Path(prefix + ".pgen"),
            Path(prefix + Variants.suffix),
            Path(prefix + Samples.suffix),
            log=log,
        )

    def __repr__(self):
        return repr(self.genotypes)

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()

    def open(self):
        """
        Open all three files and parse the PGEN header

        If any file cannot be opened or the header is invalid, every file that was
        opened is closed again before the error is raised.

        Raises
        ------
        OpenError
            If any of the files cannot be opened
        FormatError
            If the PGEN header is invalid
        """
        if self.genotypes.is_open:
            raise AssertionError(f"{self} has already been opened.")
        try:
            self.genotypes.open()
            self.variants.count = self.genotypes.header.variant_count
            self.samples.count = self.genotypes.header.sample_count
            self.variants.open()
            self.samples.open()
        except Exception:
            self.close()
            raise

    def close(self):
        for data in (self.genotypes, self.variants, self.samples):
            data.close()

    @property
    def header(self) -> MatrixHeader:
        self.genotypes._check_open()
        return self.genotypes.header

    @property
    def variant_count(self) -> int:
        return self.header.variant_count

    @property
    def sample_count(self) -> int:
        return self.header.sample_count

    @property
    def file_size(self) -> int:
        return self.header.file_size

    def read_tile(
        self, start_variant: int, end_variant: int, start_sample: int, end_sample: int
    ) -> Tile:
        """
        Read the genotypes of variants [start_variant, end_variant) in samples
        [start_sample, end_sample)

        Returns
        -------
        Tile
            A tile with an n (samples) x p (variants) array, where -1 is missing

        Raises
        ------
        OutOfBoundsError
            If either range does not fit within the matrix
        ShortReadError
            If the PGEN file ends before the tile does
        """
        return self.genotypes.read(start_variant, end_variant, start_sample, end_sample)

    def read_variant_ids(self, start: int, end: int) -> list[str]:
        return self.variants.read(start, end)

    def read_sample_ids(self, start: int, end: int) -> list[str]:
        return self.samples.read(start, end)

    def walk(
        self,
        variant_chunk: int = DEFAULT_VARIANT_CHUNK,
        sample_chunk: int = DEFAULT_SAMPLE_CHUNK,
    ) -> Iterator[Tile]:
        """
        Read the entire matrix, one tile at a time

        Parameters
        ----------
        variant_chunk : int, optional
            The maximum number of variants in each tile
        sample_chunk : int, optional
            The maximum number of samples in each tile

        Yields
        ------
        Tile
            Each tile, with variant chunks in the outer loop
        """
        for bounds in iter_tiles(
            self.variant_count, self.sample_count, variant_chunk, sample_chunk
        ):
            yield self.read_tile(*bounds)
