from .data import PGEN, Genotypes, Variants, Samples
from .header import MatrixHeader, read_header
from .tile import Tile, GenotypeCode, read_tile, decode_genotypes
from .metadata import read_id_range, count_records
from .tiling import TileBounds, iter_tiles
from .errors import (
    PgenError,
    FormatError,
    BadMagicError,
    UnsupportedStorageModeError,
    OutOfBoundsError,
    PgenIOError,
    OpenError,
    ShortReadError,
)
