class PgenError(Exception):
    """
    Base class for every error raised while reading a PGEN fileset
    """


class FormatError(PgenError, ValueError):
    """
    The binary header does not describe a matrix that we know how to decode
    """


class BadMagicError(FormatError):
    """
    The first two bytes of the file are not the PGEN signature
    """


class UnsupportedStorageModeError(FormatError):
    """
    The storage mode byte names a mode other than fixed-width, biallelic, unphased
    """


class OutOfBoundsError(PgenError, IndexError):
    """
    A requested range does not fit within the dimensions of the matrix
    """


class PgenIOError(PgenError, OSError):
    """
    A file could not be opened or did not contain as many bytes as expected
    """


class OpenError(PgenIOError):
    pass


class ShortReadError(PgenIOError):
    pass
