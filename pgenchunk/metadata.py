from __future__ import annotations
from typing import TextIO
from itertools import islice

from .layout import check_range
from .errors import ShortReadError


# the column of the .pvar file that holds the variant ID
VARIANT_ID_FIELD = 1
# the column of the .psam file that holds the sample ID
SAMPLE_ID_FIELD = 0


def read_id_range(
    stream: TextIO, start: int, end: int, count: int, field: int
) -> list[str]:
    """
    Read the IDs of records [start, end) from a tab-delimited .pvar or .psam file

    The stream is rewound to the top of the file on every call, so calls may be
    issued in any order. The header line is skipped and does not count as a record.

    A line with fewer than field+1 columns yields an empty string instead of an
    error, so that a single malformed line doesn't prevent reading the rest of the
    range.

    Parameters
    ----------
    stream : TextIO
        A seekable text stream
    start : int
        The index of the first record to read
    end : int
        One past the index of the last record to read
    count : int
        The number of records the file is expected to contain
    field : int
        The 0-based column containing the ID

    Returns
    -------
    list[str]
        The IDs, in the order they appear in the file

    Raises
    ------
    OutOfBoundsError
        If [start, end) does not fit within count records
    ShortReadError
        If the file ends before the last requested record
    """
    check_range(start, end, count)
    stream.seek(0)
    # skip the header
    stream.readline()
    ids = []
    for line in islice(stream, start, end):
        # only split as far as the ID, since later columns can be very long
        row = line.rstrip("\r\n").split("\t", field + 1)
        ids.append(row[field] if len(row) > field else "")
    if len(ids) < end - start:
        raise ShortReadError(
            f"Expected {end - start} records starting at record {start} but the file"
            f" ended after {len(ids)}"
        )
    return ids


def count_records(stream: TextIO) -> int:
    """
    Count the number of records (lines after the header) in a .pvar or .psam file
    """
    stream.seek(0)
    if not stream.readline():
        return 0
    return sum(1 for _ in stream)
