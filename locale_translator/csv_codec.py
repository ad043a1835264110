import csv
import io
from typing import Iterator, List, TextIO

Row = List[str]


def parse_rows(stream: TextIO) -> Iterator[Row]:
    """
    Lazily parse quoted CSV records from an open text stream.

    Quoted fields may contain commas, doubled quotes and line breaks. A blank
    line yields an empty row so callers can keep the line structure. The
    stream should be opened with ``newline=''`` so line breaks inside quoted
    fields survive untouched.

    Args:
        stream: An open, readable text stream.

    Yields:
        Row: The fields of each record, in order.
    """
    yield from csv.reader(stream)


def parse_text(text: str) -> Iterator[Row]:
    """Parse quoted CSV records from an in-memory document."""
    return parse_rows(io.StringIO(text, newline=''))


def serialize_row(row: Row) -> str:
    """
    Serialize a row with every field quoted.

    Literal double quotes inside a field are doubled, fields are joined with
    commas and the record ends with a single ``\\n``.

    Args:
        row: The fields to serialize.

    Returns:
        str: The serialized record, including its line terminator.
    """
    quoted_fields = ['"' + field.replace('"', '""') + '"' for field in row]
    return ','.join(quoted_fields) + '\n'
