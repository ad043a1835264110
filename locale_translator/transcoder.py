import logging
from typing import Callable, TextIO

from locale_translator.csv_codec import parse_rows, serialize_row

logger = logging.getLogger(__name__)

ROW_ERROR_ABORT = 'abort'
ROW_ERROR_SKIP = 'skip'
ROW_ERROR_POLICIES = (ROW_ERROR_ABORT, ROW_ERROR_SKIP)

PROGRESS_INTERVAL = 10


class RowTranslationError(Exception):
    """Raised when resolving a row fails and the policy is to abort the file."""

    def __init__(self, identifier: str, row_number: int, cause: Exception):
        super().__init__(f"Error processing row {row_number} ('{identifier}'): {cause}")
        self.identifier = identifier
        self.row_number = row_number
        self.cause = cause


def transcode_file(
        source_stream: TextIO,
        target_stream: TextIO,
        resolve_fn: Callable[[str, str], str],
        row_error_policy: str = ROW_ERROR_ABORT
) -> int:
    """
    Translate every row of a source stream into the target stream.

    Rows with at least two fields get their second field replaced by
    ``resolve_fn(identifier, content)``; all rows are written back with every
    field quoted. Rows already written stay in the target stream when an
    error aborts the file.

    Args:
        source_stream: Readable stream of the source CSV.
        target_stream: Writable stream for the translated CSV.
        resolve_fn: Callable returning the translated content of an entry.
        row_error_policy: ``abort`` to stop at the first failing row,
            ``skip`` to log it and write the row untranslated.

    Returns:
        int: The number of rows written.

    Raises:
        RowTranslationError: If a row fails under the ``abort`` policy.
    """
    if row_error_policy not in ROW_ERROR_POLICIES:
        raise ValueError(f"Unknown row error policy '{row_error_policy}'")

    row_count = 0
    for row in parse_rows(source_stream):
        if len(row) >= 2:
            identifier = row[0]
            try:
                translated = resolve_fn(identifier, row[1])
            except Exception as row_exc:
                logger.error("Error processing row '%s': %s", identifier, row_exc)
                if row_error_policy == ROW_ERROR_ABORT:
                    raise RowTranslationError(identifier, row_count + 1, row_exc) from row_exc
                logger.warning("Writing row '%s' untranslated.", identifier)
            else:
                row = [identifier, translated] + row[2:]

        target_stream.write(serialize_row(row))
        row_count += 1

        if row_count % PROGRESS_INTERVAL == 0:
            logger.info("Processed %d rows", row_count)

    logger.info("Processed a total of %d rows", row_count)
    return row_count
