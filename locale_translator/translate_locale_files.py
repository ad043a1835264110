import argparse
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from tqdm import tqdm

from locale_translator.app_config import AppConfig, load_app_config
from locale_translator.reference_loader import load_global_mapping, load_scoped_mapping
from locale_translator.resolver import EntryResolver, MappingProvider
from locale_translator.transcoder import transcode_file

logger = logging.getLogger(__name__)


class SetupError(Exception):
    """Raised when the source or target root is unusable. No file has been touched."""


class FileProcessingError(Exception):
    """Raised when a source file could not be translated. Aborts the run."""

    def __init__(self, source_path: str, cause: Exception):
        super().__init__(f"Error processing file {source_path}: {cause}")
        self.source_path = source_path
        self.cause = cause


def prepare_directories(source_directory: str, target_directory: str) -> None:
    """
    Check the source root exists and create the target root if needed.

    Args:
        source_directory (str): Directory holding the source-locale CSV files.
        target_directory (str): Directory receiving the translated files.

    Raises:
        SetupError: If the source root is missing or the target root cannot be created.
    """
    if not os.path.isdir(source_directory):
        raise SetupError(f"The source directory '{source_directory}' does not exist.")

    if not os.path.isdir(target_directory):
        try:
            os.makedirs(target_directory, exist_ok=True)
        except OSError as os_exc:
            raise SetupError(f"Unable to create the target directory '{target_directory}': {os_exc}") from os_exc
        logger.info("Created target directory: %s", target_directory)


def discover_source_files(source_directory: str, file_pattern: str = '*.csv') -> List[str]:
    """Return the source files matching ``file_pattern``, relative to the source root and sorted."""
    source_root = Path(source_directory)
    return sorted(
        path.relative_to(source_root).as_posix()
        for path in source_root.glob(file_pattern)
        if path.is_file()
    )


def translate_file(source_path: str, target_path: str, resolver: EntryResolver, on_row_error: str) -> int:
    """Translate one source file into ``target_path``, creating parent directories as needed."""
    target_dir = os.path.dirname(target_path)
    if target_dir:
        os.makedirs(target_dir, exist_ok=True)

    with open(source_path, 'r', encoding='utf-8', newline='') as source_stream, \
            open(target_path, 'w', encoding='utf-8', newline='') as target_stream:
        return transcode_file(source_stream, target_stream, resolver.resolve, on_row_error)


def translate_locale(config: AppConfig) -> int:
    """
    Translate every source file that has no counterpart in the target root yet.

    The global reference translations are loaded once, the file reference
    translations once per source file. Files whose target already exists are
    skipped untouched. The first file that fails stops the run; files already
    written stay on disk.

    Args:
        config (AppConfig): The loaded application configuration.

    Returns:
        int: The number of files translated.

    Raises:
        SetupError: If the directories are unusable.
        FileProcessingError: If a file could not be translated.
    """
    prepare_directories(config.source_directory, config.target_directory)

    global_provider = MappingProvider(
        'global reference',
        load_global_mapping(config.locale, config.global_reference_url, config.reference_timeout)
    )
    scoped_provider = MappingProvider('file reference')
    resolver = EntryResolver(
        [global_provider, scoped_provider],
        lambda content: config.translation_client.translate(content, config.locale)
    )

    source_files = discover_source_files(config.source_directory, config.file_pattern)
    logger.info("Found %d source file(s) in '%s'.", len(source_files), config.source_directory)

    translated_files_count = 0
    for relative_path in tqdm(source_files, desc=f"Translating to {config.locale}", unit="file"):
        source_path = os.path.join(config.source_directory, relative_path)
        target_path = os.path.join(config.target_directory, relative_path)

        if os.path.exists(target_path):
            logger.info("Skipping existing file: %s", target_path)
            continue

        logger.info("Translating CSV file: %s", source_path)
        scoped_provider.replace(load_scoped_mapping(
            config.locale,
            os.path.basename(source_path),
            config.scoped_reference_url,
            config.reference_timeout
        ))
        try:
            translate_file(source_path, target_path, resolver, config.on_row_error)
        except Exception as file_exc:
            raise FileProcessingError(source_path, file_exc) from file_exc
        translated_files_count += 1

    logger.info("Translation process completed. %d file(s) translated.", translated_files_count)
    return translated_files_count


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description='Translate CSV locale files line by line from en_US to a target locale.'
    )
    parser.add_argument('locale', help='The target locale code (e.g., it_IT)')
    parser.add_argument('api_key', nargs='?', metavar='api-key',
                        help='API key for the translation endpoint (defaults to GROQ_API_KEY)')
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """
    Command line entry point.

    Returns:
        int: 0 on success, 1 on any setup or file failure.
    """
    args = parse_args(argv)
    config = load_app_config(args.locale, args.api_key)

    try:
        translate_locale(config)
    except SetupError as setup_exc:
        logger.error("Error: %s", setup_exc)
        return 1
    except FileProcessingError as file_exc:
        logger.error("%s", file_exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
