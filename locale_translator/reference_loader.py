"""Fetches the reference translation datasets used before any AI call."""
import logging
from typing import Dict, Optional

import requests

from locale_translator.csv_codec import parse_text

logger = logging.getLogger(__name__)

DEFAULT_GLOBAL_REFERENCE_URL = (
    'https://raw.githubusercontent.com/magento-l10n/language-{locale}/master/{locale}.csv'
)
DEFAULT_SCOPED_REFERENCE_URL = (
    'https://raw.githubusercontent.com/luigifab/openmage-translations/main/locales/{locale}/{filename}'
)
DEFAULT_REFERENCE_TIMEOUT = 30.0


def parse_reference_document(content: str) -> Dict[str, str]:
    """
    Build an identifier -> translation mapping from a reference CSV document.

    Records with fewer than two fields are skipped. When an identifier appears
    more than once the last record wins.

    Args:
        content (str): The raw CSV document.

    Returns:
        Dict[str, str]: The reference translations.
    """
    translations: Dict[str, str] = {}
    for row in parse_text(content):
        if len(row) >= 2:
            translations[row[0]] = row[1]
    return translations


def fetch_reference_document(url: str, timeout: float = DEFAULT_REFERENCE_TIMEOUT) -> Optional[str]:
    """
    Download a reference document.

    Returns:
        Optional[str]: The document body, or None if it could not be fetched.
    """
    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as request_exc:
        logger.error("Failed to fetch reference translations from '%s': %s", url, request_exc)
        return None
    # Reference datasets are UTF-8 regardless of the served charset
    try:
        return response.content.decode('utf-8-sig')
    except UnicodeDecodeError as decode_exc:
        logger.warning(
            "Reference translations from '%s' are not valid UTF-8 (%s). Undecodable bytes were replaced.",
            url, decode_exc
        )
        return response.content.decode('utf-8-sig', errors='replace')


def load_global_mapping(
        locale: str,
        url_template: str = DEFAULT_GLOBAL_REFERENCE_URL,
        timeout: float = DEFAULT_REFERENCE_TIMEOUT
) -> Dict[str, str]:
    """
    Load the locale-wide reference translations.

    A failed download is not fatal: the run continues with an empty mapping.

    Args:
        locale (str): The target locale code (e.g., "it_IT").
        url_template (str): URL template containing ``{locale}``.
        timeout (float): Request timeout in seconds.

    Returns:
        Dict[str, str]: Identifier -> translation.
    """
    url = url_template.replace('{locale}', locale)
    logger.info("Loading global reference translations from: %s", url)

    content = fetch_reference_document(url, timeout)
    if content is None:
        logger.error("Failed to load global reference translations. Proceeding without them.")
        return {}

    translations = parse_reference_document(content)
    logger.info("Loaded %d global reference translations.", len(translations))
    return translations


def load_scoped_mapping(
        locale: str,
        file_name: str,
        url_template: str = DEFAULT_SCOPED_REFERENCE_URL,
        timeout: float = DEFAULT_REFERENCE_TIMEOUT
) -> Dict[str, str]:
    """
    Load the reference translations for a single source file.

    The caller replaces its previous per-file mapping with the result, so a
    failed download yields an empty mapping rather than stale entries.

    Args:
        locale (str): The target locale code.
        file_name (str): Base name of the source file being processed.
        url_template (str): URL template containing ``{locale}`` and ``{filename}``.
        timeout (float): Request timeout in seconds.

    Returns:
        Dict[str, str]: Identifier -> translation.
    """
    url = url_template.replace('{locale}', locale).replace('{filename}', file_name)
    logger.info("Loading file reference translations from: %s", url)

    content = fetch_reference_document(url, timeout)
    if content is None:
        logger.error("Failed to load reference translations for %s. Proceeding without them.", file_name)
        return {}

    translations = parse_reference_document(content)
    logger.info("Loaded %d reference translations for %s.", len(translations), file_name)
    return translations
