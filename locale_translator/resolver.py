import logging
from typing import Callable, Dict, List, Optional, Sequence

logger = logging.getLogger(__name__)


class MappingProvider:
    """A named lookup source backed by an identifier -> translation mapping."""

    def __init__(self, name: str, translations: Optional[Dict[str, str]] = None):
        self.name = name
        self.translations: Dict[str, str] = translations if translations is not None else {}

    def lookup(self, identifier: str) -> Optional[str]:
        return self.translations.get(identifier)

    def replace(self, translations: Dict[str, str]) -> None:
        """Swap in a new mapping, discarding every previous entry."""
        self.translations = translations

    def __len__(self) -> int:
        return len(self.translations)


class EntryResolver:
    """
    Resolve the translated content of an entry.

    Providers are consulted in order and the first one that knows the
    identifier wins. Only when none does is ``fallback`` called with the
    original content.
    """

    def __init__(self, providers: Sequence[MappingProvider], fallback: Callable[[str], str]):
        self.providers: List[MappingProvider] = list(providers)
        self.fallback = fallback

    def resolve(self, identifier: str, content: str) -> str:
        for provider in self.providers:
            value = provider.lookup(identifier)
            if value is not None:
                logger.info("Using %s for: %s", provider.name, identifier)
                return value
        return self.fallback(content)


def resolve(
        identifier: str,
        content: str,
        global_map: Dict[str, str],
        scoped_map: Dict[str, str],
        client,
        locale: str
) -> str:
    """
    Resolve one entry from the global mapping, then the scoped mapping, then
    the remote translation client.

    Args:
        identifier (str): The entry identifier.
        content (str): The source content.
        global_map (Dict[str, str]): Locale-wide reference translations.
        scoped_map (Dict[str, str]): Reference translations for the current file.
        client: Object exposing ``translate(content, locale)``.
        locale (str): The target locale passed to the client.

    Returns:
        str: The translated content.
    """
    resolver = EntryResolver(
        [MappingProvider('global reference', global_map), MappingProvider('file reference', scoped_map)],
        lambda text: client.translate(text, locale)
    )
    return resolver.resolve(identifier, content)
