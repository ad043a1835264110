import os
from unittest.mock import MagicMock

import pytest

from locale_translator.resolver import EntryResolver, MappingProvider


def make_completion(content):
    """Build an object shaped like an OpenAI chat completion."""
    completion = MagicMock()
    completion.choices = [MagicMock(message=MagicMock(content=content))]
    return completion


@pytest.fixture
def completion_factory():
    return make_completion


@pytest.fixture
def locale_dirs(tmp_path):
    """Source and target roots for a run, with the source root already created."""
    source_dir = tmp_path / 'en_US'
    target_dir = tmp_path / 'it_IT'
    source_dir.mkdir()
    return {"source": str(source_dir), "target": str(target_dir)}


@pytest.fixture
def write_source_file(locale_dirs):
    def _write(relative_path, content):
        path = os.path.join(locale_dirs['source'], relative_path)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, 'w', encoding='utf-8', newline='') as f:
            f.write(content)
        return path
    return _write


@pytest.fixture
def make_resolver():
    """Build a resolver over plain dictionaries with a MagicMock fallback."""
    def _make(global_map=None, scoped_map=None, fallback=None):
        fallback = fallback or MagicMock(side_effect=lambda content: f"AI({content})")
        resolver = EntryResolver(
            [MappingProvider('global reference', global_map or {}),
             MappingProvider('file reference', scoped_map or {})],
            fallback
        )
        return resolver, fallback
    return _make
