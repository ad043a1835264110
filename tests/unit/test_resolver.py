from unittest.mock import MagicMock

import pytest

from locale_translator.resolver import MappingProvider, resolve


class TestEntryResolver:

    def test_remote_client_called_once_when_mappings_empty(self, make_resolver):
        resolver, fallback = make_resolver()

        assert resolver.resolve('id1', 'Hello') == 'AI(Hello)'
        fallback.assert_called_once_with('Hello')

    def test_global_mapping_wins_over_everything(self, make_resolver):
        resolver, fallback = make_resolver(
            global_map={'id1': 'Bonjour'},
            scoped_map={'id1': 'Salut'},
        )

        assert resolver.resolve('id1', 'Hello') == 'Bonjour'
        fallback.assert_not_called()

    def test_scoped_mapping_used_when_global_misses(self, make_resolver):
        resolver, fallback = make_resolver(global_map={'other': 'x'}, scoped_map={'id2': 'Monde'})

        assert resolver.resolve('id2', 'World') == 'Monde'
        fallback.assert_not_called()

    def test_empty_reference_value_still_counts_as_a_match(self, make_resolver):
        resolver, fallback = make_resolver(global_map={'id1': ''})

        assert resolver.resolve('id1', 'Hello') == ''
        fallback.assert_not_called()

    def test_fallback_errors_propagate(self, make_resolver):
        failing = MagicMock(side_effect=RuntimeError('boom'))
        resolver, _ = make_resolver(fallback=failing)

        with pytest.raises(RuntimeError, match="boom"):
            resolver.resolve("id1", "Hello")

    def test_replacing_a_provider_drops_old_entries(self, make_resolver):
        resolver, fallback = make_resolver(scoped_map={'id1': 'Old'})

        resolver.providers[1].replace({'id2': 'New'})

        assert resolver.resolve('id2', 'x') == 'New'
        assert resolver.resolve('id1', 'Hello') == 'AI(Hello)'
        assert len(resolver.providers[1]) == 1


class TestResolveFunction:

    def test_uses_client_with_locale(self):
        client = MagicMock()
        client.translate.return_value = 'Ciao'

        assert resolve('id1', 'Hello', {}, {}, client, 'it_IT') == 'Ciao'
        client.translate.assert_called_once_with('Hello', 'it_IT')

    def test_priority_order(self):
        client = MagicMock()

        assert resolve('id1', 'Hello', {'id1': 'G'}, {'id1': 'S'}, client, 'fr_FR') == 'G'
        assert resolve('id1', 'Hello', {}, {'id1': 'S'}, client, 'fr_FR') == 'S'
        client.translate.assert_not_called()


def test_mapping_provider_lookup():
    provider = MappingProvider('global reference', {'a': 'b'})
    assert provider.lookup('a') == 'b'
    assert provider.lookup('missing') is None
