# -*- encoding: utf-8

import pytest

from urlgen import constants
from urlgen.binding import ResourceBinding
from urlgen.discovery import (
    _AbstractDiscovery,
    InMemoryDiscovery,
    MultipleDiscovery,
    import_class,
)
from urlgen.urlgen_exception import ConfigError


OTHER_TYPE = 'acme/other'


def _binding_config(query, server='site', path='/', type_name=constants.BINDING_TYPE):
    return {
        'query': query,
        'type': type_name,
        'parameters': {'server': server, 'path': path},
    }


@pytest.fixture
def discovery():
    return InMemoryDiscovery({
        'bindings': {
            'blog': _binding_config('/acme/blog/public{,/**/*}', path='/blog'),
            'everything': _binding_config('/acme/**/*', server='cdn'),
            'other': _binding_config('/acme/blog/public{,/**/*}', type_name=OTHER_TYPE),
        }
    })


class TestAbstractDiscovery(object):

    def test_find_by_path_is_notimplementederror(self):
        with pytest.raises(NotImplementedError) as err:
            _AbstractDiscovery({}).find_by_path('/acme', constants.BINDING_TYPE)
        assert '_AbstractDiscovery' in str(err.value)

    def test_find_bindings_is_notimplementederror(self):
        with pytest.raises(NotImplementedError):
            _AbstractDiscovery({}).find_bindings(constants.BINDING_TYPE)


class TestInMemoryDiscovery(object):

    def test_bindings_loaded_in_config_order(self, discovery):
        assert [b.query for b in discovery.bindings] == [
            '/acme/blog/public{,/**/*}',
            '/acme/**/*',
            '/acme/blog/public{,/**/*}',
        ]

    def test_find_by_path_keeps_order(self, discovery):
        found = discovery.find_by_path('/acme/blog/public/css/style.css', constants.BINDING_TYPE)
        assert [b.get_parameter_value('server') for b in found] == ['site', 'cdn']

    def test_find_by_path_is_stable(self, discovery):
        path = '/acme/blog/public/css/style.css'
        first = discovery.find_by_path(path, constants.BINDING_TYPE)
        for _ in range(5):
            assert discovery.find_by_path(path, constants.BINDING_TYPE) == first

    def test_find_by_path_filters_on_type(self, discovery):
        found = discovery.find_by_path('/acme/blog/public/css/style.css', OTHER_TYPE)
        assert len(found) == 1
        assert found[0].type_name == OTHER_TYPE

    def test_find_by_path_without_match(self, discovery):
        assert discovery.find_by_path('/elsewhere/file.txt', constants.BINDING_TYPE) == []

    def test_find_bindings(self, discovery):
        assert len(discovery.find_bindings(constants.BINDING_TYPE)) == 2
        assert discovery.has_bindings(OTHER_TYPE)
        assert not discovery.has_bindings('acme/unknown')

    def test_add_binding(self):
        discovery = InMemoryDiscovery({})
        assert discovery.find_by_path('/acme/a.txt', constants.BINDING_TYPE) == []

        binding = ResourceBinding(query='/acme/*', parameters={'server': 'site'})
        discovery.add_binding(binding)
        assert discovery.find_by_path('/acme/a.txt', constants.BINDING_TYPE) == [binding]

    def test_binding_without_query_is_configerror(self):
        with pytest.raises(ConfigError) as err:
            InMemoryDiscovery({'bindings': {'broken': {'type': constants.BINDING_TYPE}}})
        assert 'Binding broken' in str(err.value)


class TestMultipleDiscovery(object):

    @staticmethod
    def build_discovery_config(query, server):
        return {
            'impl': 'urlgen.discovery.InMemoryDiscovery',
            'bindings': {'only': _binding_config(query, server=server)},
        }

    def test_results_are_concatenated_in_config_order(self):
        discovery = MultipleDiscovery({
            'discoveries': ['Local', 'Shared'],
            'Local': self.build_discovery_config('/acme/blog/**/*', 'local'),
            'Shared': self.build_discovery_config('/acme/**/*', 'shared'),
        })
        assert len(discovery.discoveries) == 2

        found = discovery.find_by_path('/acme/blog/a.css', constants.BINDING_TYPE)
        assert [b.get_parameter_value('server') for b in found] == ['local', 'shared']

        found = discovery.find_by_path('/acme/img/a.png', constants.BINDING_TYPE)
        assert [b.get_parameter_value('server') for b in found] == ['shared']

        assert len(discovery.find_bindings(constants.BINDING_TYPE)) == 2

    @pytest.mark.parametrize('config', [
        {},
        {'discoveries': ['Local'], 'Local': {'impl': 'urlgen.discovery.InMemoryDiscovery'}},
    ])
    def test_fewer_than_two_discoveries_is_configerror(self, config):
        with pytest.raises(ConfigError):
            MultipleDiscovery(config)

    def test_missing_subsection_is_configerror(self):
        with pytest.raises(ConfigError) as err:
            MultipleDiscovery({
                'discoveries': ['Local', 'Shared'],
                'Local': self.build_discovery_config('/acme/**/*', 'local'),
            })
        assert 'Shared' in str(err.value)

    def test_missing_impl_is_configerror(self):
        with pytest.raises(ConfigError):
            MultipleDiscovery({
                'discoveries': ['Local', 'Shared'],
                'Local': self.build_discovery_config('/acme/**/*', 'local'),
                'Shared': {'bindings': {}},
            })


def test_import_class():
    assert import_class('urlgen.discovery.InMemoryDiscovery') is InMemoryDiscovery
