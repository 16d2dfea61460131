# -*- encoding: utf-8
"""
`binding` -- Bindings of repository paths to named parameters
==============================================================
"""
from logging import getLogger

import attr

from urlgen import constants
from urlgen.patterns import compile_glob, static_prefix
from urlgen.urlgen_exception import ConfigError


logger = getLogger(__name__)


@attr.s(frozen=True)
class BindingType(object):
    """
    A named binding type and the parameters its bindings accept.

    ``parameters`` maps each parameter name to its default value.  A default
    of ``None`` means the parameter has to be set on the binding.
    """
    name = attr.ib()
    parameters = attr.ib(default=attr.Factory(dict))

    def default_value(self, name):
        return self.parameters.get(name)


PUBLIC_RESOURCE_TYPE = BindingType(
    name=constants.BINDING_TYPE,
    parameters={
        constants.SERVER_PARAMETER: None,
        constants.PATH_PARAMETER: constants.DEFAULT_PUBLIC_PATH,
    }
)

KNOWN_TYPES = {PUBLIC_RESOURCE_TYPE.name: PUBLIC_RESOURCE_TYPE}


@attr.s(slots=True)
class ResourceBinding(object):
    """Binds the repository paths matched by ``query`` to some parameters."""
    query = attr.ib()
    type_name = attr.ib(default=constants.BINDING_TYPE)
    parameters = attr.ib(default=attr.Factory(dict), converter=dict)
    binding_type = attr.ib(default=None)

    # Compiled on first use.
    _regex = attr.ib(init=False, default=None, repr=False, eq=False)

    def __attrs_post_init__(self):
        if self.binding_type is None:
            self.binding_type = KNOWN_TYPES.get(self.type_name)

    def get_query(self):
        return self.query

    def static_prefix(self):
        return static_prefix(self.query)

    def has_parameter_value(self, name):
        return name in self.parameters

    def get_parameter_value(self, name):
        """
        Returns the value of parameter ``name``, falling back to the default
        of the binding type.  Returns None if neither is set.
        """
        if name in self.parameters:
            return self.parameters[name]
        if self.binding_type is not None:
            return self.binding_type.default_value(name)
        return None

    def matches(self, path):
        if self._regex is None:
            self._regex = compile_glob(self.query)
        return self._regex.fullmatch(path) is not None


def binding_from_config(config):
    """
    Builds a ResourceBinding from a config section such as::

        query = '/acme/blog/public{,/**/*}'
        type = 'puli/public-resource'
            [[[parameters]]]
            server = 'localhost'
            path = '/blog'

    """
    if 'query' not in config:
        raise ConfigError(
            'Missing mandatory binding parameter: query (got %r)' %
            ','.join(config.keys())
        )
    binding = ResourceBinding(
        query=config['query'],
        type_name=config.get('type', constants.BINDING_TYPE),
        parameters=config.get('parameters') or {},
    )
    logger.debug('Loaded binding %r', binding)
    return binding
