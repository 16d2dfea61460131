"""
`discovery` -- Find the bindings that apply to a repository path
=================================================================
"""
from logging import getLogger
from importlib import import_module

import requests

from urlgen.binding import binding_from_config
from urlgen.urlgen_exception import ConfigError, DiscoveryException


logger = getLogger(__name__)


def import_class(qname):
    '''Imports a class AND returns it (the class, not an instance).
    '''
    module_name = '.'.join(qname.split('.')[:-1])
    class_name = qname.split('.')[-1]
    module = import_module(module_name)
    logger.debug('Imported %s', qname)
    return getattr(module, class_name)


class _AbstractDiscovery(object):

    def __init__(self, config):
        self.config = config

    def find_by_path(self, path, binding_type):
        """
        Returns the bindings of ``binding_type`` whose query matches ``path``.

        Implementations must return the bindings in the same order for the
        same arguments; callers rely on the first binding being stable.

        Args:
            path (str):
                An absolute repository path.
            binding_type (str):
                The name of the binding type, e.g. 'puli/public-resource'.
        Returns:
            list of ResourceBinding
        Raises:
            DiscoveryException when the backend cannot be queried.
        """
        cn = self.__class__.__name__
        raise NotImplementedError('find_by_path() not implemented for %s' % (cn,))

    def find_bindings(self, binding_type):
        """Returns all bindings of ``binding_type``, in discovery order."""
        cn = self.__class__.__name__
        raise NotImplementedError('find_bindings() not implemented for %s' % (cn,))

    def has_bindings(self, binding_type):
        return len(self.find_bindings(binding_type)) > 0


class InMemoryDiscovery(_AbstractDiscovery):
    """
    Keeps its bindings in a list and checks every one of them on lookup.

    The config dictionary MAY contain
     * `bindings`, a mapping of binding names to sections with a `query`,
       a `type` and a `parameters` subsection.  Order is preserved.
    """

    def __init__(self, config):
        super(InMemoryDiscovery, self).__init__(config)
        self.bindings = []
        for name, section in self.config.get('bindings', {}).items():
            try:
                self.add_binding(binding_from_config(section))
            except ConfigError as e:
                raise ConfigError('Binding %s: %s' % (name, e))

    def add_binding(self, binding):
        self.bindings.append(binding)

    def find_bindings(self, binding_type):
        return [b for b in self.bindings if b.type_name == binding_type]

    def find_by_path(self, path, binding_type):
        return [
            b for b in self.find_bindings(binding_type) if b.matches(path)
        ]


class HTTPDiscovery(_AbstractDiscovery):
    '''
    Asks a remote discovery service which bindings match a path.

    The service is expected to answer ``GET <url>?path=<path>&type=<type>``
    with a JSON list of objects carrying `query`, `type` and `parameters`,
    in discovery order.  Leaving out `path` asks for every binding of the
    type.

    The config dictionary MUST contain
     * `url`, the endpoint of the discovery service.

    The config dictionary MAY contain
     * `user`, the username to make the HTTP request as.
     * `pw`, the password to make the HTTP request as.
     * `ssl_check`, whether to check the validity of the service's HTTPS
       certificate.  Defaults to True.
     * `cert`, path to an SSL client certificate.  If `cert` and `key` are
       both present, they take precedence over `user` and `pw`.
     * `key`, path to an SSL client key.
     * `timeout`, seconds to wait for the service.  Defaults to 10.
    '''
    def __init__(self, config):
        super(HTTPDiscovery, self).__init__(config)

        if 'url' in self.config:
            self.url = self.config['url']
        else:
            message = 'Configuration incomplete. Missing setting for discovery url.'
            logger.error(message)
            raise ConfigError(message)

        self.user = self.config.get('user', None)
        self.pw = self.config.get('pw', None)
        self.cert = self.config.get('cert', None)
        self.key = self.config.get('key', None)
        self.ssl_check = self.config.get('ssl_check', True)
        self.timeout = self.config.get('timeout', 10)

    def request_options(self):
        # parameters to pass to every request
        options = {'verify': self.ssl_check, 'timeout': self.timeout}
        if self.cert is not None and self.key is not None:
            options['cert'] = (self.cert, self.key)
        elif self.user is not None and self.pw is not None:
            options['auth'] = (self.user, self.pw)
        return options

    def _query(self, params):
        try:
            response = requests.get(self.url, params=params, **self.request_options())
        except requests.RequestException as e:
            logger.warning('Discovery service at %s is unreachable: %r', self.url, e)
            raise DiscoveryException(
                'Discovery service at %s is unreachable.' % self.url
            )

        if not response.ok:
            logger.warning(
                'Discovery service at %s answered %s for %r.',
                self.url, response.status_code, params
            )
            raise DiscoveryException(
                'Discovery service answered %s for %r.' % (response.status_code, params)
            )

        try:
            payload = response.json()
        except ValueError:
            raise DiscoveryException(
                'Discovery service at %s did not return JSON.' % self.url
            )
        return self._bindings_from_payload(payload)

    def _bindings_from_payload(self, payload):
        if not isinstance(payload, list):
            raise DiscoveryException(
                'Expected a list of bindings, got %r.' % type(payload).__name__
            )
        bindings = []
        for entry in payload:
            if not isinstance(entry, dict):
                raise DiscoveryException('Malformed binding: %r.' % (entry,))
            try:
                bindings.append(binding_from_config(entry))
            except ConfigError as e:
                raise DiscoveryException('Malformed binding %r: %s' % (entry, e))
        return bindings

    def find_bindings(self, binding_type):
        return self._query({'type': binding_type})

    def find_by_path(self, path, binding_type):
        bindings = self._query({'path': path, 'type': binding_type})
        logger.debug('%d binding(s) of %s found for %s', len(bindings), binding_type, path)
        return bindings


class MultipleDiscovery(_AbstractDiscovery):
    """
    Chains several discoveries.  Results are concatenated in the order the
    discoveries are configured, so bindings of the first one come first.

    The config dictionary MUST contain
     * `discoveries`, a list of at least two names.
     * a subsection for each name, with an `impl` and that discovery's own
       settings.
    """

    def __init__(self, config):
        super(MultipleDiscovery, self).__init__(config)
        names = self.config.get('discoveries', [])
        if len(names) < 2:
            raise ConfigError(
                'MultipleDiscovery needs at least two discoveries, got %r' % (names,)
            )

        self.discoveries = []
        for name in names:
            try:
                sub_config = self.config[name]
            except KeyError:
                raise ConfigError('No configuration specified for discovery %s' % name)
            if 'impl' not in sub_config:
                raise ConfigError('Missing impl for discovery %s' % name)
            DiscoveryClass = import_class(sub_config['impl'])
            self.discoveries.append(DiscoveryClass(sub_config))

    def find_bindings(self, binding_type):
        bindings = []
        for discovery in self.discoveries:
            bindings.extend(discovery.find_bindings(binding_type))
        return bindings

    def find_by_path(self, path, binding_type):
        bindings = []
        for discovery in self.discoveries:
            bindings.extend(discovery.find_by_path(path, binding_type))
        return bindings
