"""
`generator` -- Generate public URLs for repository paths
=========================================================
"""
from logging import getLogger

import attr

from urlgen import constants
from urlgen.urlgen_exception import CannotGenerateUrl


logger = getLogger(__name__)


@attr.s(frozen=True)
class GeneratedUrl(object):
    """
    The outcome of generating a URL: either ``url`` is set, or ``error``
    holds the CannotGenerateUrl explaining why there is none.
    """
    repository_path = attr.ib()
    url = attr.ib(default=None)
    error = attr.ib(default=None)

    @property
    def ok(self):
        return self.error is None

    def unwrap(self):
        if self.error is not None:
            raise self.error
        return self.url


class DiscoveryUrlGenerator(object):
    """
    Generates URLs for the resources published through the discovery.

    A resource is public if a binding of type ``puli/public-resource``
    matches its repository path.  The binding names the server the resource
    is published on and the base path it is published under, e.g.::

        resource path:    /acme/blog/public/css/style.css
        binding query:    /acme/blog/public{,/**/*}
        repo base path:   /acme/blog/public
        server base path: /blog

        server path:      blog/css/style.css

    The server path is then filled into the URL format of that server.

    Args:
        discovery: anything with a ``find_by_path(path, binding_type)``.
        url_formats (dict): URL formats indexed by server name, each with
            one ``%s`` for the server path.
    """

    def __init__(self, discovery, url_formats):
        self.discovery = discovery
        self.url_formats = url_formats

    def generate_url(self, repository_path, current_url=None):
        """
        Returns the public URL of ``repository_path``.

        Raises:
            CannotGenerateUrl if the path is not public or its server is
            unknown.
        """
        return self.try_generate_url(repository_path, current_url).unwrap()

    def try_generate_url(self, repository_path, current_url=None):
        """Like generate_url(), but returns a GeneratedUrl instead of raising."""
        bindings = self.discovery.find_by_path(repository_path, constants.BINDING_TYPE)

        if not bindings:
            return self._failure(
                'Cannot generate URL for "%s". The path is not public.' % (
                    repository_path,
                ),
                repository_path
            )

        # Nothing stops a resource from being mapped to more than one public
        # path. The first binding wins; avoiding duplicates is up to the
        # resource owners.
        if len(bindings) > 1:
            logger.debug(
                '%d public bindings match %s, using %s',
                len(bindings), repository_path, bindings[0].query
            )

        # TODO: make the URL relative to current_url once relative URLs are
        # supported.
        return self._generate_for_binding(bindings[0], repository_path)

    def _generate_for_binding(self, binding, repository_path):
        server_name = binding.get_parameter_value(constants.SERVER_PARAMETER)

        if server_name not in self.url_formats:
            return self._failure(
                'The server "%s" mapped for path "%s" does not exist.' % (
                    server_name, repository_path
                ),
                repository_path
            )

        repo_base_path = binding.static_prefix()
        server_base_path = (
            binding.get_parameter_value(constants.PATH_PARAMETER) or ''
        ).strip('/')

        server_path = server_base_path + repository_path[len(repo_base_path):]
        if server_path.startswith('/'):
            server_path = server_path[1:]

        url_format = self.url_formats[server_name]
        try:
            url = url_format % server_path
        except (TypeError, ValueError) as e:
            # The format needs exactly one %s.
            return self._failure(
                'The URL format %r of server "%s" cannot take path "%s": %s' % (
                    url_format, server_name, repository_path, e
                ),
                repository_path
            )

        logger.debug('Generated %s for %s', url, repository_path)
        return GeneratedUrl(repository_path=repository_path, url=url)

    def _failure(self, message, repository_path):
        logger.warning(message)
        return GeneratedUrl(
            repository_path=repository_path,
            error=CannotGenerateUrl(message, repository_path),
        )
