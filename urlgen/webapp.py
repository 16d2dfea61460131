#!/usr/bin/env python
#-*- coding: utf-8 -*-
'''
webapp.py
=========
Redirects requests for repository paths to their public URLs.
'''
import logging
from logging.handlers import RotatingFileHandler
import os
from os import path
import sys

from configobj import ConfigObj
from werkzeug.wrappers import Request, Response

from urlgen import constants
from urlgen.discovery import import_class
from urlgen.generator import DiscoveryUrlGenerator
from urlgen.urlgen_exception import ConfigError, DiscoveryException


def _data_directory_path():
    return path.join(path.dirname(path.realpath(__file__)), 'data')


def default_config_file_path():
    return path.join(_data_directory_path(), 'urlgen.conf')


def get_debug_config():
    # read the packaged config, log everything to the console and serve a
    # single example binding from memory
    config = read_config(default_config_file_path())

    config['logging']['log_to'] = 'console'
    config['logging']['log_level'] = 'DEBUG'

    config['url_formats'] = {'localhost': 'http://localhost:8080/%s'}
    config['discovery'] = {
        'impl': 'urlgen.discovery.InMemoryDiscovery',
        'bindings': {
            'example': {
                'query': '/example/public{,/**/*}',
                'type': constants.BINDING_TYPE,
                'parameters': {
                    constants.SERVER_PARAMETER: 'localhost',
                    constants.PATH_PARAMETER: '/',
                },
            },
        },
    }
    return config


def create_app(debug=False, config_file_path=''):
    if debug:
        config = get_debug_config()
    else:
        config = read_config(config_file_path)

    return UrlgenApp(config)


def read_config(config_file_path):
    config = ConfigObj(config_file_path, unrepr=True, interpolation='template')
    # add the OS environment variables as the DEFAULT section to support
    # interpolating their values into other keys
    # make a copy of the os.environ dictionary so that the config object can't
    # inadvertently modify the environment
    config['DEFAULT'] = {key: val for (key, val) in os.environ.items() if key not in ('PS1',)}
    return config


def validate_url_formats(url_formats):
    """
    Check every server has a URL format with exactly one slot for the
    server path.
    """
    for server_name, url_format in url_formats.items():
        if not isinstance(url_format, str):
            raise ConfigError(
                'url_formats.%s=%r, expected a string' % (server_name, url_format)
            )
        if url_format.replace('%%', '').count(constants.URL_FORMAT_MARKER) != 1:
            raise ConfigError(
                'url_formats.%s=%r, expected exactly one %r' %
                (server_name, url_format, constants.URL_FORMAT_MARKER)
            )


# Every [logging] section needs these.
LOGGING_KEYS = ('log_to', 'log_level', 'format')

# Extra settings for each log_to destination.
LOG_TO_KEYS = {
    'console': (),
    'file': ('log_dir', 'max_size', 'max_backups'),
}

LOG_FILE_NAME = 'urlgen.log'


def _missing_keys(config, keys):
    return [key for key in keys if key not in config]


def _validate_logging_config(config):
    missing = _missing_keys(config, LOGGING_KEYS)
    if missing:
        raise ConfigError('logging: missing %s' % ', '.join(missing))

    log_to = config['log_to']
    if log_to not in LOG_TO_KEYS:
        raise ConfigError(
            'logging.log_to=%r, expected one of %s' %
            (log_to, '/'.join(sorted(LOG_TO_KEYS)))
        )

    missing = _missing_keys(config, LOG_TO_KEYS[log_to])
    if missing:
        raise ConfigError(
            'logging: log_to=%r also needs %s' % (log_to, ', '.join(missing))
        )


class LevelRangeFilter(logging.Filter):
    """Passes records whose level lies between ``low`` and ``high``."""

    def __init__(self, low=logging.NOTSET, high=logging.CRITICAL):
        super(LevelRangeFilter, self).__init__()
        self.low = low
        self.high = high

    def filter(self, record):
        return self.low <= record.levelno <= self.high


def _console_handlers(config):
    # INFO and below go to stdout, WARNING and above to stderr
    out_handler = logging.StreamHandler(sys.__stdout__)
    out_handler.addFilter(LevelRangeFilter(high=logging.INFO))
    err_handler = logging.StreamHandler(sys.__stderr__)
    err_handler.addFilter(LevelRangeFilter(low=logging.WARNING))
    return [out_handler, err_handler]


def _file_handlers(config):
    fp = path.join(config['log_dir'], LOG_FILE_NAME)
    return [RotatingFileHandler(fp,
        maxBytes=config['max_size'],
        backupCount=config['max_backups'],
        delay=True)]


_HANDLER_FACTORIES = {
    'console': _console_handlers,
    'file': _file_handlers,
}


def configure_logging(config):
    """
    Sets up the root logger from the [logging] section.

    Handlers are installed once per process and kept in the logger's
    ``urlgen_handlers`` attribute; later calls only change the level.
    Unknown level names log everything.
    """
    _validate_logging_config(config)

    logger = logging.getLogger()

    try:
        logger.setLevel(str(config['log_level']).upper())
    except ValueError:
        logger.setLevel(logging.DEBUG)

    if not getattr(logger, 'urlgen_handlers', None):
        formatter = logging.Formatter(fmt=config['format'])
        handlers = _HANDLER_FACTORIES[config['log_to']](config)
        for handler in handlers:
            handler.setFormatter(formatter)
            logger.addHandler(handler)
        logger.urlgen_handlers = handlers
    return logger


class UrlgenResponse(Response):
    default_mimetype = 'text/plain'


class NotFoundResponse(UrlgenResponse):
    def __init__(self, message):
        super(NotFoundResponse, self).__init__(message, status=404)


class ServiceUnavailableResponse(UrlgenResponse):
    def __init__(self, message):
        super(ServiceUnavailableResponse, self).__init__(message, status=503)


class UrlgenApp(object):

    def __init__(self, app_configs={}):
        '''The WSGI Application.
        Args:
            app_configs ({}):
                A dictionary of dictionaries that represents the urlgen.conf
                file.
        '''
        self.app_configs = app_configs
        self.logger = configure_logging(app_configs['logging'])
        self.logger.debug('urlgen initialized with these settings:')
        for key in self.app_configs:
            if key == 'DEFAULT':
                continue
            for sub_key in self.app_configs[key]:
                self.logger.debug('%s.%s=%s', key, sub_key, self.app_configs[key][sub_key])

        url_formats = dict(self.app_configs.get('url_formats', {}))
        validate_url_formats(url_formats)

        self.discovery = self._load_discovery()
        self.generator = DiscoveryUrlGenerator(self.discovery, url_formats)

    def _load_discovery(self):
        try:
            discovery_config = self.app_configs['discovery']
            impl = discovery_config['impl']
        except KeyError:
            raise ConfigError('Missing setting for discovery.impl')
        DiscoveryClass = import_class(impl)
        return DiscoveryClass(discovery_config)

    def wsgi_app(self, environ, start_response):
        request = Request(environ)
        response = self.route(request)
        return response(environ, start_response)

    def route(self, request):
        if request.path == '/':
            return self.get_index(request)

        try:
            result = self.generator.try_generate_url(request.path)
        except DiscoveryException as e:
            return ServiceUnavailableResponse(str(e))

        if not result.ok:
            return NotFoundResponse(str(result.error))

        r = UrlgenResponse()
        r.headers['Location'] = result.url
        r.status_code = 303
        return r

    def get_index(self, request):
        servers = ', '.join(sorted(self.generator.url_formats)) or '(none)'
        return UrlgenResponse(
            'urlgen: request a repository path to be redirected to its '
            'public URL.\nServers: %s\n' % servers
        )

    def __call__(self, environ, start_response):
        '''
        This makes urlgen executable.
        '''
        return self.wsgi_app(environ, start_response)


if __name__ == '__main__':
    from werkzeug.serving import run_simple

    app = create_app(debug=True)

    run_simple('localhost', 5005, app, use_debugger=True, use_reloader=True)
