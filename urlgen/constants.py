# constants.py
# -*- coding: utf-8 -*-

# The binding type of public resources.
BINDING_TYPE = 'puli/public-resource'

# The binding parameter holding the server name.
SERVER_PARAMETER = 'server'

# The binding parameter holding the public base path on that server.
PATH_PARAMETER = 'path'

DEFAULT_PUBLIC_PATH = '/'

URL_FORMAT_MARKER = '%s'

# Characters that end the static prefix of a glob.
GLOB_WILDCARDS = ('*', '?', '{', '[')

# Characters that may follow a backslash in a glob.
STATIC_ESCAPES = GLOB_WILDCARDS + ('\\',)
REGEX_ESCAPES = STATIC_ESCAPES + ('}', ']', '-', '^', '$', '~')
