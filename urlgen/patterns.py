# -*- encoding: utf-8
"""
Glob patterns over repository paths.

The syntax is the one used by bindings in the discovery index:

*   ``*`` matches any run of characters except ``/``
*   ``/**/`` matches one slash or any number of intermediate directories
*   ``?`` matches a single character
*   ``{a,b}`` matches either alternative; braces may nest
*   ``[abc]``, ``[^abc]`` and ``[!abc]`` are character classes
*   ``\\`` escapes the character that follows it

"""

import re

from urlgen.constants import GLOB_WILDCARDS, REGEX_ESCAPES, STATIC_ESCAPES
from urlgen.urlgen_exception import InvalidGlob


def _check_glob(glob):
    if not glob:
        raise InvalidGlob('The glob must be a non-empty string.')
    if not glob.startswith('/') and '://' not in glob:
        raise InvalidGlob('The glob %r is not absolute and not a URI.' % glob)


def _starts_recursive_wildcard(glob, i):
    return glob[i + 1:i + 4] == '**/'


def static_prefix(glob):
    """
    Returns the longest leading part of ``glob`` which contains no wildcards.

    For example, ``/acme/blog/public{,/**/*}`` has the static prefix
    ``/acme/blog/public``, and ``/acme/**/*.css`` has ``/acme/``.  Escaped
    wildcards are returned unescaped.
    """
    _check_glob(glob)

    prefix = []
    length = len(glob)
    i = 0
    while i < length:
        c = glob[i]
        if c == '/':
            prefix.append('/')
            if _starts_recursive_wildcard(glob, i):
                break
        elif c in GLOB_WILDCARDS:
            break
        elif c == '\\':
            if i + 1 < length and glob[i + 1] in STATIC_ESCAPES:
                prefix.append(glob[i + 1])
                i += 1
            else:
                prefix.append('\\')
        else:
            prefix.append(c)
        i += 1

    return ''.join(prefix)


def to_regex(glob):
    """Translates ``glob`` into an anchored regular expression string."""
    _check_glob(glob)

    in_square = False
    curly_levels = 0
    regex = []
    length = len(glob)
    i = 0
    while i < length:
        c = glob[i]
        if c in '.()|+^$':
            regex.append('\\' + c)
        elif c == '/':
            if _starts_recursive_wildcard(glob, i):
                regex.append('/([^/]+/)*')
                i += 3
            else:
                regex.append('/')
        elif in_square and c in '*?{},[':
            # no wildcards or groups inside a character class
            regex.append(re.escape(c))
        elif c == '*':
            regex.append('[^/]*')
        elif c == '?':
            regex.append('.')
        elif c == '{':
            regex.append('(')
            curly_levels += 1
        elif c == '}':
            if curly_levels > 0:
                regex.append(')')
                curly_levels -= 1
            else:
                regex.append('\\}')
        elif c == ',':
            regex.append('|' if curly_levels > 0 else ',')
        elif c == '[':
            regex.append('[')
            in_square = True
            if i + 1 < length and glob[i + 1] in ('^', '!'):
                regex.append('^')
                i += 1
        elif c == ']':
            regex.append(']' if in_square else '\\]')
            in_square = False
        elif c == '-':
            regex.append('-' if in_square else '\\-')
        elif c == '\\':
            if i + 1 < length and glob[i + 1] in REGEX_ESCAPES:
                regex.append('\\' + glob[i + 1])
                i += 1
            else:
                regex.append('\\\\')
        else:
            regex.append(c)
        i += 1

    if in_square:
        raise InvalidGlob('Invalid glob: missing ] in %r' % glob)
    if curly_levels > 0:
        raise InvalidGlob('Invalid glob: missing } in %r' % glob)

    return '^%s$' % ''.join(regex)


def compile_glob(glob):
    return re.compile(to_regex(glob), re.DOTALL)


def matches(path, glob):
    """Returns True if ``path`` is matched by ``glob``."""
    # Cheap rejection before building the regex.
    if not path.startswith(static_prefix(glob)):
        return False
    return compile_glob(glob).fullmatch(path) is not None
