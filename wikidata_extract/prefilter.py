"""
Cheap line tests run before any JSON parsing.

LanguageFilter is approximate, not semantic: a line passes whenever the quoted
language code occurs anywhere in it (a label, an alias, or just a qualifier
such as "language":"ja"). Records that pass may still project to an object
with nothing but an id. It never rejects a line that contains the quoted code.
"""

import re

STRUCTURAL_LINES = {'[', ']'}


def is_structural(line):
    """ True for the '[' / ']' lines that open and close the dump array, and for blank lines. """
    stripped = line.strip()
    return not stripped or stripped in STRUCTURAL_LINES


class LanguageFilter:
    def __init__(self, lang):
        self.lang    = lang
        self.pattern = re.compile('"' + re.escape(lang) + '"')

    def skip(self, line):
        """ Return True when the line cannot contain the target language. """
        return self.pattern.search(line) is None

