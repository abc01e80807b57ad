"""
Read a (compressed) Wikidata dump as a stream of text lines.

bz2 and gzip containers made of several concatenated streams/members are
decoded as one logical stream, which is how the official
latest-all.json.bz2 dumps are produced.
"""

import bz2
import gzip
import logging

from wikidata_extract.errors import StreamError

logger = logging.getLogger(__name__)

CODECS = {
    '.bz2': bz2.open,
    '.gz':  gzip.open,
}


def open_codec(filename):
    """ Pick the decompressor from the file suffix; anything else is read as plain text. """
    for suffix, opener in CODECS.items():
        if filename.endswith(suffix):
            return opener
    return open


class DumpReader:
    """ Lazy, non-restartable sequence of dump lines (line terminators removed).

    The file is opened when the reader is created, so a missing or unreadable
    dump fails before anything is dispatched. Decoding errors surface while
    iterating. Both are raised as StreamError.
    """
    def __init__(self, filename):
        self.filename   = str(filename)
        self.line_count = 0
        opener = open_codec(self.filename)
        try:
            self._file = opener(self.filename, mode='rt', encoding='UTF-8')
        except OSError as e:
            raise StreamError("cannot open {}: {}".format(self.filename, e)) from e
        logger.info("opened %s (%s)", self.filename, opener.__module__)

    def __iter__(self):
        try:
            for line in self._file:
                self.line_count += 1
                yield line.rstrip('\r\n')
        except (OSError, EOFError, UnicodeDecodeError) as e:
            raise StreamError("corrupt stream {} after {} lines: {}".format(
                self.filename, self.line_count, e)) from e

    def close(self):
        self._file.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
