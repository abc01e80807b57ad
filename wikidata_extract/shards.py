"""
Output shards: one <prefix>_<index>.json file per dispatched chunk.
"""

import logging
import os

from wikidata_extract.errors import OutputError

logger = logging.getLogger(__name__)


def shard_path(prefix, index):
    return "{}_{}.json".format(prefix, index)


def prepare_output_dir(prefix):
    """ Create the directory the shards will be written to. """
    directory = os.path.dirname(os.path.abspath(prefix))
    try:
        if not os.path.exists(directory):
            os.makedirs(directory)
    except OSError as e:
        raise OutputError(directory, "cannot create output directory: {}".format(e)) from e
    return directory


class OutputShard:
    """ In-memory buffer of serialized records, written to its file exactly once.
    Owned by a single job; never reopened after flush().
    """
    def __init__(self, index, path):
        self.index   = index
        self.path    = path
        self.lines   = []
        self.flushed = False

    def __len__(self):
        return len(self.lines)

    def append(self, line):
        if self.flushed:
            raise OutputError(self.path, "shard already flushed")
        self.lines.append(line)

    def flush(self):
        """ Write every buffered line in one go, then close the file. """
        if self.flushed:
            raise OutputError(self.path, "shard already flushed")
        try:
            with open(self.path, 'w', encoding='UTF-8') as writer:
                writer.write(''.join(line + '\n' for line in self.lines))
                writer.flush()
        except OSError as e:
            raise OutputError(self.path, str(e)) from e
        self.flushed = True
        logger.debug("flushed shard %d (%d records) to %s", self.index, len(self.lines), self.path)


class ShardAllocator:
    """ Hands out shards with strictly increasing indexes, starting at 0. """
    def __init__(self, prefix):
        self.prefix     = prefix
        self.next_index = 0

    def allocate(self):
        shard = OutputShard(self.next_index, shard_path(self.prefix, self.next_index))
        self.next_index += 1
        return shard
