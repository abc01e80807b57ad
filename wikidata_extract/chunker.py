"""
Group accepted dump lines into fixed-size chunks.
"""

from collections import namedtuple

Chunk = namedtuple('Chunk', ['index', 'lines'])


class ChunkBuffer:
    """ Holds the chunk currently being filled.

    add() returns a detached Chunk once chunk_size lines are collected and
    starts a new one; finish() returns the last partial chunk, or None when
    nothing is left. Chunks are numbered in the order they were filled.
    """
    def __init__(self, chunk_size):
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        self.chunk_size  = chunk_size
        self.chunk_count = 0
        self._lines      = []

    def __len__(self):
        return len(self._lines)

    def add(self, line):
        self._lines.append(line)
        if len(self._lines) >= self.chunk_size:
            return self._detach()
        return None

    def finish(self):
        if not self._lines:
            return None
        return self._detach()

    def _detach(self):
        chunk = Chunk(self.chunk_count, self._lines)
        self.chunk_count += 1
        self._lines = []
        return chunk
