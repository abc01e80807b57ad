"""
Run configuration.

Config is built once (normally by the command line) and shared read-only by
the reader loop and by every worker process.
"""

import multiprocessing as mp
import os
import re
from collections import namedtuple

from wikidata_extract.errors import ConfigError

DEFAULT_LANG       = "ja"
DEFAULT_CHUNK_SIZE = 100000

LANG_RE     = re.compile(r'^[A-Za-z0-9]+(?:-[A-Za-z0-9]+)*$')
PROPERTY_RE = re.compile(r'^P[1-9][0-9]*$')


def default_jobs():
    """ Leave two cores for the reader loop and the OS, but always use at least one worker. """
    return max(1, mp.cpu_count() - 2)


def env_int(name, default):
    """ Read a positive integer default from the environment. """
    value = os.environ.get(name)
    if value is None or value == "":
        return default
    try:
        parsed = int(value)
    except ValueError:
        raise ConfigError("{} must be an integer, got {!r}".format(name, value))
    if parsed <= 0:
        raise ConfigError("{} must be positive, got {}".format(name, parsed))
    return parsed


def normalize_properties(properties):
    """ Upper-case property ids and drop duplicates, keeping the first-seen order.
    Parameter:
        properties(iterable): e.g. ['p31', 'P279', 'P31'].
    Return:
        ('P31', 'P279')
    """
    if properties is None:
        return ()
    if isinstance(properties, str):
        properties = properties.split(',')
    normalized = []
    for ppty in properties:
        ppty = ppty.strip().upper()
        if not ppty:
            continue
        if not PROPERTY_RE.match(ppty):
            raise ConfigError("invalid property id: {!r}".format(ppty))
        if ppty not in normalized:
            normalized.append(ppty)
    return tuple(normalized)


_ConfigBase = namedtuple('_ConfigBase', [
    'input_file', 'output_prefix', 'lang', 'properties', 'chunk_size',
    'limit', 'n_jobs', 'max_pending', 'dispatch_timeout', 'progress', 'total',
])


class Config(_ConfigBase):
    """ Immutable settings of one extraction run.

    input_file       - Wikidata dump, e.g. latest-all.json.bz2.
    output_prefix    - shards are written to <output_prefix>_<index>.json.
    lang             - Wikimedia language code to project, e.g. "ja".
    properties       - property ids whose entity-reference claims are kept.
    chunk_size       - dump lines per chunk (and per shard).
    limit            - stop after this many accepted lines, 0 = unlimited.
    n_jobs           - worker processes.
    max_pending      - submitted but unfinished jobs allowed at once.
    dispatch_timeout - seconds to wait for a free slot, None = wait forever.
    progress         - show a tqdm progress bar over input lines.
    total            - expected input line count for the progress bar.
    """
    __slots__ = ()

    def __new__(cls, input_file, output_prefix, lang=DEFAULT_LANG, properties=(),
                chunk_size=DEFAULT_CHUNK_SIZE, limit=0, n_jobs=None, max_pending=None,
                dispatch_timeout=None, progress=False, total=None):
        if not input_file:
            raise ConfigError("input file is required")
        if not output_prefix:
            raise ConfigError("output prefix is required")
        if not lang or not LANG_RE.match(lang):
            raise ConfigError("invalid language code: {!r}".format(lang))
        if isinstance(chunk_size, bool) or not isinstance(chunk_size, int) or chunk_size <= 0:
            raise ConfigError("chunk size must be a positive integer, got {!r}".format(chunk_size))
        if isinstance(limit, bool) or not isinstance(limit, int) or limit < 0:
            raise ConfigError("limit must be a non-negative integer, got {!r}".format(limit))

        if n_jobs is None:
            n_jobs = default_jobs()
        if n_jobs <= 0:
            raise ConfigError("n_jobs must be positive, got {}".format(n_jobs))
        if max_pending is None:
            max_pending = 2 * n_jobs
        if max_pending <= 0:
            raise ConfigError("max_pending must be positive, got {}".format(max_pending))
        if dispatch_timeout is not None and dispatch_timeout <= 0:
            raise ConfigError("dispatch timeout must be positive, got {}".format(dispatch_timeout))

        return super().__new__(
            cls, str(input_file), str(output_prefix), lang, normalize_properties(properties),
            chunk_size, limit, n_jobs, max_pending, dispatch_timeout, bool(progress), total,
        )
