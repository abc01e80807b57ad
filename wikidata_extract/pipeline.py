"""
Chunked parallel extraction of a Wikidata dump.

    dump lines -> prefilter -> chunk buffer -> worker pool -> shards
                                                    |
                        completion barrier  <-------+

The reader loop runs in the calling process; every filled chunk is sent with
a freshly allocated shard to the pool. run() returns only after all
dispatched jobs have finished.
"""

import logging
import time
from collections import namedtuple

from tqdm import tqdm

from wikidata_extract.chunker import ChunkBuffer
from wikidata_extract.errors import PipelineError
from wikidata_extract.pool import WorkerPool
from wikidata_extract.prefilter import LanguageFilter, is_structural
from wikidata_extract.shards import ShardAllocator, prepare_output_dir
from wikidata_extract.source import DumpReader

logger = logging.getLogger(__name__)

RunSummary = namedtuple('RunSummary', [
    'lines_read', 'structural', 'prefiltered', 'accepted',
    'shards', 'written', 'failed', 'elapsed',
])


def wait_all(handles):
    """ Completion barrier: wait for every job handle.
    Return:
        results  - [ShardResult, ...] of the jobs that succeeded.
        failures - [(shard_index, error), ...] of the jobs that raised.
    """
    results, failures = [], []
    for handle in handles:
        try:
            results.append(handle.wait())
        except Exception as e:
            logger.error("shard %d (%s) failed: %s", handle.index, handle.path, e)
            failures.append((handle.index, e))
    return results, failures


def run(config):
    """ Extract config.input_file into <config.output_prefix>_<n>.json shards.
    Raise StreamError / DispatchError on fatal errors and PipelineError when any job failed.
    Return:
        RunSummary
    """
    start = time.time()
    logger.info("start: %s", config)

    lang_filter = LanguageFilter(config.lang)
    buffer      = ChunkBuffer(config.chunk_size)
    allocator   = ShardAllocator(config.output_prefix)
    handles     = []
    structural = prefiltered = accepted = 0

    with DumpReader(config.input_file) as reader:
        prepare_output_dir(config.output_prefix)
        with WorkerPool(config) as pool:

            def dispatch(chunk):
                handles.append(pool.submit(chunk, allocator.allocate()))

            with tqdm(total=config.total, desc='Extracting', unit=' lines', disable=not config.progress) as pbar:
                for line in reader:
                    pbar.update(1)
                    if is_structural(line):
                        structural += 1
                        continue
                    if lang_filter.skip(line):
                        prefiltered += 1
                        continue
                    accepted += 1
                    chunk = buffer.add(line)
                    if chunk is not None:
                        dispatch(chunk)
                    if config.limit and accepted >= config.limit:
                        logger.info("limit of %d records reached", config.limit)
                        break

            chunk = buffer.finish()
            if chunk is not None:
                dispatch(chunk)

            logger.info("read %d lines, waiting for %d jobs ...", reader.line_count, len(handles))
            results, failures = wait_all(handles)

    summary = RunSummary(
        lines_read=reader.line_count,
        structural=structural,
        prefiltered=prefiltered,
        accepted=accepted,
        shards=len(handles),
        written=sum(result.written for result in results),
        failed=sum(result.failed for result in results),
        elapsed=time.time() - start,
    )
    logger.info("finish: %d records in %d shards, %d skipped, %.1fs",
                summary.written, summary.shards, summary.failed, summary.elapsed)
    if failures:
        raise PipelineError(sorted(failures, key=lambda failure: failure[0]))
    return summary
