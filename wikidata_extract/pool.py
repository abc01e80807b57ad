"""
Fixed-size process pool that runs chunk jobs.

The run Config is installed once in every worker process by the pool
initializer; a job only carries its own chunk and shard. At most
config.max_pending jobs are in flight: submit() waits for a free slot and
raises DispatchError when none frees up within config.dispatch_timeout.

A worker process that dies (e.g. killed by the OOM killer) breaks the pool:
every unfinished job fails with BrokenProcessPool at the completion barrier
and further submits raise DispatchError.
"""

import logging
import threading
from concurrent.futures import ProcessPoolExecutor

from wikidata_extract.errors import DispatchError
from wikidata_extract.transform import transform_chunk

logger = logging.getLogger(__name__)

_worker_config = None


def init_worker(config):
    global _worker_config
    _worker_config = config


def run_chunk_job(chunk, shard):
    """ Executed inside a worker process. """
    return transform_chunk(chunk, shard, _worker_config)


class JobHandle:
    """ Handle of one submitted job; wait() returns its ShardResult or raises the job's error. """
    def __init__(self, index, path, future):
        self.index   = index
        self.path    = path
        self._future = future

    def wait(self):
        return self._future.result()


class WorkerPool:
    """
    Parameter:
        config(Config): shared run configuration.
        job(callable): module-level function called as job(chunk, shard) in a worker.
    """
    def __init__(self, config, job=run_chunk_job):
        self.config = config
        self.job    = job
        self._slots = threading.BoundedSemaphore(config.max_pending)
        self._pool  = ProcessPoolExecutor(config.n_jobs, initializer=init_worker, initargs=(config,))
        logger.info("started %d worker processes (max %d pending jobs)", config.n_jobs, config.max_pending)

    def _release(self, _):
        self._slots.release()

    def submit(self, chunk, shard):
        """ Queue one (chunk, shard) job and return its JobHandle without waiting for it to run. """
        if not self._slots.acquire(timeout=self.config.dispatch_timeout):
            raise DispatchError("no free worker slot for chunk {} after {}s".format(
                chunk.index, self.config.dispatch_timeout))
        try:
            future = self._pool.submit(self.job, chunk, shard)
        except RuntimeError as e:
            # broken by a dead worker, or already shut down
            self._slots.release()
            raise DispatchError("worker pool rejected chunk {}: {}".format(chunk.index, e)) from e
        future.add_done_callback(self._release)
        logger.debug("dispatched chunk %d (%d lines) -> %s", chunk.index, len(chunk.lines), shard.path)
        return JobHandle(shard.index, shard.path, future)

    def close(self):
        self._pool.shutdown(wait=True)

    def terminate(self):
        self._pool.shutdown(wait=False, cancel_futures=True)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        if exc_type is None:
            self.close()
        else:
            logger.error("aborting: cancelling pending jobs")
            self.terminate()
        return False
