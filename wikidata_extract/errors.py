"""
Error types raised while extracting a Wikidata dump.

Fatal errors (StreamError, DispatchError, PipelineError) abort the run.
RecordParseError is recoverable: the record is logged, counted and skipped.
"""


class ExtractError(Exception):
    """ Base class of every error raised by wikidata_extract. """


class ConfigError(ExtractError):
    pass


class StreamError(ExtractError):
    """ Input dump cannot be opened or decoded. """


class DispatchError(ExtractError):
    """ Worker pool did not accept a chunk job. """


class RecordParseError(ExtractError):
    """ One dump line is not a usable entity record. """


class OutputError(ExtractError):
    """ A shard file cannot be created or written.
    Parameter:
        path(string): shard file path.
        reason(string): what went wrong.
    """
    def __init__(self, path, reason):
        super().__init__(path, reason)
        self.path   = path
        self.reason = reason

    def __str__(self):
        return "shard {}: {}".format(self.path, self.reason)


class PipelineError(ExtractError):
    """ Raised after the completion barrier when one or more jobs failed.
    Parameter:
        failures(list): [(shard_index, error), ...], sorted by shard index.
    """
    def __init__(self, failures):
        super().__init__(failures)
        self.failures = failures

    def __str__(self):
        details = "; ".join("shard {}: {}".format(idx, err) for idx, err in self.failures)
        return "{} job(s) failed: {}".format(len(self.failures), details)
