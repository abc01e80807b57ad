"""
Extract a single-language projection of a Wikidata JSON dump into sharded jsonl files.
"""

from wikidata_extract.config import Config
from wikidata_extract.errors import (
    ConfigError, DispatchError, ExtractError, OutputError, PipelineError, RecordParseError, StreamError,
)
from wikidata_extract.pipeline import RunSummary, run

__version__ = "0.1.0"

__all__ = [
    'Config', 'RunSummary', 'run',
    'ExtractError', 'ConfigError', 'StreamError', 'DispatchError',
    'RecordParseError', 'OutputError', 'PipelineError',
]
