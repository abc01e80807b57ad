#!/usr/bin/env python3

"""
Extract one language and selected entity claims from a Wikidata JSON dump.

Command:
wikidata-extract latest-all.json.bz2 ./data/wikidata.ja -l ja -p P31,P279 --total 62372998
-> ./data/wikidata.ja_0.json, ./data/wikidata.ja_1.json, ...
"""

import argparse
import logging
import os

from wikidata_extract import __version__
from wikidata_extract.config import DEFAULT_CHUNK_SIZE, DEFAULT_LANG, Config, default_jobs, env_int
from wikidata_extract.errors import ExtractError
from wikidata_extract.pipeline import run

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s %(levelname)s %(name)s: %(message)s'


def setup_logging():
    level = os.environ.get('WIKIDATA_EXTRACT_LOG', 'INFO').upper()
    logging.basicConfig(format=LOG_FORMAT, level=getattr(logging, level, logging.INFO))


def build_parser():
    parser = argparse.ArgumentParser(
        prog='wikidata-extract',
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
        description=__doc__
    )
    parser.add_argument(
        'input_file',
        metavar='INPUT_FILE',
        help=(
            'a Wikidata dumpfile from: '
            'https://dumps.wikimedia.org/wikidatawiki/entities/'
            'latest-all.json.bz2'
        )
    )
    parser.add_argument(
        'output_prefix',
        metavar='OUTPUT_PREFIX',
        help='prefix of the output files, e.g. path/to/output creates path/to/output_0.json, ...'
    )
    parser.add_argument(
        '-p',
        '--properties',
        action='append',
        default=[],
        help='comma-separated list of properties, e.g. p31,p21. May be repeated.'
    )
    parser.add_argument(
        '-l',
        '--language',
        default=DEFAULT_LANG,
        help='Wikimedia language code. Only one supported at this time.'
    )
    parser.add_argument(
        '-c',
        '--chunk-size',
        type=int,
        default=env_int('WIKIDATA_EXTRACT_CHUNK_SIZE', DEFAULT_CHUNK_SIZE),
        help='dump lines per chunk, each chunk is written to its own file'
    )
    parser.add_argument(
        '-n',
        '--limit',
        type=int,
        default=0,
        help='stop after this many records, 0 means no limit'
    )
    parser.add_argument(
        '-j',
        '--jobs',
        type=int,
        default=env_int('WIKIDATA_EXTRACT_JOBS', default_jobs()),
        help='number of worker processes'
    )
    parser.add_argument(
        '--total',
        type=int,
        default=None,
        help='expected number of dump lines, only used by the progress bar'
    )
    parser.add_argument(
        '--no-progress',
        dest='progress',
        action='store_false',
        help='do not show the progress bar'
    )
    parser.add_argument(
        '-v',
        '--version',
        action='version',
        version='%(prog)s ' + __version__
    )
    return parser


def main(argv=None):
    """ Return the process exit status: 0 on success, 1 on any extraction error. """
    setup_logging()
    try:
        args = build_parser().parse_args(argv)
        properties = [ppty for group in args.properties for ppty in group.split(',')]
        config = Config(
            args.input_file,
            args.output_prefix,
            lang=args.language,
            properties=properties,
            chunk_size=args.chunk_size,
            limit=args.limit,
            n_jobs=args.jobs,
            progress=args.progress,
            total=args.total,
        )
        run(config)
    except ExtractError as e:
        logger.error("%s", e)
        return 1
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
