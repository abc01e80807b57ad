"""
Project Wikidata dump records onto a single language.

Example, lang="ja", properties=("P31",):
    {"id": "Q278", "labels": {"ja": {"language": "ja", "value": "..."}, ...},
     "claims": {"P31": [{"mainsnak": {"datavalue": {"value": {"id": "Q10373548", ...}}}}]}, ...}
becomes
    {"id": "Q278", "labels": "...", "claims": {"P31": ["Q10373548"]}}
"""

import json
import logging
from collections import namedtuple

import pydash

from wikidata_extract.errors import RecordParseError

logger = logging.getLogger(__name__)

ShardResult = namedtuple('ShardResult', ['index', 'path', 'written', 'failed'])


def strip_separator(line):
    """ Remove the ',' that separates array elements in the dump.
    Only trailing whitespace and one comma are dropped; the last record of a
    dump has no comma and comes back unchanged.
    """
    line = line.rstrip()
    if line.endswith(','):
        line = line[:-1]
    return line


def parse_record(line):
    """ Parse one dump line into a dict. Raise RecordParseError when it is not an entity object. """
    try:
        record = json.loads(strip_separator(line))
    except (ValueError, RecursionError) as e:
        # JSONDecodeError is a ValueError; deeply nested input raises RecursionError
        raise RecordParseError("invalid JSON: {}".format(e)) from e
    if not isinstance(record, dict):
        raise RecordParseError("expected a JSON object, got {}".format(type(record).__name__))
    if not isinstance(record.get('id'), str):
        raise RecordParseError("record has no string id")
    return record


def check_property(item_data, p_num):
    """ Return the entity ids referenced by p_num claims, in claim order.
    Parameter:
        item_data(dict): json data of an item in wikidata.
        p_num(string): property number, example: "P31".
    Return:
        Example: ['Q3624078', 'Q43702', 'Q6256', 'Q20181813'].
        Claims whose value is not an entity (string, time, quantity, novalue, ...) are left out.
    """
    # empty maps are serialized as [] in the dumps
    claims = item_data.get('claims')
    if not claims:
        return []
    if not isinstance(claims, dict):
        raise RecordParseError("{}: claims is not an object".format(item_data['id']))
    statements = claims.get(p_num)
    if statements is None:
        return []
    if not isinstance(statements, list):
        raise RecordParseError("{}: claims.{} is not an array".format(item_data['id'], p_num))

    ids = []
    for statement in statements:
        value = pydash.get(statement, 'mainsnak.datavalue.value')
        if isinstance(value, dict) and isinstance(value.get('id'), str):
            ids.append(value['id'])
    return ids


def project_record(record, lang, properties):
    """ Keep only id, the lang label/description/aliases and the entity ids of the wanted properties.
    Keys are only emitted when they have content.
    """
    jsonl = {'id': record['id']}

    for key in ('labels', 'descriptions'):
        value = pydash.get(record, [key, lang, 'value'])
        if isinstance(value, str):
            jsonl[key] = value

    entries = pydash.get(record, ['aliases', lang])
    if entries is None:
        entries = []
    if not isinstance(entries, list):
        raise RecordParseError("{}: aliases.{} is not an array".format(record['id'], lang))
    aliases = [alias['value'] for alias in entries
               if isinstance(alias, dict) and isinstance(alias.get('value'), str)]
    if aliases:
        jsonl['aliases'] = aliases

    claims = {}
    for ppty in properties:
        ids = check_property(record, ppty)
        if ids:
            claims[ppty] = ids
    if claims:
        jsonl['claims'] = claims

    return jsonl


def transform_line(line, lang, properties):
    """ Dump line -> serialized projected record. """
    record = parse_record(line)
    return json.dumps(project_record(record, lang, properties), ensure_ascii=False, separators=(',', ':'))


def transform_chunk(chunk, shard, config):
    """ Run every line of a chunk through the projection and flush the result to its shard.
    Malformed records are logged and skipped; an unwritable shard raises OutputError.
    Return:
        ShardResult(index, path, written, failed)
    """
    failed = 0
    for line_idx, line in enumerate(chunk.lines):
        try:
            shard.append(transform_line(line, config.lang, config.properties))
        except RecordParseError as e:
            failed += 1
            logger.warning("shard %d, line %d skipped: %s", shard.index, line_idx, e)
    shard.flush()
    if failed:
        logger.info("shard %d: %d written, %d skipped", shard.index, len(shard), failed)
    return ShardResult(shard.index, shard.path, len(shard), failed)
