import bz2
import gzip
import json

import pytest


def entity(qid, labels=None, descriptions=None, aliases=None, claims=None):
    """ Build a dump record in the Wikidata JSON layout. """
    def lang_map(values):
        return {lang: {"language": lang, "value": value} for lang, value in (values or {}).items()}

    return {
        "type": "item",
        "id": qid,
        "labels": lang_map(labels),
        "descriptions": lang_map(descriptions),
        "aliases": {lang: [{"language": lang, "value": value} for value in values]
                    for lang, values in (aliases or {}).items()},
        "claims": claims or {},
        "sitelinks": {},
    }


def item_claim(prop, qid):
    return {
        "mainsnak": {
            "snaktype": "value",
            "property": prop,
            "datavalue": {
                "value": {"entity-type": "item", "numeric-id": int(qid[1:]), "id": qid},
                "type": "wikibase-entityid",
            },
            "datatype": "wikibase-item",
        },
        "type": "statement",
        "rank": "normal",
    }


def string_claim(prop, value):
    return {
        "mainsnak": {
            "snaktype": "value",
            "property": prop,
            "datavalue": {"value": value, "type": "string"},
            "datatype": "external-id",
        },
        "type": "statement",
        "rank": "normal",
    }


def dump_lines(records):
    """ Serialize records the way the dumps do: one element per line, comma separated, wrapped in [ ]. """
    lines = ["["]
    for idx, record in enumerate(records):
        line = record if isinstance(record, str) else json.dumps(record, ensure_ascii=False)
        lines.append(line if idx == len(records) - 1 else line + ",")
    lines.append("]")
    return lines


def write_dump(path, records, codec="bz2"):
    text = "\n".join(dump_lines(records)) + "\n"
    if codec == "bz2":
        with bz2.open(path, "wt", encoding="UTF-8") as f:
            f.write(text)
    elif codec == "gz":
        with gzip.open(path, "wt", encoding="UTF-8") as f:
            f.write(text)
    else:
        with open(path, "w", encoding="UTF-8") as f:
            f.write(text)
    return path


def read_shard(path):
    with open(path, encoding="UTF-8") as f:
        return [json.loads(line) for line in f]


@pytest.fixture
def q278():
    return entity(
        "Q278",
        labels={"en": "Lil' Kim", "ja": "リル・キム"},
        descriptions={"en": "American rapper"},
        aliases={"en": ["Kimberly Denise Jones", "Queen Bee"]},
        claims={
            "P31": [item_claim("P31", "Q10373548")],
            "P646": [string_claim("P646", "/m/01vw20_")],
        },
    )


@pytest.fixture
def ja_records():
    """ Five records that all carry a Japanese label. """
    return [
        entity("Q{}".format(idx), labels={"ja": "項目{}".format(idx)},
               claims={"P31": [item_claim("P31", "Q5")]})
        for idx in range(1, 6)
    ]
