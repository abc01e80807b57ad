import json

import pytest

from conftest import entity, item_claim, string_claim
from wikidata_extract.chunker import Chunk
from wikidata_extract.config import Config
from wikidata_extract.errors import OutputError, RecordParseError
from wikidata_extract.shards import OutputShard
from wikidata_extract.transform import (
    check_property, parse_record, project_record, strip_separator, transform_chunk, transform_line,
)


@pytest.mark.parametrize("line, expected", [
    ('{"id": "Q1"},', '{"id": "Q1"}'),
    ('{"id": "Q1"},\n', '{"id": "Q1"}'),
    ('{"id": "Q1"}', '{"id": "Q1"}'),
    ('{"id": "Q1"}  ', '{"id": "Q1"}'),
])
def test_strip_separator(line, expected):
    assert strip_separator(line) == expected


def test_strip_separator_keeps_last_line_intact():
    # the final record of a dump has no comma; its closing brace must survive
    line = json.dumps({"id": "Q1", "labels": {}})
    assert json.loads(strip_separator(line)) == {"id": "Q1", "labels": {}}


def test_project_sample_record(q278):
    assert project_record(q278, "ja", ("P31",)) == {
        "id": "Q278",
        "labels": "リル・キム",
        "claims": {"P31": ["Q10373548"]},
    }


def test_missing_label_emits_no_key(q278):
    projected = project_record(q278, "ja", ())
    assert "descriptions" not in projected
    assert "aliases" not in projected
    assert "claims" not in projected


def test_aliases_keep_order():
    record = entity("Q9", aliases={"ja": ["A", "B"]})
    assert project_record(record, "ja", ())["aliases"] == ["A", "B"]


def test_descriptions_projected():
    record = entity("Q9", descriptions={"ja": "説明", "en": "description"})
    assert project_record(record, "ja", ()) == {"id": "Q9", "descriptions": "説明"}


def test_claims_only_keep_entity_references():
    record = {"id": "Q1", "claims": {"P31": [{"mainsnak": {"datavalue": {"value": {"id": "Q5"}}}}]}}
    assert project_record(record, "ja", ("P31",)) == {"id": "Q1", "claims": {"P31": ["Q5"]}}

    record["claims"]["P31"].append({"mainsnak": {"datavalue": {"value": "plain string"}}})
    assert project_record(record, "ja", ("P31",))["claims"] == {"P31": ["Q5"]}


def test_claims_skip_non_entity_values():
    time_claim = {"mainsnak": {"datavalue": {"value": {"time": "+2001-01-01T00:00:00Z", "precision": 11}}}}
    novalue = {"mainsnak": {"snaktype": "novalue", "property": "P40"}}
    record = entity("Q1", claims={
        "P569": [time_claim],
        "P40": [novalue, item_claim("P40", "Q7"), item_claim("P40", "Q3")],
        "P646": [string_claim("P646", "/m/x")],
    })
    assert project_record(record, "ja", ("P569", "P40", "P646")) == {
        "id": "Q1",
        "claims": {"P40": ["Q7", "Q3"]},
    }


def test_claims_follow_requested_property_order():
    record = entity("Q1", claims={
        "P31": [item_claim("P31", "Q5")],
        "P279": [item_claim("P279", "Q6")],
    })
    projected = project_record(record, "ja", ("P279", "P31"))
    assert list(projected["claims"]) == ["P279", "P31"]


def test_empty_maps_serialized_as_lists():
    record = {"id": "Q1", "labels": [], "descriptions": [], "aliases": [], "claims": []}
    assert project_record(record, "ja", ("P31",)) == {"id": "Q1"}


def test_check_property_absent():
    assert check_property(entity("Q1"), "P31") == []


def test_check_property_rejects_malformed_claims():
    with pytest.raises(RecordParseError):
        check_property({"id": "Q1", "claims": {"P31": "Q5"}}, "P31")
    with pytest.raises(RecordParseError):
        check_property({"id": "Q1", "claims": "P31"}, "P31")


@pytest.mark.parametrize("line", [
    '{"id": "Q1"',
    '["Q1"],',
    '{"labels": {}},',
    '{"id": 1},',
])
def test_parse_record_errors(line):
    with pytest.raises(RecordParseError):
        parse_record(line)


def test_transform_line_is_compact_utf8(q278):
    line = transform_line(json.dumps(q278) + ",", "ja", ("P31",))
    assert line == '{"id":"Q278","labels":"リル・キム","claims":{"P31":["Q10373548"]}}'


def test_transform_chunk_skips_bad_records(tmp_path):
    config = Config("dump.json.bz2", str(tmp_path / "out"), properties=["P31"], n_jobs=1)
    lines = [
        json.dumps(entity("Q1", labels={"ja": "一"})) + ",",
        '{"id": "Q2", "labels": {"ja": ',
        json.dumps(entity("Q3", labels={"ja": "三"})),
    ]
    shard = OutputShard(0, str(tmp_path / "out_0.json"))

    result = transform_chunk(Chunk(0, lines), shard, config)

    assert result.index == 0
    assert result.written == 2
    assert result.failed == 1
    with open(shard.path, encoding="UTF-8") as f:
        assert [json.loads(line)["id"] for line in f] == ["Q1", "Q3"]


def test_transform_chunk_unwritable_shard(tmp_path):
    config = Config("dump.json.bz2", str(tmp_path / "out"), n_jobs=1)
    shard = OutputShard(0, str(tmp_path / "missing" / "out_0.json"))
    with pytest.raises(OutputError):
        transform_chunk(Chunk(0, ['{"id": "Q1"}']), shard, config)


def test_aliases_must_be_an_array():
    with pytest.raises(RecordParseError):
        transform_line('{"id": "Q1", "aliases": {"ja": 5}}', "ja", ())
    with pytest.raises(RecordParseError):
        transform_line('{"id": "Q1", "aliases": {"ja": true}}', "ja", ())


def test_deeply_nested_line_is_a_parse_error():
    with pytest.raises(RecordParseError):
        parse_record("[" * 100000)


def test_transform_chunk_keeps_siblings_of_bad_aliases(tmp_path):
    config = Config("dump.json.bz2", str(tmp_path / "out"), n_jobs=1)
    lines = [
        json.dumps(entity("Q1", aliases={"ja": ["一"]})) + ",",
        '{"id": "Q2", "aliases": {"ja": 5}},',
        "[" * 100000,
        json.dumps(entity("Q3", aliases={"ja": ["三"]})),
    ]
    shard = OutputShard(0, str(tmp_path / "out_0.json"))

    result = transform_chunk(Chunk(0, lines), shard, config)

    assert (result.written, result.failed) == (2, 2)
    with open(shard.path, encoding="UTF-8") as f:
        assert [json.loads(line)["aliases"] for line in f] == [["一"], ["三"]]
