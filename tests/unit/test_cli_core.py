from pathlib import Path

import pytest

from wikidata_publish.cli import load_inputs, parse_args
from wikidata_publish.common.errors import ConfigError
from wikidata_publish.common.fs import write_json


def test_parse_args_defaults():
    args = parse_args(["assemble"])
    assert args.command == "assemble"
    assert args.target == "test"
    assert args.overlay_config_dir is None
    assert args.strict is False


def test_parse_args_accepts_overlay_config_dir():
    args = parse_args(["all", "--overlay-config-dir", "config/live", "--target", "production"])
    assert args.overlay_config_dir == "config/live"
    assert args.target == "production"


def test_parse_args_rejects_unknown_target():
    with pytest.raises(SystemExit):
        parse_args(["publish", "--target", "staging"])


def test_load_inputs_accepts_single_object_and_lists(tmp_path: Path):
    single = tmp_path / "single.json"
    write_json(single, {"business": {"id": "b1", "name": "Acme"}, "crawled": {"phone": "+1 415 555 0123"}})
    items = load_inputs(single)
    assert len(items) == 1
    record, crawled, external = items[0]
    assert record.business_id == "b1"
    assert crawled.phone == "+1 415 555 0123"
    assert external is None

    many = tmp_path / "many.json"
    write_json(many, [{"id": "b1"}, {"business": {"id": "b2"}, "notability": {"isNotable": False}}])
    items = load_inputs(many)
    assert [item[0].business_id for item in items] == ["b1", "b2"]
    assert items[1][2].is_notable is False


def test_load_inputs_requires_business_ids(tmp_path: Path):
    path = tmp_path / "in.json"
    write_json(path, [{"name": "no id"}])
    with pytest.raises(ConfigError):
        load_inputs(path)
    with pytest.raises(ConfigError):
        load_inputs(tmp_path / "missing.json")
