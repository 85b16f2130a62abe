import pytest

from kvalidator.comparison.payload import parse_status, parse_units, payload_baseline
from kvalidator.core.models import FieldStatus, ObjectPresence


def payload(**objects):
    return {
        "baselineNamespace": "cluster-a/ns-a",
        "comparisons": {
            "cluster-a/ns-a_vs_cluster-b/ns-b": {
                "leftNamespace": "cluster-a/ns-a",
                "rightNamespace": "cluster-b/ns-b",
                "objectComparisons": objects,
            }
        },
    }


@pytest.mark.parametrize("raw,expected", [
    ("MATCH", FieldStatus.MATCH),
    ("value_mismatch", FieldStatus.VALUE_MISMATCH),
    ("DIFFERENT", FieldStatus.VALUE_MISMATCH),
    ("BOTH_NULL", FieldStatus.MATCH),
    (" ONLY_IN_LEFT ", FieldStatus.ONLY_IN_LEFT),
    ("BOGUS", None),
    (None, None),
])
def test_parse_status(raw, expected):
    assert parse_status(raw) is expected


def test_parse_units_reads_records():
    units = parse_units(payload(web={
        "objectId": "web",
        "objectType": "Deployment",
        "items": [
            {"key": "spec.replicas", "leftValue": 3, "rightValue": 5, "status": "DIFFERENT"},
            {"key": "metadata.name", "leftValue": "web", "rightValue": "web", "status": "MATCH"},
        ],
    }))

    assert len(units) == 1
    unit = units[0]
    assert unit.pair == ("cluster-a/ns-a", "cluster-b/ns-b")

    obj = unit.objects["Deployment/web"]
    assert obj.presence is ObjectPresence.BOTH
    first = obj.records[0]
    assert first.status is FieldStatus.VALUE_MISMATCH
    assert (first.left_value, first.right_value) == ("3", "5")


def test_labels_fall_back_to_comparison_key():
    units = parse_units({"comparisons": {"ns-a_vs_ns-b": {"objectComparisons": {}}}})
    assert units[0].pair == ("ns-a", "ns-b")


def test_sentinel_item_sets_presence():
    units = parse_units(payload(
        web={"objectType": "Deployment",
             "items": [{"key": "web", "leftValue": "exists", "status": "ONLY_IN_LEFT"}]},
        api={"objectType": "Service",
             "items": [{"key": "api", "rightValue": "exists", "status": "ONLY_IN_RIGHT"}]},
    ))
    objects = units[0].objects

    assert objects["Deployment/web"].presence is ObjectPresence.LEFT_ONLY
    assert objects["Service/api"].presence is ObjectPresence.RIGHT_ONLY


def test_sentinel_wins_over_other_items():
    units = parse_units(payload(web={
        "objectType": "Deployment",
        "items": [
            {"key": "spec.replicas", "leftValue": "3", "rightValue": "5", "status": "VALUE_MISMATCH"},
            {"key": "web", "leftValue": "exists", "status": "ONLY_IN_LEFT"},
        ],
    }))
    assert units[0].objects["Deployment/web"].presence is ObjectPresence.LEFT_ONLY


def test_malformed_items_are_skipped(caplog):
    units = parse_units(payload(web={
        "objectType": "Deployment",
        "items": [
            {"leftValue": "x", "status": "MATCH"},
            {"key": "spec.a", "status": "NOT_A_STATUS"},
            "not-a-mapping",
            {"key": "spec.b", "leftValue": "1", "rightValue": "1", "status": "MATCH"},
        ],
    }))

    records = units[0].objects["Deployment/web"].records
    assert [r.field_path for r in records] == ["spec.b"]
    assert "without key" in caplog.text


def test_object_without_id_is_skipped():
    units = parse_units(payload(**{"": {"objectType": "Deployment", "items": []}}))
    assert units[0].objects == {}


def test_unknown_kind_defaults():
    units = parse_units(payload(cfg={"items": []}))
    assert units[0].objects["Unknown/cfg"].kind == "Unknown"


@pytest.mark.parametrize("bad", [None, [], "text", {"comparisons": []}, {"nothing": {}}])
def test_bad_payload_shape_raises(bad):
    with pytest.raises(TypeError):
        parse_units(bad)


def test_payload_baseline():
    assert payload_baseline(payload()) == "cluster-a/ns-a"
    assert payload_baseline({"baseline": "ns-x"}) == "ns-x"
    assert payload_baseline({"comparisons": {}}) is None
    assert payload_baseline([]) is None
