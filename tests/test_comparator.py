import pytest

from conftest import snapshot, web
from kvalidator.comparison.comparator import FieldComparator, determine_status, sentinel_record
from kvalidator.core.models import EXISTS_MARKER, FieldStatus, FlatObject, ObjectPresence


@pytest.mark.parametrize("left,right,expected", [
    ("a", "a", FieldStatus.MATCH),
    ("a", "b", FieldStatus.VALUE_MISMATCH),
    ("a", None, FieldStatus.ONLY_IN_LEFT),
    (None, "b", FieldStatus.ONLY_IN_RIGHT),
])
def test_determine_status(left, right, expected):
    assert determine_status(left, right) is expected


def test_field_records_cover_union_of_paths():
    left = web("ns-a", 3, **{"spec.paused": "false"})
    right = web("ns-a", 5, **{"metadata.labels.app": "web"})

    unit = FieldComparator().compare(snapshot("ns-a", left), snapshot("ns-b", right))
    obj = unit.objects["Deployment/web"]
    statuses = {r.field_path: r.status for r in obj.records}

    assert obj.presence is ObjectPresence.BOTH
    assert statuses["spec.replicas"] is FieldStatus.VALUE_MISMATCH
    assert statuses["spec.paused"] is FieldStatus.ONLY_IN_LEFT
    assert statuses["metadata.labels.app"] is FieldStatus.ONLY_IN_RIGHT
    assert statuses["metadata.name"] is FieldStatus.MATCH
    # Ignore rules are not the comparator's concern
    assert "metadata.namespace" in statuses
    assert [r.field_path for r in obj.records] == sorted(statuses)


def test_missing_object_gets_sentinel():
    unit = FieldComparator().compare(snapshot("ns-a", web("ns-a", 3)), snapshot("ns-c"))
    obj = unit.objects["Deployment/web"]

    assert obj.presence is ObjectPresence.LEFT_ONLY
    assert len(obj.records) == 1
    sentinel = obj.records[0]
    assert sentinel.is_sentinel
    assert sentinel.field_path == "web"
    assert sentinel.left_value == EXISTS_MARKER
    assert sentinel.status is FieldStatus.ONLY_IN_LEFT


def test_extra_object_gets_mirrored_sentinel():
    unit = FieldComparator().compare(snapshot("ns-a"), snapshot("ns-b", web("ns-b", 3)))
    obj = unit.objects["Deployment/web"]

    assert obj.presence is ObjectPresence.RIGHT_ONLY
    assert obj.records == [sentinel_record("web", "Deployment", ObjectPresence.RIGHT_ONLY)]


def test_same_name_different_kinds_stay_apart():
    service = FlatObject(kind="Service", name="web", fields={"kind": "Service", "metadata.name": "web"})
    unit = FieldComparator().compare(snapshot("ns-a", web("ns-a", 3), service),
                                     snapshot("ns-b", web("ns-a", 3)))

    assert set(unit.objects) == {"Deployment/web", "Service/web"}
    assert unit.objects["Service/web"].presence is ObjectPresence.LEFT_ONLY
    assert unit.objects["Deployment/web"].presence is ObjectPresence.BOTH


def test_object_order_left_first():
    a = FlatObject(kind="ConfigMap", name="a")
    b = FlatObject(kind="ConfigMap", name="b")
    c = FlatObject(kind="ConfigMap", name="c")
    unit = FieldComparator().compare(snapshot("ns-a", b, a), snapshot("ns-b", c, a))
    assert list(unit.objects) == ["ConfigMap/b", "ConfigMap/a", "ConfigMap/c"]
