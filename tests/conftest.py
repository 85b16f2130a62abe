import pytest

from kvalidator.comparison.comparator import FieldComparator
from kvalidator.core.models import (
    FieldComparisonRecord,
    FieldStatus,
    FlatObject,
    NamespaceSnapshot,
    ObjectComparison,
)


def web(namespace, replicas, **extra):
    fields = {
        "kind": "Deployment",
        "apiVersion": "apps/v1",
        "metadata.name": "web",
        "metadata.namespace": namespace,
        "spec.replicas": str(replicas),
    }
    fields.update(extra)
    return FlatObject(kind="Deployment", name="web", api_version="apps/v1",
                      namespace=namespace, fields=fields)


def snapshot(label, *objects):
    snap = NamespaceSnapshot(label=label)
    for obj in objects:
        snap.add(obj)
    return snap


def record(object_id, path, status, left=None, right=None, kind="Deployment"):
    return FieldComparisonRecord(object_id, path, FieldStatus(status), left, right, kind)


def comparison(object_id, *records, kind="Deployment"):
    return ObjectComparison(object_id=object_id, kind=kind, records=list(records))


@pytest.fixture
def scenario_snapshots():
    """ns-a defines web (3 replicas), ns-b runs 5, ns-c lacks it."""
    return (
        snapshot("ns-a", web("ns-a", 3)),
        [snapshot("ns-b", web("ns-b", 5)), snapshot("ns-c")],
    )


@pytest.fixture
def scenario_units(scenario_snapshots):
    baseline, targets = scenario_snapshots
    comparator = FieldComparator()
    return [comparator.compare(baseline, target) for target in targets]
