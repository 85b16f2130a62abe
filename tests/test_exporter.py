import json

import pytest
from ruamel.yaml import YAML

from conftest import comparison, record
from kvalidator.comparison.pipeline import ComparisonPipeline
from kvalidator.core.models import ComparisonUnit, FlatObject
from kvalidator.report.exporter import ReportExporter, flat_object_to_dict


@pytest.fixture
def context(scenario_snapshots):
    baseline, targets = scenario_snapshots
    return ComparisonPipeline().run(baseline, targets)


def test_to_dict_shape(context):
    report = ReportExporter().to_dict(context)

    assert report["baselineNamespace"] == "ns-a"
    assert report["namespaces"] == ["ns-a", "ns-b", "ns-c"]
    assert report["summary"]["totalMissing"] == 1
    assert report["summary"]["objectMatchRate"] == 0.0

    [web] = report["objects"]
    assert web["kind"] == "Deployment"
    assert web["objectName"] == "web"
    assert web["overallStatus"] == "NOK"
    assert list(web["statuses"]) == ["ns-a", "ns-b", "ns-c"]
    assert web["statuses"]["ns-a"] == {"status": "BASELINE", "differenceCount": 0, "details": []}
    assert web["statuses"]["ns-b"]["status"] == "DIFFERENT"
    assert web["statuses"]["ns-b"]["differenceCount"] == 1
    assert web["statuses"]["ns-c"]["status"] == "MISSING"


def test_object_absent_from_one_unit_has_no_made_up_status():
    listed = ComparisonUnit("a", "b")
    listed.add(comparison("web", record("web", "spec.replicas", "MATCH", "3", "3")))
    context = ComparisonPipeline().run_units([listed, ComparisonUnit("a", "c")], "a")

    [web] = ReportExporter().to_dict(context)["objects"]
    assert web["overallStatus"] == "OK"
    assert list(web["statuses"]) == ["a", "b"]
    assert context.summary.total_missing == 0


def test_export_json(context, tmp_path):
    path = ReportExporter().export(context, tmp_path / "out" / "report.json")
    data = json.loads(path.read_text(encoding="utf-8"))
    assert data == ReportExporter().to_dict(context)


def test_export_yaml(context, tmp_path):
    path = ReportExporter().export(context, tmp_path / "report.yaml")
    text = path.read_text(encoding="utf-8")

    assert text.startswith("baselineNamespace: ns-a\n")
    assert "  - ns-b\n" in text
    data = YAML(typ='safe').load(text)
    assert data["objects"][0]["statuses"]["ns-b"]["details"] == ["spec.replicas: 3 → 5"]


def test_unsupported_extension(context, tmp_path):
    with pytest.raises(ValueError):
        ReportExporter().export(context, tmp_path / "report.txt")


def test_flat_object_to_dict():
    obj = FlatObject(kind="ConfigMap", name="cfg", api_version="v1", fields={"kind": "ConfigMap"})
    assert flat_object_to_dict(obj) == {
        "kind": "ConfigMap",
        "name": "cfg",
        "apiVersion": "v1",
        "namespace": None,
        "fields": {"kind": "ConfigMap"},
    }
