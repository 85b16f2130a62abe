import datetime

import pytest
from ruamel.yaml import YAML

from kvalidator.collector.flattener import PathFlattener, flatten, to_text

DEPLOYMENT = """
apiVersion: apps/v1
kind: Deployment
metadata:
  name: web
  namespace: ns-a
  labels:
    app: web
spec:
  replicas: 3
  paused: false
  template:
    spec:
      containers:
        - name: nginx
          image: nginx:1.25
          ports:
            - containerPort: 80
        - name: sidecar
          image: envoy:1.29
status:
  readyReplicas: 3
"""


def load(text):
    return YAML(typ='safe').load(text)


def test_flatten_paths():
    obj = flatten(load(DEPLOYMENT))

    assert obj.kind == "Deployment"
    assert obj.name == "web"
    assert obj.namespace == "ns-a"
    assert obj.api_version == "apps/v1"

    assert obj.fields["kind"] == "Deployment"
    assert obj.fields["apiVersion"] == "apps/v1"
    assert obj.fields["metadata.name"] == "web"
    assert obj.fields["metadata.labels.app"] == "web"
    assert obj.fields["spec.replicas"] == "3"
    assert obj.fields["spec.template.spec.containers[0].image"] == "nginx:1.25"
    assert obj.fields["spec.template.spec.containers[0].ports[0].containerPort"] == "80"
    assert obj.fields["spec.template.spec.containers[1].name"] == "sidecar"


def test_status_is_not_flattened_by_default():
    obj = flatten(load(DEPLOYMENT))
    assert not any(path.startswith("status") for path in obj.fields)


def test_status_flattened_when_section_requested():
    flattener = PathFlattener(sections=("metadata", "spec", "status"))
    obj = flattener.flatten(load(DEPLOYMENT))
    assert obj.fields["status.readyReplicas"] == "3"


def test_booleans_use_yaml_spelling():
    obj = flatten(load(DEPLOYMENT))
    assert obj.fields["spec.paused"] == "false"


@pytest.mark.parametrize("value,expected", [
    (True, "true"),
    (False, "false"),
    (3, "3"),
    (1.5, "1.5"),
    ("text", "text"),
    (datetime.datetime(2024, 1, 1, tzinfo=datetime.timezone.utc), "2024-01-01T00:00:00Z"),
    (datetime.datetime(2024, 1, 1, 12, 30), "2024-01-01T12:30:00"),
    (datetime.date(2024, 1, 1), "2024-01-01"),
])
def test_to_text(value, expected):
    assert to_text(value) == expected


def test_timestamps_keep_iso_form():
    doc = load("kind: Job\nmetadata:\n  name: nightly\nspec:\n  startDate: 2024-01-01\n")
    assert flatten(doc).fields["spec.startDate"] == "2024-01-01"


def test_flatten_is_idempotent():
    """
    IDEMPOTENCY TEST: Flattening the same document twice gives equal maps.
    """
    doc = load(DEPLOYMENT)
    assert dict(flatten(doc).fields) == dict(flatten(doc).fields)


def test_list_order_changes_paths():
    first = load(DEPLOYMENT)
    second = load(DEPLOYMENT)
    containers = second["spec"]["template"]["spec"]["containers"]
    containers.reverse()

    a, b = flatten(first).fields, flatten(second).fields
    assert a != b
    assert a["spec.template.spec.containers[0].name"] == "nginx"
    assert b["spec.template.spec.containers[0].name"] == "sidecar"


def test_none_and_empty_collections_produce_no_paths():
    doc = {
        "kind": "ConfigMap",
        "metadata": {"name": "cfg", "annotations": None, "labels": {}},
        "spec": {"items": [], "values": [None, "x"]},
    }
    fields = flatten(doc).fields

    assert "metadata.annotations" not in fields
    assert not any(p.startswith("metadata.labels") for p in fields)
    assert not any(p.startswith("spec.items") for p in fields)
    assert "spec.values[0]" not in fields
    assert fields["spec.values[1]"] == "x"


@pytest.mark.parametrize("doc", [
    None,
    "just a string",
    ["a", "list"],
    {"metadata": {"name": "no-kind"}},
    {"kind": "Service"},
    {"kind": "Service", "metadata": {}},
    {"kind": "Service", "metadata": {"name": ""}},
    {"kind": "Service", "metadata": "not-a-map"},
])
def test_invalid_documents_are_skipped(doc):
    assert flatten(doc) is None


def test_fields_are_read_only():
    obj = flatten(load(DEPLOYMENT))
    with pytest.raises(TypeError):
        obj.fields["spec.replicas"] = "5"


def test_flatten_value_prefix():
    fields = PathFlattener().flatten_value({"a": [1, {"b": True}]}, "root")
    assert fields == {"root.a[0]": "1", "root.a[1].b": "true"}
