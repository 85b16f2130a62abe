#!/usr/bin/env python3
"""
KVALIDATOR EXPORTER - Report Serialization
------------------------------------------
Turns a ValidationContext into a plain report document and writes it as
JSON or YAML. The YAML side reuses the round-trip dumper settings used
for Kubernetes manifests so reports diff cleanly.

Author: KValidator Team
Date: 2026-10-17
"""

import io
import json
import logging
from pathlib import Path
from typing import Any, Dict, Union

from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap

from kvalidator.comparison.context import ValidationContext
from kvalidator.core.models import FlatObject, Summary

logger = logging.getLogger("kvalidator.exporter")

JSON_SUFFIXES = (".json",)
YAML_SUFFIXES = (".yaml", ".yml")


class ReportExporter:
    """
    The Reporter: serializes validation results.
    """

    def __init__(self):
        self.yaml = YAML(typ='rt')
        # Standard K8s: 2 spaces, sequences indented 4 (offset 2)
        self.yaml.indent(mapping=2, sequence=4, offset=2)
        self.yaml.width = 4096
        self.preferred_order = ["baselineNamespace", "namespaces", "summary", "objects", "executionTimeMs"]

    def to_dict(self, context: ValidationContext) -> Dict[str, Any]:
        result = context.result
        summary = context.summary or Summary()
        objects = []

        if result is not None:
            for key in sorted(result.objects):
                entry = result.objects[key]
                objects.append({
                    "kind": key.kind,
                    "objectName": key.name,
                    "overallStatus": entry.overall.value,
                    # Only computed cells; the table view fills gaps for display
                    "statuses": {
                        label: entry.statuses[label].to_dict()
                        for label in result.labels if label in entry.statuses
                    },
                })

        return {
            "baselineNamespace": context.baseline_label,
            "namespaces": [context.baseline_label] + list(context.target_labels),
            "summary": summary.to_dict(),
            "objects": objects,
            "executionTimeMs": context.execution_time_ms,
        }

    def _to_commented(self, data: Any) -> Any:
        """Rebuilds plain containers as ruamel nodes in preferred key order."""
        if isinstance(data, dict):
            keys = list(data.keys())

            def sort_logic(key):
                if key in self.preferred_order:
                    return self.preferred_order.index(key)
                return len(self.preferred_order) + keys.index(key)

            node = CommentedMap()
            for key in sorted(keys, key=sort_logic):
                node[key] = self._to_commented(data[key])
            return node
        if isinstance(data, list):
            return [self._to_commented(item) for item in data]
        return data

    def dumps(self, context: ValidationContext, fmt: str = "json") -> str:
        report = self.to_dict(context)
        if fmt == "json":
            return json.dumps(report, indent=2, ensure_ascii=False)
        if fmt == "yaml":
            stream = io.StringIO()
            self.yaml.dump(self._to_commented(report), stream)
            return stream.getvalue()
        raise ValueError(f"Unsupported report format: {fmt}")

    def export(self, context: ValidationContext, path: Union[str, Path]) -> Path:
        """Writes the report; the format follows the file suffix."""
        path = Path(path)
        suffix = path.suffix.lower()
        if suffix in JSON_SUFFIXES:
            fmt = "json"
        elif suffix in YAML_SUFFIXES:
            fmt = "yaml"
        else:
            raise ValueError(f"Unsupported report extension '{path.suffix}' (use .json, .yaml or .yml)")

        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.dumps(context, fmt), encoding="utf-8")
        logger.info(f"Report written to {path}")
        return path


def flat_object_to_dict(obj: FlatObject) -> Dict[str, Any]:
    """Flatten-flow representation of one object."""
    return {
        "kind": obj.kind,
        "name": obj.name,
        "apiVersion": obj.api_version,
        "namespace": obj.namespace,
        "fields": dict(obj.fields),
    }
