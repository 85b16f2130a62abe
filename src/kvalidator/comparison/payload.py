#!/usr/bin/env python3
"""
KVALIDATOR PAYLOAD READER
-------------------------
Reads comparison results produced by an external comparator (the JSON
result of a validation job) into ComparisonUnits.

Expected shape:

    {
      "baselineNamespace": "cluster-a/ns-a",            # optional
      "comparisons": {
        "<left>_vs_<right>": {
          "leftNamespace": "...", "rightNamespace": "...",
          "objectComparisons": {
            "<objectId>": {
              "objectId": "...", "objectType": "Deployment",
              "items": [{"key": "...", "leftValue": "...",
                         "rightValue": "...", "status": "MATCH"}]
            }
          }
        }
      }
    }

Bad items and objects are skipped with a warning. A payload that is not
shaped like the above at the top level raises TypeError.

Author: KValidator Team
Date: 2026-10-17
"""

import logging
from typing import Any, List, Mapping, Optional

from kvalidator.core.models import (
    ComparisonUnit,
    FieldComparisonRecord,
    FieldStatus,
    ObjectComparison,
)

logger = logging.getLogger("kvalidator.payload")

# Spellings used by older result payloads
STATUS_ALIASES = {
    "DIFFERENT": FieldStatus.VALUE_MISMATCH,
    "BOTH_NULL": FieldStatus.MATCH,
}

KEY_SEPARATOR = "_vs_"


def parse_status(value: Any) -> Optional[FieldStatus]:
    if isinstance(value, FieldStatus):
        return value
    text = str(value or "").strip().upper()
    if text in STATUS_ALIASES:
        return STATUS_ALIASES[text]
    try:
        return FieldStatus(text)
    except ValueError:
        return None


def _optional_text(value: Any) -> Optional[str]:
    return None if value is None else str(value)


def parse_object(object_id: str, raw: Mapping[str, Any], unit_name: str) -> Optional[ObjectComparison]:
    object_id = str(raw.get("objectId") or object_id or "").strip()
    if not object_id:
        logger.warning(f"Skipping object without objectId in {unit_name}")
        return None

    kind = str(raw.get("objectType") or raw.get("kind") or "Unknown")
    records = []
    for item in raw.get("items") or []:
        if not isinstance(item, Mapping):
            logger.warning(f"Skipping non-mapping item of {object_id} in {unit_name}")
            continue
        path = item.get("key") or item.get("path") or item.get("fieldPath")
        if not path:
            logger.warning(f"Skipping item without key of {object_id} in {unit_name}")
            continue
        status = parse_status(item.get("status"))
        if status is None:
            logger.warning(f"Skipping {object_id}:{path} with unknown status {item.get('status')!r}")
            continue
        records.append(FieldComparisonRecord(
            object_id=object_id,
            field_path=str(path),
            status=status,
            left_value=_optional_text(item.get("leftValue")),
            right_value=_optional_text(item.get("rightValue")),
            kind=kind,
        ))

    obj = ObjectComparison(object_id=object_id, kind=kind, records=records)
    # Sentinel record ("<objectId>": exists) -> explicit presence
    obj.presence = obj.resolved_presence()
    return obj


def parse_units(payload: Any) -> List[ComparisonUnit]:
    """Converts a result payload into ComparisonUnits, preserving order."""
    if not isinstance(payload, Mapping):
        raise TypeError(f"Comparison payload must be a mapping, got {type(payload).__name__}")

    comparisons = payload.get("comparisons")
    if not isinstance(comparisons, Mapping):
        raise TypeError("Comparison payload must contain a 'comparisons' mapping")

    units = []
    for unit_name, raw in comparisons.items():
        if not isinstance(raw, Mapping):
            logger.warning(f"Skipping malformed comparison {unit_name}")
            continue

        left = raw.get("leftNamespace") or ""
        right = raw.get("rightNamespace") or ""
        if not left or not right:
            parts = str(unit_name).split(KEY_SEPARATOR, 1)
            left = left or parts[0]
            right = right or (parts[1] if len(parts) > 1 else "")
        if not left or not right:
            logger.warning(f"Skipping comparison {unit_name}: cannot determine namespace labels")
            continue

        unit = ComparisonUnit(left_label=str(left), right_label=str(right))
        objects = raw.get("objectComparisons") or {}
        if not isinstance(objects, Mapping):
            logger.warning(f"Skipping comparison {unit_name}: 'objectComparisons' is not a mapping")
            continue

        for object_id, raw_obj in objects.items():
            if not isinstance(raw_obj, Mapping):
                logger.warning(f"Skipping malformed object {object_id} in {unit_name}")
                continue
            obj = parse_object(object_id, raw_obj, str(unit_name))
            if obj is not None:
                unit.add(obj)

        units.append(unit)

    logger.debug(f"Parsed {len(units)} comparison units")
    return units


def payload_baseline(payload: Any) -> Optional[str]:
    """Baseline label explicitly designated in the payload, if any."""
    if isinstance(payload, Mapping):
        value = payload.get("baselineNamespace") or payload.get("baseline")
        if isinstance(value, str) and value:
            return value
    return None
