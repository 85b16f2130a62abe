#!/usr/bin/env python3
"""
KVALIDATOR FIELD COMPARATOR
---------------------------
Compares two NamespaceSnapshots path by path and emits one
FieldComparisonRecord per path in the union of both flat maps.

Objects present on only one side are marked on the ObjectComparison
itself (presence) and carry a single sentinel record keyed by the
object id.

Author: KValidator Team
Date: 2026-10-17
"""

import logging
from typing import Dict, List, Optional

from kvalidator.core.models import (
    EXISTS_MARKER,
    ComparisonUnit,
    FieldComparisonRecord,
    FieldStatus,
    FlatObject,
    NamespaceSnapshot,
    ObjectComparison,
    ObjectPresence,
)

logger = logging.getLogger("kvalidator.comparator")


def determine_status(left: Optional[str], right: Optional[str]) -> FieldStatus:
    if left is None:
        return FieldStatus.ONLY_IN_RIGHT
    if right is None:
        return FieldStatus.ONLY_IN_LEFT
    return FieldStatus.MATCH if left == right else FieldStatus.VALUE_MISMATCH


def sentinel_record(object_id: str, kind: str, presence: ObjectPresence) -> FieldComparisonRecord:
    if presence is ObjectPresence.LEFT_ONLY:
        return FieldComparisonRecord(object_id, object_id, FieldStatus.ONLY_IN_LEFT,
                                     left_value=EXISTS_MARKER, kind=kind)
    return FieldComparisonRecord(object_id, object_id, FieldStatus.ONLY_IN_RIGHT,
                                 right_value=EXISTS_MARKER, kind=kind)


class FieldComparator:
    """
    Pairwise comparison of a baseline snapshot against one target.
    Ignore rules are not applied here.
    """

    def compare(self, left: NamespaceSnapshot, right: NamespaceSnapshot) -> ComparisonUnit:
        unit = ComparisonUnit(left_label=left.label, right_label=right.label)

        keys = list(left.objects)
        keys.extend(k for k in right.objects if k not in left.objects)

        for key in keys:
            unit.add(self.compare_objects(left.objects.get(key), right.objects.get(key)))

        logger.debug(f"Compared {left.label} vs {right.label}: {len(unit.objects)} objects")
        return unit

    def compare_objects(self, left: Optional[FlatObject],
                        right: Optional[FlatObject]) -> ObjectComparison:
        reference = left if left is not None else right
        if reference is None:
            raise ValueError("compare_objects needs at least one object")

        comparison = ObjectComparison(object_id=reference.name, kind=reference.kind)

        if left is None or right is None:
            comparison.presence = ObjectPresence.RIGHT_ONLY if left is None else ObjectPresence.LEFT_ONLY
            comparison.records.append(
                sentinel_record(reference.name, reference.kind, comparison.presence)
            )
            return comparison

        comparison.records = self.compare_fields(reference.name, reference.kind,
                                                 left.fields, right.fields)
        return comparison

    def compare_fields(self, object_id: str, kind: str,
                       left: Dict[str, str], right: Dict[str, str]) -> List[FieldComparisonRecord]:
        records = []
        for path in sorted(set(left) | set(right)):
            lv, rv = left.get(path), right.get(path)
            records.append(FieldComparisonRecord(
                object_id=object_id,
                field_path=path,
                status=determine_status(lv, rv),
                left_value=lv,
                right_value=rv,
                kind=kind,
            ))
        return records
