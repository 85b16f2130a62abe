#!/usr/bin/env python3
"""
KVALIDATOR CORE MODELS
----------------------
Defines the data structures shared by the flattener, the comparator,
the reconciler and the summary aggregator. Every model here is created
fresh per validation run and never mutated once handed downstream.

Author: KValidator Team
Date: 2026-10-17
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

# Value the comparator stores on the sentinel record of a one-sided object
EXISTS_MARKER = "exists"


class FieldStatus(str, Enum):
    """Outcome of comparing one flat path between baseline and target."""
    MATCH = "MATCH"
    ONLY_IN_LEFT = "ONLY_IN_LEFT"
    ONLY_IN_RIGHT = "ONLY_IN_RIGHT"
    VALUE_MISMATCH = "VALUE_MISMATCH"


class ObjectPresence(str, Enum):
    """Where an object exists within one (baseline, target) comparison."""
    BOTH = "BOTH"
    LEFT_ONLY = "LEFT_ONLY"      # absent in target
    RIGHT_ONLY = "RIGHT_ONLY"    # absent in baseline


class NamespaceStatus(str, Enum):
    BASELINE = "BASELINE"
    IDENTICAL = "IDENTICAL"
    DIFFERENT = "DIFFERENT"
    MISSING = "MISSING"
    EXTRA = "EXTRA"


class OverallStatus(str, Enum):
    OK = "OK"
    NOK = "NOK"


@dataclass(frozen=True, order=True)
class ObjectKey:
    """Identifies a logical resource regardless of the namespace defining it."""
    kind: str
    name: str

    def __str__(self) -> str:
        return f"{self.kind}/{self.name}"


@dataclass(frozen=True)
class FlatObject:
    """
    A manifest reduced to a flat path -> string map.

    `fields` is wrapped in a read-only mapping proxy on construction so the
    object cannot be altered after the flattener hands it over.
    """
    kind: str
    name: str
    api_version: str = ""
    namespace: Optional[str] = None
    fields: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "fields", MappingProxyType(dict(self.fields)))

    @property
    def key(self) -> ObjectKey:
        return ObjectKey(self.kind, self.name)

    def __len__(self) -> int:
        return len(self.fields)


@dataclass(frozen=True)
class FieldComparisonRecord:
    """One compared flat path, as produced by the field comparator."""
    object_id: str
    field_path: str
    status: FieldStatus
    left_value: Optional[str] = None
    right_value: Optional[str] = None
    kind: Optional[str] = None

    @property
    def is_sentinel(self) -> bool:
        """True for the record standing in for a whole one-sided object."""
        return self.field_path == self.object_id and self.status in (
            FieldStatus.ONLY_IN_LEFT, FieldStatus.ONLY_IN_RIGHT
        )


@dataclass
class ObjectComparison:
    """All records of one object inside one comparison unit."""
    object_id: str
    kind: str = "Unknown"
    presence: ObjectPresence = ObjectPresence.BOTH
    records: List[FieldComparisonRecord] = field(default_factory=list)

    @property
    def key(self) -> ObjectKey:
        return ObjectKey(self.kind, self.object_id)

    def resolved_presence(self) -> ObjectPresence:
        """
        Explicit presence wins; otherwise a sentinel record among the
        records marks the object as one-sided.
        """
        if self.presence is not ObjectPresence.BOTH:
            return self.presence
        for record in self.records:
            if record.object_id == self.object_id and record.is_sentinel:
                if record.status is FieldStatus.ONLY_IN_LEFT:
                    return ObjectPresence.LEFT_ONLY
                return ObjectPresence.RIGHT_ONLY
        return ObjectPresence.BOTH


@dataclass
class ComparisonUnit:
    """Records grouped by one (left label, right label) pair."""
    left_label: str
    right_label: str
    objects: Dict[str, ObjectComparison] = field(default_factory=dict)

    @property
    def pair(self) -> Tuple[str, str]:
        return self.left_label, self.right_label

    def add(self, comparison: ObjectComparison) -> None:
        # Keyed by kind as well: a Service and a Deployment may share a name
        self.objects[str(comparison.key)] = comparison


@dataclass
class NamespaceSnapshot:
    """Flattened objects collected for one side of a comparison."""
    label: str
    objects: Dict[ObjectKey, FlatObject] = field(default_factory=dict)

    def add(self, obj: FlatObject) -> bool:
        """Adds an object, returning True if it replaced an existing key."""
        replaced = obj.key in self.objects
        self.objects[obj.key] = obj
        return replaced

    def __len__(self) -> int:
        return len(self.objects)


@dataclass
class ObjectStatus:
    """Status of one object in one namespace column."""
    status: NamespaceStatus
    difference_count: int = 0
    details: List[str] = field(default_factory=list)
    records: List[FieldComparisonRecord] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            "differenceCount": self.difference_count,
            "details": list(self.details),
        }


@dataclass
class ObjectResult:
    """Per-namespace statuses of one object plus its overall verdict."""
    key: ObjectKey
    statuses: Dict[str, ObjectStatus] = field(default_factory=dict)
    overall: OverallStatus = OverallStatus.OK
    exists_in_baseline: bool = False


@dataclass
class ReconciliationResult:
    baseline_label: str
    target_labels: List[str] = field(default_factory=list)
    objects: Dict[ObjectKey, ObjectResult] = field(default_factory=dict)

    @property
    def labels(self) -> List[str]:
        """Baseline first, then the targets in the order they were seen."""
        return [self.baseline_label] + list(self.target_labels)

    def status_for(self, key: ObjectKey, label: str) -> ObjectStatus:
        """
        Looks up a cell of the status matrix. A target column without an
        entry is shown as MISSING; this placeholder is for display only and
        never feeds the overall status or the exported report.
        """
        result = self.objects.get(key)
        if result and label in result.statuses:
            return result.statuses[label]
        return ObjectStatus(NamespaceStatus.MISSING)


@dataclass(frozen=True)
class Summary:
    """Report-ready aggregate counters; rates are percentages to one decimal."""
    total_objects: int = 0
    total_fields: int = 0
    total_matches: int = 0
    total_ignored: int = 0
    total_differences: int = 0
    total_missing: int = 0
    total_extra: int = 0
    matched_objects: int = 0
    ok_objects: int = 0
    nok_objects: int = 0
    field_match_rate: float = 0.0
    object_match_rate: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalObjects": self.total_objects,
            "totalFields": self.total_fields,
            "totalMatches": self.total_matches,
            "totalIgnored": self.total_ignored,
            "totalDifferences": self.total_differences,
            "totalMissing": self.total_missing,
            "totalExtra": self.total_extra,
            "matchedObjects": self.matched_objects,
            "okObjects": self.ok_objects,
            "nokObjects": self.nok_objects,
            "fieldMatchRate": self.field_match_rate,
            "objectMatchRate": self.object_match_rate,
        }
