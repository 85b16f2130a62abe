#!/usr/bin/env python3
"""
KVALIDATOR IGNORE RULES - The Filter
------------------------------------
Decides which flat paths are left out of match/mismatch accounting.
Ignored fields are still counted, separately, as "ignored".

Built-in default rules and user supplied custom rules live in one list;
each rule carries its origin so removal can refuse defaults with a single
check.

Author: KValidator Team
Date: 2026-10-17
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Tuple

from kvalidator.core.errors import ReadOnlyRuleError

DEFAULT_IGNORE_FIELDS: Tuple[str, ...] = (
    "metadata.creationTimestamp",
    "metadata.generation",
    "metadata.resourceVersion",
    "metadata.uid",
    "metadata.selfLink",
    "metadata.managedFields",
    "metadata.namespace",
    "metadata.annotations",
    "status",
    "spec.template.metadata.creationTimestamp",
    "spec.clusterIP",
    "spec.clusterIPs",
    "spec.ipFamilies",
    "spec.ipFamilyPolicy",
    "spec.template.spec.nodeName",
    "spec.template.spec.restartPolicy",
    "spec.template.spec.dnsPolicy",
    "spec.template.spec.schedulerName",
    "spec.template.spec.securityContext",
    "spec.template.spec.enableServiceLinks",
)


class RuleOrigin(str, Enum):
    DEFAULT = "default"
    CUSTOM = "custom"


@dataclass(frozen=True)
class IgnoreRule:
    """
    A path prefix excluded from comparison accounting.

    `metadata.annotations` ignores `metadata.annotations`,
    `metadata.annotations.foo` and `metadata.annotations[0]`, but not
    `metadata.annotationsExtra`. A trailing `.*` only matches children.
    """
    path: str
    origin: RuleOrigin = RuleOrigin.CUSTOM
    resource_type: Optional[str] = None

    @property
    def is_default(self) -> bool:
        return self.origin is RuleOrigin.DEFAULT

    def applies_to(self, kind: Optional[str]) -> bool:
        return not self.resource_type or kind is None or self.resource_type == kind

    def matches(self, field_path: str, kind: Optional[str] = None) -> bool:
        if not field_path or not self.path or not self.applies_to(kind):
            return False

        if self.path.endswith(".*"):
            return field_path.startswith(self.path[:-1])

        if field_path == self.path:
            return True
        return field_path.startswith(self.path + ".") or field_path.startswith(self.path + "[")


def is_ignored(field_path: str, rules: Iterable[IgnoreRule], kind: Optional[str] = None) -> bool:
    """Pure predicate: does any rule cover `field_path`?"""
    return any(rule.matches(field_path, kind) for rule in rules)


class IgnoreRuleSet:
    """
    Ordered set of ignore rules: the read-only defaults followed by the
    custom rules added by the user.
    """

    def __init__(self, custom: Iterable[str] = (), include_defaults: bool = True):
        self._rules: List[IgnoreRule] = []
        if include_defaults:
            self._rules.extend(IgnoreRule(p, RuleOrigin.DEFAULT) for p in DEFAULT_IGNORE_FIELDS)
        for path in custom:
            self.add(path)

    @property
    def rules(self) -> Tuple[IgnoreRule, ...]:
        return tuple(self._rules)

    @property
    def defaults(self) -> Tuple[IgnoreRule, ...]:
        return tuple(r for r in self._rules if r.is_default)

    @property
    def custom(self) -> Tuple[IgnoreRule, ...]:
        return tuple(r for r in self._rules if not r.is_default)

    def find(self, path: str) -> Optional[IgnoreRule]:
        return next((r for r in self._rules if r.path == path), None)

    def add(self, path: str, resource_type: Optional[str] = None) -> bool:
        """Adds a custom rule. Returns False if an identical rule already exists."""
        path = (path or "").strip()
        if not path:
            raise ValueError("Ignore rule path must not be empty")
        if any(r.path == path and r.resource_type == resource_type for r in self._rules):
            return False
        self._rules.append(IgnoreRule(path, RuleOrigin.CUSTOM, resource_type))
        return True

    def remove(self, path: str) -> IgnoreRule:
        """Removes a custom rule. Default rules are read-only."""
        rule = self.find(path)
        if rule is None:
            raise KeyError(path)
        if rule.is_default:
            raise ReadOnlyRuleError(f"'{path}' is a default ignore rule and cannot be removed")
        self._rules.remove(rule)
        return rule

    def reset(self) -> None:
        """Drops every custom rule; defaults stay."""
        self._rules = [r for r in self._rules if r.is_default]

    def is_ignored(self, field_path: str, kind: Optional[str] = None) -> bool:
        return is_ignored(field_path, self._rules, kind)

    def __len__(self) -> int:
        return len(self._rules)

    def __iter__(self):
        return iter(self._rules)

    def __contains__(self, path: str) -> bool:
        return self.find(path) is not None
