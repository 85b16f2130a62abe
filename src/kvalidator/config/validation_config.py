#!/usr/bin/env python3
"""
KVALIDATOR VALIDATION CONFIG
----------------------------
Loads and saves `validation-config.yaml`:

    ignoreFields:
      - metadata.labels.version
      - path: spec.replicas
        resourceType: Deployment

Entries may be plain paths or mappings scoped to one resource kind.
Entries repeating a default rule are kept; the rule set skips them while
defaults are active.

Author: KValidator Team
Date: 2026-10-17
"""

import shutil
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Optional, Union

from ruamel.yaml import YAML, YAMLError
from ruamel.yaml.comments import CommentedMap, CommentedSeq

from kvalidator.core.errors import ConfigError
from kvalidator.rules.ignore import DEFAULT_IGNORE_FIELDS, IgnoreRule, IgnoreRuleSet

logger = logging.getLogger("kvalidator.config")

CONFIG_FILENAME = "validation-config.yaml"
BACKUP_SUFFIX = ".backup"


@dataclass
class ValidationConfig:
    """Custom ignore rules plus where they were read from."""
    ignore_fields: List[IgnoreRule] = field(default_factory=list)
    source: Optional[Path] = None

    @property
    def paths(self) -> List[str]:
        return [rule.path for rule in self.ignore_fields]

    def rule_set(self, include_defaults: bool = True,
                 extra: Optional[List[str]] = None) -> IgnoreRuleSet:
        """Defaults (optional), then config rules, then extra paths."""
        rules = IgnoreRuleSet(include_defaults=include_defaults)
        for rule in self.ignore_fields:
            rules.add(rule.path, rule.resource_type)
        for path in extra or []:
            rules.add(path)
        return rules

    def shadowed(self) -> List[IgnoreRule]:
        """Entries that repeat an unscoped default rule."""
        return [rule for rule in self.ignore_fields
                if rule.resource_type is None and rule.path in DEFAULT_IGNORE_FIELDS]

    @classmethod
    def from_rule_set(cls, rules: IgnoreRuleSet, source: Optional[Path] = None) -> "ValidationConfig":
        return cls(ignore_fields=list(rules.custom), source=source)


def _parse_entry(entry: Any, source: Path) -> Optional[IgnoreRule]:
    if isinstance(entry, str):
        path, resource_type = entry.strip(), None
    elif isinstance(entry, dict):
        path = str(entry.get("path") or "").strip()
        resource_type = entry.get("resourceType") or None
    else:
        logger.warning(f"Ignoring unsupported ignoreFields entry {entry!r} in {source}")
        return None

    if not path:
        logger.warning(f"Ignoring empty ignoreFields entry in {source}")
        return None
    return IgnoreRule(path, resource_type=str(resource_type) if resource_type else None)


class ConfigLoader:
    """
    Reads and writes validation configs. Saving keeps one backup of the
    previous file next to it.
    """

    def __init__(self):
        self.reader = YAML(typ="safe")
        self.writer = YAML(typ="rt")
        self.writer.indent(mapping=2, sequence=4, offset=2)
        self.writer.width = 4096

    def resolve(self, path: Optional[Union[str, Path]] = None) -> Path:
        return Path(path) if path else Path.cwd() / CONFIG_FILENAME

    def load(self, path: Optional[Union[str, Path]] = None) -> ValidationConfig:
        """
        Loads the config at `path`, or ./validation-config.yaml when no path
        is given. A missing file yields an empty config.
        """
        config_path = self.resolve(path)
        if not config_path.exists():
            if path:
                logger.warning(f"Config file not found: {config_path}; using default rules only")
            return ValidationConfig(source=config_path)

        try:
            data = self.reader.load(config_path.read_text(encoding="utf-8-sig"))
        except (OSError, UnicodeDecodeError, YAMLError) as e:
            raise ConfigError(f"Cannot read config {config_path}: {e}") from e

        if data is None:
            return ValidationConfig(source=config_path)
        if not isinstance(data, dict):
            raise ConfigError(f"Config {config_path} must be a mapping with 'ignoreFields'")

        entries = data.get("ignoreFields") or []
        if not isinstance(entries, list):
            raise ConfigError(f"'ignoreFields' in {config_path} must be a list")

        rules: List[IgnoreRule] = []
        for entry in entries:
            rule = _parse_entry(entry, config_path)
            if rule is not None and rule not in rules:
                rules.append(rule)

        logger.debug(f"Loaded {len(rules)} custom ignore rules from {config_path}")
        return ValidationConfig(ignore_fields=rules, source=config_path)

    def to_document(self, config: ValidationConfig) -> CommentedMap:
        entries = CommentedSeq()
        for rule in config.ignore_fields:
            if rule.resource_type:
                item = CommentedMap()
                item["path"] = rule.path
                item["resourceType"] = rule.resource_type
                entries.append(item)
            else:
                entries.append(rule.path)
        doc = CommentedMap()
        doc["ignoreFields"] = entries
        return doc

    def save(self, config: ValidationConfig, path: Optional[Union[str, Path]] = None) -> Path:
        """Writes the config, copying any existing file to `<name>.backup` first."""
        config_path = self.resolve(path or config.source)
        if config_path.exists():
            backup = config_path.with_name(config_path.name + BACKUP_SUFFIX)
            try:
                shutil.copy2(config_path, backup)
            except OSError as e:
                raise ConfigError(f"Backup of {config_path} failed: {e}") from e

        config_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            with open(config_path, "w", encoding="utf-8") as f:
                self.writer.dump(self.to_document(config), f)
        except OSError as e:
            raise ConfigError(f"Cannot write config {config_path}: {e}") from e

        config.source = config_path
        logger.info(f"Saved {len(config.ignore_fields)} custom ignore rules to {config_path}")
        return config_path

    def restore_backup(self, path: Optional[Union[str, Path]] = None) -> Path:
        """Puts `<name>.backup` back in place of the config file."""
        config_path = self.resolve(path)
        backup = config_path.with_name(config_path.name + BACKUP_SUFFIX)
        if not backup.exists():
            raise ConfigError(f"No backup found for {config_path}")
        shutil.copy2(backup, config_path)
        logger.info(f"Restored {config_path} from {backup.name}")
        return config_path
