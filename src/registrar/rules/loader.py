"""Loading student status rule sets from YAML files."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from registrar.config import ConfigError


@dataclass
class RuleSetConfig:
    """Statuses and allowed transitions, keyed by status name.

    Example file::

        statuses: [Active, On Leave, Withdrawn]
        transitions:
          Active: [On Leave, Withdrawn]
          On Leave: [Active]
    """

    statuses: list[str] = field(default_factory=list)
    transitions: dict[str, list[str]] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RuleSetConfig:
        """Create rule set from dictionary.

        Statuses named only in ``transitions`` are added to ``statuses``.

        Raises:
            ConfigError: If the structure is invalid.
        """
        statuses = data.get("statuses", []) or []
        transitions = data.get("transitions", {}) or {}

        if not isinstance(statuses, list) or not all(isinstance(s, str) for s in statuses):
            raise ConfigError("'statuses' must be a list of status names")
        if not isinstance(transitions, dict):
            raise ConfigError("'transitions' must map a status name to a list of status names")

        names = list(dict.fromkeys(statuses))
        parsed: dict[str, list[str]] = {}
        for source, targets in transitions.items():
            if targets is None:
                targets = []
            if not isinstance(targets, list) or not all(isinstance(t, str) for t in targets):
                raise ConfigError(f"Transitions of '{source}' must be a list of status names")
            parsed[str(source)] = list(dict.fromkeys(targets))
            for name in [str(source), *targets]:
                if name not in names:
                    names.append(name)

        return cls(statuses=names, transitions=parsed)


def load_rules_file(path: Path | str) -> RuleSetConfig:
    """Load a rule set from a YAML file.

    Args:
        path: Path to the rules file.

    Returns:
        Parsed rule set.

    Raises:
        ConfigError: If file doesn't exist or is invalid.
    """
    path = Path(path)

    if not path.exists():
        raise ConfigError(f"Rules file not found: {path}")

    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return RuleSetConfig()
    if not isinstance(data, dict):
        raise ConfigError(f"Rules file must be a YAML mapping, got {type(data).__name__}")

    return RuleSetConfig.from_dict(data)
