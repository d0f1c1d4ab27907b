"""
Configuration Loader (``payroll_config.loader``).

Responsibility
--------------
Loads the payroll ledger YAML file and parses it into a
``PayrollLedgerConfig``.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Top level not a mapping, unknown keys, wrongly typed values or
  out-of-range values -> ``InvalidConfigValueError``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from payroll_config.schema import PayrollLedgerConfig
from payroll_kernel.exceptions import InvalidConfigValueError
from payroll_kernel.logging_config import get_logger

logger = get_logger("config.loader")

# Settings may sit at the top level or under this section key
SECTION_KEY = "payroll_ledger"


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        InvalidConfigValueError: if the document is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise InvalidConfigValueError(str(path), "top level must be a mapping")
    return data


def load_config(path: Path | str) -> PayrollLedgerConfig:
    """Parse a payroll ledger configuration file."""
    path = Path(path)
    data = load_yaml_file(path)
    if SECTION_KEY in data:
        data = data[SECTION_KEY] or {}
        if not isinstance(data, dict):
            raise InvalidConfigValueError(SECTION_KEY, "section must be a mapping")

    config = PayrollLedgerConfig.from_dict(data)
    logger.info("payroll_ledger_config_loaded", extra={"path": str(path)})
    return config
