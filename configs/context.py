"""
CDK context loader for the MySQL unit.

Reads the "mysql" block from cdk.json or `cdk synth -c mysql='{...}'`.
Values passed on the command line arrive as strings and are coerced here.
"""

import json
import logging

from constructs import Node

from configs.mysql import MysqlConfigError

logger = logging.getLogger(__name__)

MYSQL_CONTEXT_KEY = "mysql"

_STRING_KEYS = (
    "db_name",
    "db_username",
    "engine_version",
    "instance_type",
    "backup_window",
    "preferred_maintenance_window",
    "developer_ip",
)
_BOOL_KEYS = ("deletion_protection", "developer_mode")
_INT_KEYS = ("backup_retention_days",)
_LIST_KEYS = ("ingress_sources",)

KNOWN_KEYS = frozenset(_STRING_KEYS + _BOOL_KEYS + _INT_KEYS + _LIST_KEYS)


def _to_bool(key: str, value) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "1", "yes"):
            return True
        if lowered in ("false", "0", "no", ""):
            return False
    raise MysqlConfigError(key, f"expected a boolean, got {value!r}")


def _to_int(key: str, value) -> int:
    if isinstance(value, bool):
        raise MysqlConfigError(key, f"expected an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise MysqlConfigError(key, f"expected an integer, got {value!r}") from e


def _to_list(key: str, value) -> list:
    if isinstance(value, (list, tuple)):
        return list(value)
    if isinstance(value, str):
        return [item.strip() for item in value.split(",") if item.strip()]
    raise MysqlConfigError(key, f"expected a list, got {value!r}")


def mysql_overrides_from_context(node: Node) -> dict:
    """
    Load MySQL overrides from CDK context.

    Returns:
        dict: Keyword overrides for MysqlInstance; keys absent from context are omitted

    Raises:
        MysqlConfigError: If the block or one of its values has the wrong type
    """
    raw = node.try_get_context(MYSQL_CONTEXT_KEY)
    if raw is None:
        return {}
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError as e:
            raise MysqlConfigError(MYSQL_CONTEXT_KEY, "context value is not valid JSON") from e
    if not isinstance(raw, dict):
        raise MysqlConfigError(MYSQL_CONTEXT_KEY, f"expected a mapping, got {type(raw).__name__}")

    overrides = {}
    for key, value in raw.items():
        if key not in KNOWN_KEYS:
            logger.warning("Ignoring unknown mysql context key %r", key)
            continue
        if value is None:
            continue
        if key in _BOOL_KEYS:
            overrides[key] = _to_bool(key, value)
        elif key in _INT_KEYS:
            overrides[key] = _to_int(key, value)
        elif key in _LIST_KEYS:
            overrides[key] = _to_list(key, value)
        else:
            overrides[key] = str(value)
    return overrides
