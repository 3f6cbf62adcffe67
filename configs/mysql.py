"""
MySQL unit configuration - defaults and override resolution
"""

import re
from dataclasses import dataclass
from typing import Any, Optional, Sequence, Union

from aws_cdk import aws_ec2 as ec2, aws_rds as rds

DB_PORT = 3306

DEFAULT_DB_NAME = "elixirdb"
DEFAULT_DB_USERNAME = "elixir"
DEFAULT_ENGINE_VERSION = rds.MysqlEngineVersion.VER_8_0
DEFAULT_BACKUP_RETENTION_DAYS = 14
DEFAULT_DELETION_PROTECTION = False
DEFAULT_BACKUP_WINDOW = "00:15-01:15"
DEFAULT_MAINTENANCE_WINDOW = "Sun:23:45-Mon:00:15"

_INSTANCE_TYPE_RE = re.compile(r"^(?:db\.)?((?!db\.)[a-z][a-z0-9-]*\.[a-z0-9]+)$")
_ENGINE_VERSION_RE = re.compile(r"^(\d+\.\d+)(?:\.\d+)?$")


class MysqlConfigError(ValueError):
    """Raised when the MySQL unit cannot be configured."""

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(f"{field}: {message}")


@dataclass(frozen=True)
class MysqlProps:
    """
    Effective configuration of a MySQL unit after defaults are applied.

    Attributes:
        vpc: VPC the instance and its security group live in
        vpc_subnets: Subnet selection for the DB subnet group
        instance_type: Instance size class
        db_name: Name of the initial database
        db_username: Admin username stored in the credentials secret
        engine_version: MySQL engine version
        backup_retention_days: Documented retention; the instance uses a fixed 7 days
        deletion_protection: Enable deletion protection on the instance
        backup_window: Preferred backup window (HH:MM-HH:MM)
        preferred_maintenance_window: Preferred maintenance window (Ddd:HH:MM-Ddd:HH:MM)
        ingress_sources: Extra sources allowed to reach the database port
        developer_ip: Developer IPv4 address granted access (development only)
    """
    vpc: ec2.IVpc
    vpc_subnets: ec2.SubnetSelection
    instance_type: ec2.InstanceType
    db_name: str = DEFAULT_DB_NAME
    db_username: str = DEFAULT_DB_USERNAME
    engine_version: rds.MysqlEngineVersion = DEFAULT_ENGINE_VERSION
    backup_retention_days: int = DEFAULT_BACKUP_RETENTION_DAYS
    deletion_protection: bool = DEFAULT_DELETION_PROTECTION
    backup_window: str = DEFAULT_BACKUP_WINDOW
    preferred_maintenance_window: str = DEFAULT_MAINTENANCE_WINDOW
    ingress_sources: tuple = ()
    developer_ip: Optional[str] = None


def to_instance_type(value: Union[ec2.InstanceType, str]) -> ec2.InstanceType:
    """
    Narrow an instance size class to an ec2.InstanceType.

    Accepts an InstanceType or a string such as "t3.small" or "db.t3.small".
    """
    if isinstance(value, ec2.InstanceType):
        return value
    if isinstance(value, str):
        match = _INSTANCE_TYPE_RE.match(value.strip())
        if match:
            return ec2.InstanceType(match.group(1))
    raise MysqlConfigError("instance_type", f"unsupported instance type {value!r}")


def to_engine_version(value: Union[rds.MysqlEngineVersion, str]) -> rds.MysqlEngineVersion:
    """
    Narrow an engine version to an rds.MysqlEngineVersion.

    Strings are "major.minor" or "major.minor.patch", e.g. "8.0" or "8.0.35".
    """
    if isinstance(value, rds.MysqlEngineVersion):
        return value
    if isinstance(value, str):
        match = _ENGINE_VERSION_RE.match(value.strip())
        if match:
            return rds.MysqlEngineVersion.of(value.strip(), match.group(1))
    raise MysqlConfigError("engine_version", f"unsupported engine version {value!r}")


def resolve_mysql_props(
    *,
    vpc: Optional[ec2.IVpc] = None,
    vpc_subnets: Optional[ec2.SubnetSelection] = None,
    instance_type: Union[ec2.InstanceType, str, None] = None,
    db_name: Optional[str] = None,
    db_username: Optional[str] = None,
    engine_version: Union[rds.MysqlEngineVersion, str, None] = None,
    backup_retention_days: Optional[int] = None,
    deletion_protection: Optional[bool] = None,
    backup_window: Optional[str] = None,
    preferred_maintenance_window: Optional[str] = None,
    ingress_sources: Optional[Sequence[Any]] = None,
    developer_ip: Optional[str] = None,
) -> MysqlProps:
    """
    Merge caller overrides with the fixed defaults.

    Every optional field falls back to its default when left as None.
    vpc, vpc_subnets and instance_type have no default.

    Raises:
        MysqlConfigError: If a mandatory field is missing or a value cannot be narrowed
    """
    # Mandatory fields first so nothing is built for an incomplete config
    if vpc is None:
        raise MysqlConfigError("vpc", "a VPC is required")
    if vpc_subnets is None:
        raise MysqlConfigError("vpc_subnets", "a subnet selection is required")
    if instance_type is None:
        raise MysqlConfigError("instance_type", "an instance type is required")
    # A bare CIDR string would otherwise be iterated character by character
    if isinstance(ingress_sources, str):
        raise MysqlConfigError(
            "ingress_sources", f"expected a list of sources, got the string {ingress_sources!r}"
        )

    return MysqlProps(
        vpc=vpc,
        vpc_subnets=vpc_subnets,
        instance_type=to_instance_type(instance_type),
        db_name=DEFAULT_DB_NAME if db_name is None else db_name,
        db_username=DEFAULT_DB_USERNAME if db_username is None else db_username,
        engine_version=(
            DEFAULT_ENGINE_VERSION if engine_version is None
            else to_engine_version(engine_version)
        ),
        backup_retention_days=(
            DEFAULT_BACKUP_RETENTION_DAYS if backup_retention_days is None
            else backup_retention_days
        ),
        deletion_protection=(
            DEFAULT_DELETION_PROTECTION if deletion_protection is None
            else deletion_protection
        ),
        backup_window=DEFAULT_BACKUP_WINDOW if backup_window is None else backup_window,
        preferred_maintenance_window=(
            DEFAULT_MAINTENANCE_WINDOW if preferred_maintenance_window is None
            else preferred_maintenance_window
        ),
        ingress_sources=tuple(ingress_sources or ()),
        developer_ip=developer_ip,
    )
