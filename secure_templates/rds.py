"""
Secure RDS template - Enforces the database guardrails every instance gets
Encryption at rest, a final snapshot on teardown and a fixed backup retention
"""

import logging

import aws_cdk as cdk
from aws_cdk import aws_rds as rds
from constructs import Construct

logger = logging.getLogger(__name__)

# Retention applied to every instance regardless of the requested value
FIXED_BACKUP_RETENTION_DAYS = 7


class SecureDatabaseInstance(rds.DatabaseInstance):
    """
    RDS instance with enforced encryption, snapshot-then-delete removal
    and a fixed backup retention window.

    Callers cannot turn these off: any value passed for storage_encrypted,
    removal_policy or backup_retention is overridden.
    """

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        **kwargs
    ):
        # ENFORCE ENCRYPTION
        kwargs["storage_encrypted"] = True

        # ENFORCE FINAL SNAPSHOT ON TEARDOWN
        kwargs["removal_policy"] = cdk.RemovalPolicy.SNAPSHOT

        # ENFORCE BACKUP RETENTION
        requested = kwargs.get("backup_retention")
        if requested is not None and requested.to_days() != FIXED_BACKUP_RETENTION_DAYS:
            logger.warning(
                "%s: backup retention of %s days overridden to %s days",
                construct_id, requested.to_days(), FIXED_BACKUP_RETENTION_DAYS,
            )
        kwargs["backup_retention"] = cdk.Duration.days(FIXED_BACKUP_RETENTION_DAYS)

        super().__init__(scope, construct_id, **kwargs)
