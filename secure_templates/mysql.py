"""
MySQL database unit - security group, generated credentials, parameter group
and an encrypted RDS MySQL instance, exported for downstream stacks
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence, Union

import aws_cdk as cdk
from aws_cdk import (
    aws_ec2 as ec2,
    aws_rds as rds,
    aws_secretsmanager as secretsmanager,
    CfnOutput,
)
from constructs import Construct

from configs.mysql import DB_PORT, MysqlProps, resolve_mysql_props
from secure_templates.rds import SecureDatabaseInstance

logger = logging.getLogger(__name__)

# Characters that break MySQL connection strings
PASSWORD_EXCLUDE_CHARACTERS = "\"@/\\ '"
PASSWORD_LENGTH = 30


@dataclass(frozen=True)
class IngressRule:
    """One inbound allowance on the database port."""
    peer: ec2.IPeer
    description: str


def to_peer(source: Union[ec2.IPeer, str]) -> ec2.IPeer:
    """Turn a CIDR string into a peer; peers pass through untouched."""
    if isinstance(source, str):
        return ec2.Peer.ipv6(source) if ":" in source else ec2.Peer.ipv4(source)
    return source


def derive_ingress_rules(
    construct_id: str,
    vpc_cidr: str,
    ingress_sources: Sequence[Any] = (),
    developer_ip: Optional[str] = None,
) -> List[IngressRule]:
    """
    Build the inbound rule set for the database security group.

    The VPC's own range is always allowed. Each permitted source adds one
    rule, duplicates included. A developer address adds a /32 rule.
    """
    rules = [IngressRule(ec2.Peer.ipv4(vpc_cidr), "Inbound MYSQL")]
    for source in ingress_sources:
        rules.append(IngressRule(to_peer(source), f"{construct_id} tcp Mysql"))
    if developer_ip:
        cidr = developer_ip if "/" in developer_ip else f"{developer_ip}/32"
        rules.append(IngressRule(ec2.Peer.ipv4(cidr), "Developer ONLY !!!"))
    return rules


class MysqlInstance(Construct):
    """
    Self-contained MySQL unit.

    Declares a locked-down security group, a Secrets Manager secret with a
    generated password, a parameter group and a SecureDatabaseInstance, then
    exports <id>Endpoint, <id>Username and <id>DbName.

    Configuration is resolved before the construct joins the tree, so a
    missing vpc, vpc_subnets or instance_type leaves nothing behind.
    """

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
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
    ) -> None:
        props = resolve_mysql_props(
            vpc=vpc,
            vpc_subnets=vpc_subnets,
            instance_type=instance_type,
            db_name=db_name,
            db_username=db_username,
            engine_version=engine_version,
            backup_retention_days=backup_retention_days,
            deletion_protection=deletion_protection,
            backup_window=backup_window,
            preferred_maintenance_window=preferred_maintenance_window,
            ingress_sources=ingress_sources,
            developer_ip=developer_ip,
        )
        super().__init__(scope, construct_id)

        self.props: MysqlProps = props
        self.db_port: int = DB_PORT
        self.db_name: str = props.db_name
        self.db_username: str = props.db_username

        tcp_mysql = ec2.Port.tcp(self.db_port)

        # ====================================================================
        # SECURITY GROUP - deny by default, enumerated inbound rules
        # ====================================================================
        self.security_group = ec2.SecurityGroup(
            self, "DatabaseSecurityGroup",
            vpc=props.vpc,
            allow_all_outbound=False,
            description=f"{construct_id} Database",
            security_group_name=f"{construct_id}Database"
        )

        self.ingress_rules = derive_ingress_rules(
            construct_id,
            props.vpc.vpc_cidr_block,
            props.ingress_sources,
            props.developer_ip,
        )
        for rule in self.ingress_rules:
            self.security_group.add_ingress_rule(
                peer=rule.peer,
                connection=tcp_mysql,
                description=rule.description
            )

        # Only egress allowance
        self.security_group.add_egress_rule(
            peer=ec2.Peer.any_ipv4(),
            connection=ec2.Port.all_tcp(),
            description="Outbound"
        )

        # ====================================================================
        # CREDENTIALS - generated once, never rotated
        # ====================================================================
        self.db_secret = secretsmanager.Secret(
            self, "Credentials",
            secret_name=f"prod/{construct_id}/mysql/credentials",
            description=f"Mysql {self.db_name} Database Credentials",
            generate_secret_string=secretsmanager.SecretStringGenerator(
                secret_string_template=json.dumps({"username": self.db_username}),
                generate_string_key="password",
                exclude_characters=PASSWORD_EXCLUDE_CHARACTERS,
                password_length=PASSWORD_LENGTH
            )
        )
        self.db_credentials = rds.Credentials.from_secret(self.db_secret, self.db_username)

        # ====================================================================
        # PARAMETER GROUP
        # ====================================================================
        engine = rds.DatabaseInstanceEngine.mysql(version=props.engine_version)
        self.parameter_group = rds.ParameterGroup(
            self, "ParameterGroup",
            engine=engine
        )
        self.parameter_group.add_parameter("log_bin_trust_function_creators", "1")

        # ====================================================================
        # DATABASE INSTANCE
        # ====================================================================
        instance_kwargs = {}
        if backup_retention_days is not None:
            instance_kwargs["backup_retention"] = cdk.Duration.days(props.backup_retention_days)

        self.instance = SecureDatabaseInstance(
            self, "Database",
            port=self.db_port,
            instance_identifier=f"{construct_id}db",
            database_name=self.db_name,
            credentials=self.db_credentials,
            engine=engine,
            allocated_storage=20,
            security_groups=[self.security_group],
            allow_major_version_upgrade=True,
            auto_minor_version_upgrade=True,
            instance_type=props.instance_type,
            vpc=props.vpc,
            vpc_subnets=props.vpc_subnets,
            deletion_protection=props.deletion_protection,
            parameter_group=self.parameter_group,
            preferred_backup_window=props.backup_window,
            preferred_maintenance_window=props.preferred_maintenance_window,
            publicly_accessible=True,
            **instance_kwargs
        )

        cdk.Tags.of(self.instance).add("Name", f"{construct_id}Database", priority=300)

        self.db_endpoint: str = self.instance.db_instance_endpoint_address

        # ====================================================================
        # OUTPUTS
        # ====================================================================
        CfnOutput(
            self, "Endpoint",
            export_name=f"{construct_id}Endpoint",
            value=self.db_endpoint
        )
        CfnOutput(
            self, "Username",
            export_name=f"{construct_id}Username",
            value=self.db_username
        )
        CfnOutput(
            self, "DbName",
            export_name=f"{construct_id}DbName",
            value=self.db_name
        )

        logger.debug(
            "Declared MySQL unit %s with %d ingress rules",
            construct_id, len(self.ingress_rules),
        )
