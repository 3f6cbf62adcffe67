import logging

from aws_cdk import (
    Stack,
    aws_ec2 as ec2,
    CfnOutput
)
from constructs import Construct

from configs.context import mysql_overrides_from_context
from secure_templates.mysql import MysqlInstance
from utils.developer_ip import lookup_developer_ip

logger = logging.getLogger(__name__)

class DatabaseStack(Stack):
    """
    MySQL database driven by the "mysql" context block
    Uses the MysqlInstance unit with enforced encryption and snapshot on delete
    """

    def __init__(self, scope: Construct, construct_id: str,
                 vpc: ec2.IVpc, environment: str, project_name: str,
                 database_id: str = "Elixir", **kwargs) -> None:
        super().__init__(scope, construct_id, **kwargs)

        overrides = mysql_overrides_from_context(self.node)

        # ====================================================================
        # DEVELOPER ACCESS - opt-in, never on by default
        # ====================================================================
        developer_mode = overrides.pop("developer_mode", False)
        developer_ip = overrides.pop("developer_ip", None)
        if developer_mode:
            if developer_ip is None:
                developer_ip = lookup_developer_ip()
            if developer_ip:
                logger.warning(
                    "Developer mode on for %s/%s: granting %s access to %s",
                    project_name, environment, developer_ip, database_id,
                )
        else:
            developer_ip = None

        # ====================================================================
        # MYSQL INSTANCE
        # ====================================================================
        self.mysql = MysqlInstance(
            self, database_id,
            vpc=vpc,
            vpc_subnets=ec2.SubnetSelection(
                subnet_type=ec2.SubnetType.PUBLIC
            ),
            developer_ip=developer_ip,
            **overrides
        )
        self.rds_instance = self.mysql.instance
        self.rds_secret = self.mysql.db_secret

        # ====================================================================
        # OUTPUTS
        # ====================================================================
        CfnOutput(self, "RDSSecretARN", value=self.rds_secret.secret_arn)
