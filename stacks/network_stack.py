from aws_cdk import (
    Stack,
    aws_ec2 as ec2,
    CfnOutput
)
from constructs import Construct

class NetworkStack(Stack):
    """
    Network infrastructure: VPC hosting the MySQL database
    Public subnets carry the publicly reachable instance, private subnets the apps
    """

    def __init__(self, scope: Construct, construct_id: str,
                 environment: str, project_name: str,
                 cidr: str = "10.0.0.0/16", **kwargs) -> None:
        super().__init__(scope, construct_id, **kwargs)

        # ====================================================================
        # MAIN VPC
        # ====================================================================
        self.main_vpc = ec2.Vpc(
            self, "MainVPC",
            ip_addresses=ec2.IpAddresses.cidr(cidr),
            max_azs=2,
            nat_gateways=2 if environment == "prod" else 1,  # Cost optimization
            subnet_configuration=[
                ec2.SubnetConfiguration(
                    name="Public",
                    subnet_type=ec2.SubnetType.PUBLIC,
                    cidr_mask=24
                ),
                ec2.SubnetConfiguration(
                    name="Private",
                    subnet_type=ec2.SubnetType.PRIVATE_WITH_EGRESS,
                    cidr_mask=24
                )
            ]
        )

        # ====================================================================
        # OUTPUTS
        # ====================================================================
        CfnOutput(self, "MainVPCId", value=self.main_vpc.vpc_id)
        CfnOutput(self, "MainVPCCidr", value=self.main_vpc.vpc_cidr_block)
