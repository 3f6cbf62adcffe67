"""
Tests for the network and database stacks wired through CDK context.
"""

from unittest import mock

import aws_cdk as cdk
import pytest
from aws_cdk.assertions import Template

from configs.mysql import MysqlConfigError
from stacks.database_stack import DatabaseStack
from stacks.network_stack import NetworkStack


def _stacks(context=None, database_id="Elixir"):
    app = cdk.App(context=context or {})
    network = NetworkStack(app, "network", environment="dev", project_name="elixir")
    database = DatabaseStack(
        app, "database",
        vpc=network.main_vpc,
        environment="dev",
        project_name="elixir",
        database_id=database_id,
    )
    return network, database


def _ingress(template):
    groups = template.find_resources("AWS::EC2::SecurityGroup")
    assert len(groups) == 1
    return next(iter(groups.values()))["Properties"]["SecurityGroupIngress"]


def test_network_stack_vpc():
    network, _ = _stacks({"mysql": {"instance_type": "t3.small"}})
    template = Template.from_stack(network)

    template.resource_count_is("AWS::EC2::VPC", 1)
    template.has_resource_properties("AWS::EC2::VPC", {"CidrBlock": "10.0.0.0/16"})


def test_network_stack_nat_gateways_per_environment():
    app = cdk.App()
    dev = NetworkStack(app, "dev-network", environment="dev", project_name="elixir")
    prod = NetworkStack(app, "prod-network", environment="prod", project_name="elixir")

    Template.from_stack(dev).resource_count_is("AWS::EC2::NatGateway", 1)
    Template.from_stack(prod).resource_count_is("AWS::EC2::NatGateway", 2)


def test_database_stack_from_context():
    _, database = _stacks({
        "mysql": {
            "instance_type": "t3.micro",
            "db_name": "orders",
            "ingress_sources": ["10.9.0.0/16"],
        }
    })
    template = Template.from_stack(database)

    template.has_resource_properties("AWS::RDS::DBInstance", {
        "DBInstanceClass": "db.t3.micro",
        "DBName": "orders",
        "PubliclyAccessible": True,
    })
    assert len(_ingress(template)) == 2
    assert database.rds_instance is database.mysql.instance
    assert database.rds_secret is database.mysql.db_secret


def test_database_stack_requires_instance_type():
    with pytest.raises(MysqlConfigError, match="instance_type"):
        _stacks({"mysql": {"db_name": "orders"}})


def test_developer_mode_off_skips_lookup():
    with mock.patch("stacks.database_stack.lookup_developer_ip") as lookup:
        _, database = _stacks({
            "mysql": {"instance_type": "t3.small", "developer_ip": "203.0.113.7"}
        })

    lookup.assert_not_called()
    assert len(_ingress(Template.from_stack(database))) == 1


def test_developer_mode_uses_configured_ip():
    with mock.patch("stacks.database_stack.lookup_developer_ip") as lookup:
        _, database = _stacks({
            "mysql": {
                "instance_type": "t3.small",
                "developer_mode": True,
                "developer_ip": "203.0.113.7",
            }
        })

    lookup.assert_not_called()
    cidrs = {r["CidrIp"] for r in _ingress(Template.from_stack(database)) if isinstance(r["CidrIp"], str)}
    assert "203.0.113.7/32" in cidrs


def test_developer_mode_lookup():
    with mock.patch("stacks.database_stack.lookup_developer_ip", return_value="198.51.100.4"):
        _, database = _stacks({"mysql": {"instance_type": "t3.small", "developer_mode": "true"}})

    descriptions = {r["Description"] for r in _ingress(Template.from_stack(database))}
    assert "Developer ONLY !!!" in descriptions


def test_developer_mode_lookup_failure_fails_open():
    with mock.patch("stacks.database_stack.lookup_developer_ip", return_value=None):
        _, database = _stacks({"mysql": {"instance_type": "t3.small", "developer_mode": True}})

    assert len(_ingress(Template.from_stack(database))) == 1
