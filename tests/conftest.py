"""Pytest fixtures for CDK infrastructure tests."""

import aws_cdk as cdk
import pytest
from aws_cdk import aws_ec2 as ec2


@pytest.fixture
def app():
    """Fresh CDK app without any context."""
    return cdk.App()


@pytest.fixture
def stack(app):
    """Empty stack to declare MySQL units in."""
    return cdk.Stack(app, "TestStack")


@pytest.fixture
def vpc(stack):
    """Two-AZ VPC with public and private subnets."""
    return ec2.Vpc(stack, "Vpc", max_azs=2)


@pytest.fixture
def public_subnets():
    """Subnet selection used for publicly reachable instances."""
    return ec2.SubnetSelection(subnet_type=ec2.SubnetType.PUBLIC)
