#!/usr/bin/env python3
"""
Elixir MySQL - AWS CDK Application
Provisions a VPC and a publicly reachable, encrypted MySQL instance
"""

import os

import aws_cdk as cdk
from stacks.network_stack import NetworkStack
from stacks.database_stack import DatabaseStack
from utils.logger import configure_logging

configure_logging()

app = cdk.App()

# Environment configuration
env = cdk.Environment(
    account=app.node.try_get_context("account") or os.environ.get("CDK_DEFAULT_ACCOUNT"),
    region=app.node.try_get_context("region") or os.environ.get("CDK_DEFAULT_REGION", "us-east-1")
)

# Deployment context (dev/prod)
environment = app.node.try_get_context("environment") or "dev"
project_name = app.node.try_get_context("project_name") or "elixir"
database_id = app.node.try_get_context("database_id") or "Elixir"

# Tags applied to ALL resources
tags = {
    "Project": project_name,
    "Environment": environment,
    "ManagedBy": "CDK",
}

# ============================================================================
# STACK 1: NETWORK - VPC
# ============================================================================
network_stack = NetworkStack(
    app, f"{project_name}-{environment}-network",
    env=env,
    tags=tags,
    environment=environment,
    project_name=project_name
)

# ============================================================================
# STACK 2: DATABASE - RDS MySQL with Secrets Manager
# ============================================================================
db_stack = DatabaseStack(
    app, f"{project_name}-{environment}-database",
    vpc=network_stack.main_vpc,
    database_id=database_id,
    env=env,
    tags=tags,
    environment=environment,
    project_name=project_name
)
db_stack.add_dependency(network_stack)

# ============================================================================
# SYNTHESIZE
# ============================================================================
app.synth()
