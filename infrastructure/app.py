#!/usr/bin/env python3
"""
CDK Application for the serverless todos API.

Deploys the frontend (S3 + CloudFront) and the backend (DynamoDB, Lambda,
API Gateway) for one stage.

Usage:
    cdk synth -c stage=dev
    cdk deploy -c stage=dev --all
    cdk destroy -c stage=dev --all

The Lambda bundle (backend/dist/lambda.zip) must be built before synthesis.
"""

import logging
import os
from typing import Optional

from aws_cdk import App, Environment, Tags

from config.stage_config import StageConfig
from stacks.orchestrator import build_stacks

logger = logging.getLogger(__name__)


def main(app: Optional[App] = None):
    """Load the stage, declare its stacks and synthesize the templates."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if app is None:
        app = App()
    config = StageConfig.from_context(app)

    account_id = config.account or os.getenv("CDK_DEFAULT_ACCOUNT")
    aws_env = Environment(account=account_id, region=config.region)

    logger.info(f"Deploying stage: {config.stage}")
    logger.info(f"AWS Account: {account_id or 'unresolved'}")
    logger.info(f"AWS Region: {config.region}")

    build_stacks(app, config, env=aws_env)

    Tags.of(app).add("Project", config.project)
    Tags.of(app).add("Stage", config.stage)
    Tags.of(app).add("ManagedBy", "CDK")

    app.synth()


if __name__ == "__main__":
    main()
