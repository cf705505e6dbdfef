"""
Shared pytest fixtures for infrastructure unit tests.

Provides:
- A packaged Lambda bundle on disk
- Stage configuration pointing at that bundle
"""

import zipfile
from pathlib import Path

import pytest

from config.stage_config import StageConfig


@pytest.fixture
def lambda_bundle(tmp_path) -> Path:
    """
    Write a small Lambda zip bundle.

    Returns:
        Path to the zip file
    """
    bundle = tmp_path / "dist" / "lambda.zip"
    bundle.parent.mkdir(parents=True)
    with zipfile.ZipFile(bundle, "w") as zf:
        zf.writestr(
            "lambda.js",
            "exports.handler = async () => ({ statusCode: 200, body: '[]' });\n",
        )
    return bundle


@pytest.fixture
def stage_config(lambda_bundle) -> StageConfig:
    """Dev stage configuration using the test bundle."""
    return StageConfig.from_dict(
        "dev",
        {
            "region": "eu-west-3",
            "project": "sls-cdk-stack",
            "artifact_path": str(lambda_bundle),
        },
    )
