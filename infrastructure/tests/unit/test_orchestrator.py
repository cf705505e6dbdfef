"""Unit tests for stack orchestration."""

import json
from dataclasses import replace

import aws_cdk as cdk
import pytest
from aws_cdk import assertions

from stacks.orchestrator import build_stacks
from utils.hashing import ArtifactNotFoundError


def declared_stacks(app):
    return [child for child in app.node.children if isinstance(child, cdk.Stack)]


def test_build_stacks_declares_frontend_then_backend(stage_config):
    """Test that both stacks are created and the backend depends on the frontend."""
    app = cdk.App()

    stacks = build_stacks(app, stage_config)

    assert stacks.frontend is not None
    assert stacks.frontend.node.id == "TodosFrontend-dev"
    assert stacks.backend.node.id == "TodosBackend-dev"
    assert declared_stacks(app) == [stacks.frontend, stacks.backend]
    assert stacks.frontend in stacks.backend.dependencies


def test_frontend_url_flows_into_backend_cors(stage_config):
    """Test that the backend CORS origin is imported from the frontend stack."""
    app = cdk.App()
    stacks = build_stacks(app, stage_config)

    backend = assertions.Template.from_stack(stacks.backend)
    api = next(iter(backend.find_resources("AWS::ApiGatewayV2::Api").values()))
    origins = json.dumps(api["Properties"]["CorsConfiguration"]["AllowOrigins"])

    assert "Fn::ImportValue" in origins
    assert "https://" in origins


def test_frontend_disabled_uses_configured_origins(stage_config):
    """Test that the backend alone is built when the frontend is disabled."""
    config = replace(
        stage_config,
        frontend_enabled=False,
        cors_origins=["https://todos.example.com"],
    )
    app = cdk.App()

    stacks = build_stacks(app, config)

    assert stacks.frontend is None
    assert declared_stacks(app) == [stacks.backend]

    template = assertions.Template.from_stack(stacks.backend)
    template.has_resource_properties(
        "AWS::ApiGatewayV2::Api",
        {
            "CorsConfiguration": assertions.Match.object_like({
                "AllowOrigins": ["https://todos.example.com"],
            }),
        },
    )


def test_build_stacks_uses_target_environment(stage_config):
    """Test that both stacks are pinned to the given account and region."""
    app = cdk.App()
    env = cdk.Environment(account="123456789012", region="eu-west-3")

    stacks = build_stacks(app, stage_config, env=env)

    assert stacks.backend.region == "eu-west-3"
    assert stacks.backend.account == "123456789012"
    assert stacks.frontend.region == "eu-west-3"


def test_missing_artifact_aborts_before_any_stack(stage_config, tmp_path):
    """Test that a missing bundle raises and leaves the app empty."""
    config = replace(stage_config, artifact_path=str(tmp_path / "missing.zip"))
    app = cdk.App()

    with pytest.raises(ArtifactNotFoundError):
        build_stacks(app, config)

    assert declared_stacks(app) == []


def test_backend_version_tracks_bundle_content(stage_config, lambda_bundle):
    """Test that rebuilding the bundle changes the published version hash."""
    first = build_stacks(cdk.App(), stage_config)
    lambda_bundle.write_bytes(lambda_bundle.read_bytes() + b"\x00")
    second = build_stacks(cdk.App(), stage_config)

    assert first.backend.artifact.source_hash != second.backend.artifact.source_hash

    template = assertions.Template.from_stack(second.backend)
    template.has_resource_properties(
        "AWS::Lambda::Version",
        {"CodeSha256": second.backend.artifact.source_hash},
    )
