"""Builds the frontend and backend stacks in dependency order."""

import logging
from dataclasses import dataclass
from typing import Optional

from aws_cdk import App, Environment

from config.stage_config import StageConfig, resolve_project_path
from utils.hashing import ArtifactReference

from .backend_stack import BackendStack
from .frontend_stack import FrontendStack

logger = logging.getLogger(__name__)


@dataclass
class DeployedStacks:
    """Stacks declared for one stage."""

    backend: BackendStack
    frontend: Optional[FrontendStack] = None


def build_stacks(
    app: App,
    config: StageConfig,
    env: Optional[Environment] = None,
) -> DeployedStacks:
    """
    Declare the stacks for one stage on `app`.

    The artifact is hashed before any stack is created, so a missing bundle
    leaves the app empty. The frontend URL is passed to the backend as a
    cross-stack reference and resolved by CloudFormation at deploy time.

    Args:
        app: CDK app that owns the stacks
        config: Stage configuration
        env: Target AWS environment (account/region)

    Returns:
        The declared stacks

    Raises:
        ArtifactNotFoundError: If the Lambda bundle does not exist
    """
    artifact = ArtifactReference.from_path(resolve_project_path(config.artifact_path))

    frontend = None
    if config.frontend_enabled:
        frontend = FrontendStack(
            app,
            f"TodosFrontend-{config.stage}",
            env=env,
            config=config,
            description=f"Todos Frontend Stack - {config.stage}",
        )
        allowed_origins = [frontend.url.value]
    else:
        allowed_origins = list(config.cors_origins)

    backend = BackendStack(
        app,
        f"TodosBackend-{config.stage}",
        env=env,
        config=config,
        artifact=artifact,
        allowed_origins=allowed_origins,
        description=f"Todos Backend Stack - {config.stage}",
    )

    if frontend is not None:
        backend.add_dependency(frontend)

    logger.info(
        "Declared stacks: "
        + ", ".join(s.stack_name for s in (frontend, backend) if s is not None)
    )
    return DeployedStacks(backend=backend, frontend=frontend)
