"""CDK Stacks for the serverless todos API."""

from .frontend_stack import FrontendStack
from .backend_stack import BackendStack
from .orchestrator import DeployedStacks, build_stacks

__all__ = [
    "FrontendStack",
    "BackendStack",
    "DeployedStacks",
    "build_stacks",
]
