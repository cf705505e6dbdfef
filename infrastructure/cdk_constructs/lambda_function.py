"""Lambda function construct deployed from a prebuilt, hashed bundle."""

from aws_cdk import (
    AssetHashType,
    Duration,
    RemovalPolicy,
    aws_lambda as lambda_,
    aws_logs as logs,
    aws_iam as iam,
)
from constructs import Construct
from typing import Dict, Optional

from utils.hashing import ArtifactReference


def runtime_from_name(name: str) -> lambda_.Runtime:
    """Build a Lambda runtime from its identifier (e.g. nodejs20.x, python3.12)."""
    if name.startswith("nodejs"):
        family = lambda_.RuntimeFamily.NODEJS
    elif name.startswith("python"):
        family = lambda_.RuntimeFamily.PYTHON
    else:
        family = lambda_.RuntimeFamily.OTHER
    return lambda_.Runtime(name, family)


class LambdaFunction(Construct):
    """
    Lambda function whose code is a packaged artifact built outside CDK.

    Features:
    - Code asset keyed on the artifact's content hash
    - Published version pinned to the same hash (CodeSha256)
    - Dedicated CloudWatch log group with configurable retention
    - Optional X-Ray active tracing
    """

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        *,
        function_name: str,
        artifact: ArtifactReference,
        handler: str,
        role: iam.IRole,
        runtime: lambda_.Runtime,
        timeout: Duration,
        memory_size: int,
        environment: Optional[Dict[str, str]] = None,
        log_retention: logs.RetentionDays = logs.RetentionDays.ONE_WEEK,
        removal_policy: RemovalPolicy = RemovalPolicy.DESTROY,
        tracing: bool = True,
        description: Optional[str] = None,
    ):
        """
        Initialize Lambda function construct.

        Args:
            scope: CDK scope
            construct_id: Construct identifier
            function_name: Physical function name
            artifact: Packaged bundle and its content hash
            handler: Runtime entry point (e.g. lambda.handler)
            role: Execution role
            runtime: Lambda runtime
            timeout: Function timeout
            memory_size: Memory allocation in MB
            environment: Environment variables
            log_retention: CloudWatch log retention
            removal_policy: Removal policy for the log group
            tracing: Enable X-Ray active tracing
            description: Function description
        """
        super().__init__(scope, construct_id)

        self.artifact = artifact

        self.log_group = logs.LogGroup(
            self,
            "LogGroup",
            log_group_name=f"/aws/lambda/{function_name}",
            retention=log_retention,
            removal_policy=removal_policy,
        )

        # The custom asset hash decides whether a new bundle is uploaded
        code = lambda_.Code.from_asset(
            str(artifact.path),
            asset_hash=artifact.source_hash,
            asset_hash_type=AssetHashType.CUSTOM,
        )

        self.function = lambda_.Function(
            self,
            "Function",
            function_name=function_name,
            runtime=runtime,
            handler=handler,
            code=code,
            role=role,
            timeout=timeout,
            memory_size=memory_size,
            environment=environment or {},
            tracing=lambda_.Tracing.ACTIVE if tracing else lambda_.Tracing.DISABLED,
            log_group=self.log_group,
            description=description,
        )

        # CodeSha256 must match the uploaded bundle; a new hash publishes a new version
        self.version = lambda_.Version(
            self,
            "Version",
            lambda_=self.function,
            code_sha256=artifact.source_hash,
            description=f"Bundle {artifact.source_hash}",
        )

    @property
    def function_name(self) -> str:
        """Get function name."""
        return self.function.function_name

    @property
    def function_arn(self) -> str:
        """Get function ARN."""
        return self.function.function_arn
