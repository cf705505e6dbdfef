"""Backend stack: DynamoDB table, Lambda API and API Gateway HTTP API."""

import json

from aws_cdk import (
    Stack,
    Duration,
    RemovalPolicy,
    CfnOutput,
    aws_apigatewayv2 as apigw,
    aws_apigatewayv2_integrations as apigw_integrations,
    aws_dynamodb as dynamodb,
    aws_iam as iam,
    aws_logs as logs,
)
from constructs import Construct
from typing import List

from cdk_constructs.lambda_function import LambdaFunction, runtime_from_name
from config.stage_config import StageConfig
from utils.hashing import ArtifactReference

# Access log record written by the $default stage
ACCESS_LOG_FORMAT = {
    "httpMethod": "$context.httpMethod",
    "ip": "$context.identity.sourceIp",
    "protocol": "$context.protocol",
    "requestId": "$context.requestId",
    "requestTime": "$context.requestTime",
    "responseLength": "$context.responseLength",
    "routeKey": "$context.routeKey",
    "status": "$context.status",
}

PROXY_ROUTE_PATH = "/{proxy+}"


class BackendStack(Stack):
    """
    Backend infrastructure stack.

    Components:
    - DynamoDB todos table (provisioned throughput)
    - IAM execution role with an inline least-privilege policy
    - CloudWatch log group for API access logs
    - API Gateway HTTP API with CORS restricted to the frontend
    - $default stage with JSON access logging
    - Lambda function deployed from the packaged bundle
    - Lambda permission, proxy integration and catch-all route
    """

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        *,
        config: StageConfig,
        artifact: ArtifactReference,
        allowed_origins: List[str],
        **kwargs
    ):
        """
        Initialize backend stack.

        Args:
            scope: CDK app
            construct_id: Stack ID
            config: Stage configuration
            artifact: Hashed Lambda bundle
            allowed_origins: CORS origins for the HTTP API (the frontend URL)
            **kwargs: Additional stack properties
        """
        super().__init__(scope, construct_id, **kwargs)

        self.config = config
        self.artifact = artifact
        self.allowed_origins = allowed_origins
        self.removal_policy = RemovalPolicy.RETAIN if config.is_production else RemovalPolicy.DESTROY

        self._create_table()
        self._create_lambda_role()
        self._create_access_logs()
        self._create_http_api()
        self._create_api_lambda()
        self._create_lambda_integration()

        # Stack outputs
        self._create_outputs()

    def _create_table(self):
        """Create DynamoDB table for todos."""
        self.table = dynamodb.Table(
            self,
            "TodosTable",
            table_name=self.config.resource_name("todo"),
            partition_key=dynamodb.Attribute(
                name="id",
                type=dynamodb.AttributeType.STRING,
            ),
            billing_mode=dynamodb.BillingMode.PROVISIONED,
            read_capacity=self.config.table_read_capacity,
            write_capacity=self.config.table_write_capacity,
            removal_policy=self.removal_policy,
        )

    def _create_lambda_role(self):
        """Create the Lambda execution role (read-only table access + logs)."""
        role_name = self.config.resource_name("lambda-api")

        self.lambda_role = iam.Role(
            self,
            "LambdaRole",
            role_name=role_name,
            assumed_by=iam.ServicePrincipal("lambda.amazonaws.com"),
            inline_policies={
                role_name: iam.PolicyDocument(
                    statements=[
                        iam.PolicyStatement(
                            actions=["dynamodb:Scan", "dynamodb:GetItem"],
                            resources=[self.table.table_arn],
                        ),
                        iam.PolicyStatement(
                            actions=[
                                "logs:CreateLogGroup",
                                "logs:CreateLogStream",
                                "logs:PutLogEvents",
                            ],
                            resources=["arn:aws:logs:*:*:*"],
                        ),
                    ]
                )
            },
        )

    def _create_access_logs(self):
        """Create log group for API Gateway access logs."""
        self.access_log_group = logs.LogGroup(
            self,
            "ApiAccessLogs",
            log_group_name=f"/aws/apigateway/{self.config.resource_name('todos-api')}",
            retention=self.config.log_retention,
            removal_policy=self.removal_policy,
        )

    def _create_http_api(self):
        """Create API Gateway HTTP API and its $default stage."""
        self.http_api = apigw.HttpApi(
            self,
            "HttpApi",
            api_name=self.config.resource_name("todos-api"),
            description=f"Todos API - {self.config.stage}",
            cors_preflight=apigw.CorsPreflightOptions(
                allow_origins=self.allowed_origins,
            ),
            # The stage is declared explicitly to carry access log settings
            create_default_stage=False,
        )

        self.api_stage = apigw.CfnStage(
            self,
            "DefaultStage",
            api_id=self.http_api.api_id,
            stage_name="$default",
            auto_deploy=True,
            access_log_settings=apigw.CfnStage.AccessLogSettingsProperty(
                destination_arn=self.access_log_group.log_group_arn,
                format=json.dumps(ACCESS_LOG_FORMAT),
            ),
        )

    def _create_api_lambda(self):
        """Create API Lambda function from the packaged bundle."""
        self.api_lambda = LambdaFunction(
            self,
            "ApiLambda",
            function_name=self.config.resource_name("todos-api"),
            artifact=self.artifact,
            handler=self.config.lambda_handler,
            role=self.lambda_role,
            runtime=runtime_from_name(self.config.lambda_runtime),
            timeout=Duration.seconds(self.config.lambda_timeout),
            memory_size=self.config.lambda_memory,
            environment={
                "TODO_TABLE": self.table.table_name,
            },
            log_retention=self.config.log_retention,
            removal_policy=self.removal_policy,
            tracing=self.config.tracing,
            description=f"Todos API Lambda - {self.config.stage}",
        )

    def _create_lambda_integration(self):
        """Wire the Lambda function behind a catch-all proxy route."""
        # Also grants API Gateway invoke rights on <api>/*/*/{proxy+}
        self.lambda_integration = apigw_integrations.HttpLambdaIntegration(
            "LambdaIntegration",
            self.api_lambda.function,
            payload_format_version=apigw.PayloadFormatVersion.VERSION_2_0,
        )

        self.proxy_routes = self.http_api.add_routes(
            path=PROXY_ROUTE_PATH,
            methods=[apigw.HttpMethod.ANY],
            integration=self.lambda_integration,
        )

    def _create_outputs(self):
        """Create CloudFormation outputs."""
        self.url = CfnOutput(
            self,
            "ApiUrl",
            value=self.http_api.api_endpoint,
            description="API Gateway endpoint URL",
            export_name=f"{self.config.resource_name('todos')}-api-url",
        )

        CfnOutput(
            self,
            "TableName",
            value=self.table.table_name,
            description="DynamoDB todos table name",
        )

        CfnOutput(
            self,
            "FunctionName",
            value=self.api_lambda.function_name,
            description="API Lambda function name",
        )
