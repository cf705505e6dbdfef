"""Frontend stack: S3 static site behind CloudFront."""

from aws_cdk import (
    Stack,
    RemovalPolicy,
    CfnOutput,
    aws_s3 as s3,
    aws_s3_deployment as s3deploy,
    aws_cloudfront as cloudfront,
    aws_cloudfront_origins as origins,
)
from constructs import Construct

from config.stage_config import StageConfig, resolve_project_path


class FrontendStack(Stack):
    """
    Frontend infrastructure stack.

    Components:
    - Private S3 bucket for the static site
    - CloudFront distribution with origin access control
    - Optional upload of a built site directory

    The public URL is exposed as `self.url` for the backend's CORS settings.
    """

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        *,
        config: StageConfig,
        **kwargs
    ):
        """
        Initialize frontend stack.

        Args:
            scope: CDK app
            construct_id: Stack ID
            config: Stage configuration
            **kwargs: Additional stack properties
        """
        super().__init__(scope, construct_id, **kwargs)

        self.config = config

        self._create_site_bucket()
        self._create_distribution()

        if config.frontend_site_path:
            self._deploy_site(config.frontend_site_path)

        self._create_outputs()

    def _create_site_bucket(self):
        """Create the private bucket holding the site files."""
        self.bucket = s3.Bucket(
            self,
            "SiteBucket",
            encryption=s3.BucketEncryption.S3_MANAGED,
            block_public_access=s3.BlockPublicAccess.BLOCK_ALL,
            enforce_ssl=True,
            removal_policy=RemovalPolicy.RETAIN if self.config.is_production else RemovalPolicy.DESTROY,
            auto_delete_objects=not self.config.is_production,
        )

    def _create_distribution(self):
        """Create the CloudFront distribution in front of the bucket."""
        self.distribution = cloudfront.Distribution(
            self,
            "SiteDistribution",
            comment=self.config.resource_name("todos-frontend"),
            default_root_object="index.html",
            default_behavior=cloudfront.BehaviorOptions(
                origin=origins.S3BucketOrigin.with_origin_access_control(self.bucket),
                viewer_protocol_policy=cloudfront.ViewerProtocolPolicy.REDIRECT_TO_HTTPS,
            ),
        )

    def _deploy_site(self, site_path: str):
        """Upload the built site and invalidate the CDN cache."""
        s3deploy.BucketDeployment(
            self,
            "SiteDeployment",
            sources=[s3deploy.Source.asset(str(resolve_project_path(site_path)))],
            destination_bucket=self.bucket,
            distribution=self.distribution,
            distribution_paths=["/*"],
        )

    def _create_outputs(self):
        """Create CloudFormation outputs."""
        self.url = CfnOutput(
            self,
            "FrontendUrl",
            value=f"https://{self.distribution.distribution_domain_name}",
            description="Frontend URL",
        )

        CfnOutput(
            self,
            "SiteBucketName",
            value=self.bucket.bucket_name,
            description="S3 bucket holding the frontend files",
        )
