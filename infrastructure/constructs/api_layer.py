"""
API layer construct: Slack handler Lambda + HTTP API routes.

Uses Docker bundling for dependencies (runs in CI/CD pipeline).
"""

from pathlib import Path
from typing import Dict

from aws_cdk import (
    BundlingOptions,
    Duration,
    Stack,
    aws_lambda as _lambda,
    aws_apigatewayv2 as apigw,
    aws_apigatewayv2_integrations as integrations,
    aws_logs as logs,
)
from constructs import Construct

SRC_DIR = str(Path(__file__).resolve().parents[2] / "src")


class ApiLayerConstruct(Construct):
    """Expose the Slack events endpoint via HTTP API."""

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        *,
        environment: str,
        lambda_environment: Dict[str, str],
        lambda_memory_mb: int = 256,
        lambda_timeout_seconds: int = 30,
    ) -> None:
        super().__init__(scope, construct_id)

        # AWS-managed Powertools layer (includes pydantic, boto3 extras)
        powertools_layer = _lambda.LayerVersion.from_layer_version_arn(
            self,
            "PowertoolsLayer",
            f"arn:aws:lambda:{Stack.of(self).region}:017000801446:layer:AWSLambdaPowertoolsPythonV3-python312-x86:7"
        )

        # Installs slack_sdk and python-json-logger next to the handler code
        bundled_code = _lambda.Code.from_asset(
            SRC_DIR,
            bundling=BundlingOptions(
                image=_lambda.Runtime.PYTHON_3_12.bundling_image,
                command=[
                    "bash", "-c",
                    "pip install -r requirements-lambda.txt -t /asset-output && "
                    "cp -r . /asset-output"
                ],
            ),
        )

        # No VPC: Slack expects an answer within 3 seconds and NAT adds latency.
        self.slack_handler = _lambda.Function(
            self,
            "SlackHandler",
            function_name=f"slack-kb-agent-handler-{environment}",
            runtime=_lambda.Runtime.PYTHON_3_12,
            handler="handlers.main.lambda_handler",
            code=bundled_code,
            layers=[powertools_layer],
            memory_size=lambda_memory_mb,
            timeout=Duration.seconds(lambda_timeout_seconds),
            architecture=_lambda.Architecture.X86_64,
            environment={"ENVIRONMENT": environment, **lambda_environment},
            log_retention=logs.RetentionDays.ONE_WEEK,
        )

        self.api = apigw.HttpApi(
            self,
            "HttpApi",
            api_name=f"slack-kb-agent-api-{environment}",
        )

        integration = integrations.HttpLambdaIntegration(
            "LambdaIntegration", self.slack_handler
        )

        route_defs = [
            (apigw.HttpMethod.POST, "/slack/events"),
            (apigw.HttpMethod.GET, "/health"),
        ]

        for method, path in route_defs:
            self.api.add_routes(
                path=path,
                methods=[method],
                integration=integration,
            )
