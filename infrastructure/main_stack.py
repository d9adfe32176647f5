"""
Main CDK Stack for the Slack knowledge-base agent.
"""

from aws_cdk import (
    Stack,
    Tags,
    CfnOutput,
    aws_iam as iam,
    aws_s3 as s3,
    aws_ssm as ssm,
)
from constructs import Construct

from infrastructure.constructs.api_layer import ApiLayerConstruct
from infrastructure.constructs.data_layer import DataLayerConstruct
from infrastructure.config.settings import Settings


class SlackKbAgentStack(Stack):
    """Main stack wiring all constructs together."""

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        *,
        settings: Settings,
        **kwargs,
    ) -> None:
        super().__init__(scope, construct_id, **kwargs)

        # Global tags for cost/accounting.
        Tags.of(self).add("Project", "slack-kb-agent")
        Tags.of(self).add("Environment", settings.environment)
        Tags.of(self).add("ManagedBy", "cdk")

        prefix = settings.parameter_prefix.rstrip("/")

        # 1) Dedup table.
        data_construct = DataLayerConstruct(
            self,
            "DataLayer",
            environment=settings.environment,
            table_name=f"{settings.dedup_table_name}-{settings.environment}",
        )

        # 2) API layer (single Lambda).
        api_construct = ApiLayerConstruct(
            self,
            "ApiLayer",
            environment=settings.environment,
            lambda_environment={
                "PARAMETER_PREFIX": prefix,
                "DEDUP_TABLE_NAME": data_construct.dedup_table.table_name,
                "DEDUP_TTL_SECONDS": str(settings.dedup_ttl_seconds),
                "MODEL_ID": settings.model_id,
                "LOG_LEVEL": settings.log_level,
            },
            lambda_memory_mb=settings.lambda_memory_mb,
            lambda_timeout_seconds=settings.lambda_timeout_seconds,
        )
        handler = api_construct.slack_handler

        # Permissions: secrets and resource names from Parameter Store.
        handler.add_to_role_policy(
            iam.PolicyStatement(
                actions=["ssm:GetParameter"],
                resources=[
                    Stack.of(self).format_arn(
                        service="ssm",
                        resource="parameter",
                        resource_name=prefix.lstrip("/") + "/*",
                    )
                ],
            )
        )

        # Dedup claims are conditional puts only.
        data_construct.dedup_table.grant_write_data(handler)

        # The bucket and KB are owned elsewhere; resolve their names at deploy time.
        bucket_name = ssm.StringParameter.value_for_string_parameter(self, f"{prefix}/s3-bucket")
        documents_bucket = s3.Bucket.from_bucket_name(self, "DocumentsBucket", bucket_name)
        documents_bucket.grant_read(handler)

        knowledge_base_id = ssm.StringParameter.value_for_string_parameter(
            self, f"{prefix}/knowledge-base-id"
        )
        handler.add_to_role_policy(
            iam.PolicyStatement(
                actions=["bedrock:RetrieveAndGenerate"],
                resources=["*"],
            )
        )
        handler.add_to_role_policy(
            iam.PolicyStatement(
                actions=["bedrock:Retrieve"],
                resources=[
                    Stack.of(self).format_arn(
                        service="bedrock",
                        resource="knowledge-base",
                        resource_name=knowledge_base_id,
                    )
                ],
            )
        )
        handler.add_to_role_policy(
            iam.PolicyStatement(
                actions=["bedrock:InvokeModel"],
                resources=settings.invoke_model_resources(Stack.of(self).region),
            )
        )

        # Outputs to quickly find resources.
        CfnOutput(self, "ApiEndpoint", value=api_construct.api.api_endpoint)
        CfnOutput(
            self,
            "SlackEventsUrl",
            value=f"{api_construct.api.api_endpoint}/slack/events",
            description="Request URL for the Slack app's Event Subscriptions",
        )
        CfnOutput(self, "DedupTableName", value=data_construct.dedup_table.table_name)
