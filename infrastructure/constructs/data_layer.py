"""
Data layer construct: DynamoDB table for Slack event deduplication.
"""

from aws_cdk import (
    RemovalPolicy,
    aws_dynamodb as dynamodb,
)
from constructs import Construct


class DataLayerConstruct(Construct):
    """Provision the dedup table."""

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        *,
        environment: str,
        table_name: str,
    ) -> None:
        super().__init__(scope, construct_id)

        # One item per claimed event; DynamoDB TTL sweeps expired claims.
        self.dedup_table = dynamodb.Table(
            self,
            "EventDeduplication",
            table_name=table_name,
            partition_key=dynamodb.Attribute(
                name="eventKey", type=dynamodb.AttributeType.STRING
            ),
            billing_mode=dynamodb.BillingMode.PAY_PER_REQUEST,
            time_to_live_attribute="ttl",
            removal_policy=RemovalPolicy.RETAIN if environment == "prod" else RemovalPolicy.DESTROY,
        )
