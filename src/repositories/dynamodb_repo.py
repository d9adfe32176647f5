"""DynamoDB repository for the event deduplication table."""

from typing import Any, Dict

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from utils.error_handling import ExternalCallFailure

CONDITIONAL_CHECK_FAILED = "ConditionalCheckFailedException"


class DynamoDbRepository:
    """Provide conditional-write helpers."""

    def __init__(self, table_name: str, table=None):
        self.table_name = table_name
        self.table = table or boto3.resource("dynamodb").Table(table_name)

    def put_if_absent(self, item: Dict[str, Any], key_attribute: str) -> bool:
        """
        Insert `item` unless an item with the same key already exists.

        Returns False on a key conflict. Every other failure raises
        ExternalCallFailure.
        """
        try:
            self.table.put_item(
                Item=item,
                ConditionExpression="attribute_not_exists(#pk)",
                ExpressionAttributeNames={"#pk": key_attribute},
            )
            return True
        except ClientError as exc:
            if exc.response.get("Error", {}).get("Code") == CONDITIONAL_CHECK_FAILED:
                return False
            raise ExternalCallFailure(
                f"DynamoDB put on {self.table_name} failed: {exc}", service="dynamodb"
            ) from exc
        except BotoCoreError as exc:
            raise ExternalCallFailure(
                f"DynamoDB put on {self.table_name} failed: {exc}", service="dynamodb"
            ) from exc
