"""
Amazon Bedrock Knowledge Base Service.

Answers free-text questions with RetrieveAndGenerate against one knowledge
base and one fixed foundation model.
"""

from __future__ import annotations

import os
from typing import Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from utils.error_handling import ExternalCallFailure
from utils.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_MODEL_ID = "anthropic.claude-3-haiku-20240307-v1:0"
NO_ANSWER_TEXT = "Sorry, I could not generate an answer to that question."

# Stay inside the 30s Lambda timeout; Slack redelivery is the only retry.
CLIENT_CONFIG = Config(
    connect_timeout=5,
    read_timeout=20,
    retries={"max_attempts": 1, "mode": "standard"},
)


class BedrockService:
    """Service for Bedrock Knowledge Base operations."""

    def __init__(
        self,
        knowledge_base_id: str,
        model_id: Optional[str] = None,
        region: Optional[str] = None,
        client=None,
    ):
        self.knowledge_base_id = knowledge_base_id
        self.model_id = model_id or os.environ.get("MODEL_ID", DEFAULT_MODEL_ID)
        self.region = (
            region
            or os.environ.get("BEDROCK_REGION")
            or os.environ.get("AWS_REGION")
            or "us-east-1"
        )
        self.bedrock_agent = client or boto3.client(
            "bedrock-agent-runtime",
            region_name=self.region,
            config=CLIENT_CONFIG,
        )

    @property
    def model_arn(self) -> str:
        """Foundation model ARN, or the model id unchanged if it is already an ARN."""
        if self.model_id.startswith("arn:"):
            return self.model_id
        return f"arn:aws:bedrock:{self.region}::foundation-model/{self.model_id}"

    def ask(self, query: str) -> str:
        """Return the generated answer text, or a fallback if none was produced."""
        try:
            response = self.bedrock_agent.retrieve_and_generate(
                input={"text": query},
                retrieveAndGenerateConfiguration={
                    "type": "KNOWLEDGE_BASE",
                    "knowledgeBaseConfiguration": {
                        "knowledgeBaseId": self.knowledge_base_id,
                        "modelArn": self.model_arn,
                    },
                },
            )
        except (BotoCoreError, ClientError) as exc:
            raise ExternalCallFailure(
                f"Knowledge base query failed: {exc}", service="bedrock"
            ) from exc

        text = (response.get("output") or {}).get("text")
        logger.info(
            "KB answer generated",
            extra={
                "query_length": len(query),
                "answer_length": len(text or ""),
                "citations": len(response.get("citations", [])),
            },
        )
        return text or NO_ANSWER_TEXT
