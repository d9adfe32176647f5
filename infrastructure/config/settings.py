"""
Environment-specific configuration settings.

Secrets never live here; the Lambda reads them from Parameter Store under
`parameter_prefix` at runtime.
"""

from dataclasses import dataclass
import os
from typing import List


@dataclass
class Settings:
    """Deploy-time settings with cost-optimized defaults."""

    # Environment
    environment: str = "dev"
    aws_region: str = "us-east-1"

    # Parameter Store namespace holding bot-token, signing-secret,
    # s3-bucket and knowledge-base-id
    parameter_prefix: str = "/slack-kb-agent"

    # Bedrock Configuration
    model_id: str = "anthropic.claude-3-haiku-20240307-v1:0"  # Cost-optimized

    # Lambda Configuration
    lambda_memory_mb: int = 256
    lambda_timeout_seconds: int = 30
    log_level: str = "INFO"

    # Deduplication
    dedup_table_name: str = "slack-kb-agent-event-deduplication"
    dedup_ttl_seconds: int = 300  # 5 minutes

    def model_arn(self, region: str) -> str:
        """Foundation model ARN, or `model_id` unchanged if it is already an ARN."""
        if self.model_id.startswith("arn:"):
            return self.model_id
        return f"arn:aws:bedrock:{region}::foundation-model/{self.model_id}"

    def invoke_model_resources(self, region: str) -> List[str]:
        """IAM resources needed to invoke the configured model."""
        resources = [self.model_arn(region)]
        # Inference profiles route to foundation models in other regions
        if ":inference-profile/" in self.model_id:
            resources.append("arn:aws:bedrock:*::foundation-model/*")
        return resources

    @classmethod
    def from_environment(cls) -> "Settings":
        """Load settings from environment variables."""
        env = os.environ.get("ENVIRONMENT", "dev")
        region = os.environ.get("CDK_DEFAULT_REGION") or os.environ.get("AWS_REGION") or cls.aws_region
        prefix = os.environ.get("PARAMETER_PREFIX", cls.parameter_prefix)
        model_id = os.environ.get("MODEL_ID", cls.model_id)
        ttl = int(os.environ.get("DEDUP_TTL_SECONDS", cls.dedup_ttl_seconds))

        # Production overrides
        if env == "prod":
            return cls(
                environment="prod",
                aws_region=region,
                parameter_prefix=prefix,
                model_id=model_id,
                lambda_memory_mb=512,
                log_level="WARNING",
                dedup_ttl_seconds=ttl,
            )

        return cls(
            environment=env,
            aws_region=region,
            parameter_prefix=prefix,
            model_id=model_id,
            log_level=os.environ.get("LOG_LEVEL", cls.log_level),
            dedup_ttl_seconds=ttl,
        )
