"""
CDK app entrypoint.

Creates the Slack knowledge-base agent stack with cost-optimized defaults.
"""

import aws_cdk as cdk

from infrastructure.config.settings import Settings
from infrastructure.main_stack import SlackKbAgentStack


def main() -> None:
    """Instantiate the CDK app and stack."""
    settings = Settings.from_environment()
    app = cdk.App()

    SlackKbAgentStack(
        app,
        f"SlackKbAgentStack-{settings.environment}",
        settings=settings,
        env=cdk.Environment(
            account=app.node.try_get_context("account") or None,
            region=settings.aws_region,
        ),
        description="Slack knowledge-base agent on AWS Lambda and API Gateway",
    )

    app.synth()


if __name__ == "__main__":
    main()
