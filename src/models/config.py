"""Runtime configuration loaded from Parameter Store."""

from pydantic import BaseModel, ConfigDict


class AppConfig(BaseModel):
    """Secrets and resource names shared by every invocation in a process."""

    model_config = ConfigDict(frozen=True)

    bot_token: str
    signing_secret: str
    bucket_name: str
    knowledge_base_id: str
