"""S3 repository for the shared documents bucket."""

from typing import List

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from models.storage import StoredObject
from utils.error_handling import ExternalCallFailure


class S3Repository:
    """Minimal helper around S3 for listing and presigned downloads."""

    def __init__(self, bucket_name: str, client=None):
        self.bucket_name = bucket_name
        self.client = client or boto3.client("s3")

    def list_objects(self, limit: int = 20) -> List[StoredObject]:
        """List the first `limit` objects of the bucket (single page)."""
        try:
            resp = self.client.list_objects_v2(Bucket=self.bucket_name, MaxKeys=limit)
        except (BotoCoreError, ClientError) as exc:
            raise ExternalCallFailure(f"S3 listing failed: {exc}", service="s3") from exc
        return [
            StoredObject(
                key=item["Key"],
                size=item.get("Size", 0),
                last_modified=item.get("LastModified"),
            )
            for item in resp.get("Contents", [])
        ]

    def presigned_url(self, key: str, expires_in: int = 900) -> str:
        """Return a time-limited GET URL for `key`."""
        try:
            return self.client.generate_presigned_url(
                "get_object",
                Params={"Bucket": self.bucket_name, "Key": key},
                ExpiresIn=expires_in,
            )
        except (BotoCoreError, ClientError) as exc:
            raise ExternalCallFailure(f"URL signing failed: {exc}", service="s3") from exc

    def exists(self, key: str) -> bool:
        """True if the object exists, False on 404; other errors propagate."""
        try:
            self.client.head_object(Bucket=self.bucket_name, Key=key)
            return True
        except ClientError as exc:
            code = exc.response.get("Error", {}).get("Code")
            if code in ("404", "NoSuchKey", "NotFound"):
                return False
            raise ExternalCallFailure(f"S3 lookup failed: {exc}", service="s3") from exc
        except BotoCoreError as exc:
            raise ExternalCallFailure(f"S3 lookup failed: {exc}", service="s3") from exc
