from __future__ import annotations

import os
from dataclasses import dataclass
from typing import ClassVar, Optional


@dataclass(frozen=True)
class S3Config:
    """Target bucket and AWS connection settings.

    `bucket_name` is the only required value. `website_domain` overrides the
    S3 website endpoint domain, e.g. for S3-compatible stores behind
    `endpoint_url`.
    """

    bucket_name: str
    region_name: Optional[str] = None
    endpoint_url: Optional[str] = None
    website_domain: Optional[str] = None
    _DEFAULT_REGION: ClassVar[str] = "us-east-1"

    @property
    def effective_region(self) -> str:
        return self.region_name or self._DEFAULT_REGION

    @staticmethod
    def from_env() -> "S3Config":
        bucket_name = os.getenv("SITE_BUCKET_NAME")
        if not bucket_name:
            raise ValueError("Missing required environment variable: SITE_BUCKET_NAME")

        region_name = os.getenv("AWS_REGION") or os.getenv("AWS_DEFAULT_REGION")
        endpoint_url = os.getenv("S3_ENDPOINT_URL")
        website_domain = os.getenv("S3_WEBSITE_DOMAIN")

        return S3Config(
            bucket_name=bucket_name.strip(),
            region_name=region_name,
            endpoint_url=endpoint_url,
            website_domain=website_domain,
        )
