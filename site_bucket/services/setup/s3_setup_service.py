from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Optional, Sequence

import aioboto3
from botocore.exceptions import ClientError
from tqdm import tqdm

from site_bucket.models.provisioning import BucketDeclaration, ObjectDeclaration, ResourceRef, WebsiteSettings
from site_bucket.services.config import S3Config
from site_bucket.services.setup.backend import ProvisioningBackend, ProvisioningError


logger = logging.getLogger(__name__)


class S3WebsiteSetupService(ProvisioningBackend):
    """Provisions a public static-website bucket on S3 with aioboto3.

    Every call re-declares the full desired state: an existing bucket owned by
    the caller is adopted, the policy and website configuration are put again,
    and every object is overwritten. Nothing is diffed or deleted.
    """

    _DEFAULT_CONCURRENCY: int = 10
    # Regions whose website endpoint uses a dash before the region name.
    _DASH_WEBSITE_REGIONS: frozenset[str] = frozenset(
        {
            "us-east-1",
            "us-west-1",
            "us-west-2",
            "ap-southeast-1",
            "ap-southeast-2",
            "ap-northeast-1",
            "eu-west-1",
            "sa-east-1",
            "us-gov-west-1",
        }
    )

    def __init__(
        self,
        config: S3Config,
        *,
        concurrency: int = _DEFAULT_CONCURRENCY,
        session: Optional[Any] = None,
    ) -> None:
        self._config = config
        self._concurrency = concurrency
        self._session = session if session is not None else aioboto3.Session()
        self._buckets: dict[ResourceRef, str] = {}
        self._regions: dict[ResourceRef, str] = {}

    def _client(self) -> Any:
        return self._session.client(
            "s3",
            region_name=self._config.region_name,
            endpoint_url=self._config.endpoint_url,
        )

    def _resolve_region(self, s3: Any) -> str:
        """Region the client actually talks to (profile or ~/.aws/config included)."""

        if self._config.region_name:
            return self._config.region_name
        meta = getattr(s3, "meta", None)
        region_name = getattr(meta, "region_name", None) or getattr(self._session, "region_name", None)
        return region_name or self._config.effective_region

    def _bucket_name(self, ref: ResourceRef) -> str:
        try:
            return self._buckets[ref]
        except KeyError:
            raise ProvisioningError(f"Bucket has not been created yet: {ref}") from None

    @classmethod
    def website_domain_for_region(cls, region_name: str) -> str:
        if region_name in cls._DASH_WEBSITE_REGIONS:
            return f"s3-website-{region_name}.amazonaws.com"
        return f"s3-website.{region_name}.amazonaws.com"

    async def create_bucket(self, declaration: BucketDeclaration) -> ResourceRef:
        bucket_name = declaration.bucket_name
        try:
            s3_client: Any = self._client()
            async with s3_client as s3:
                region_name = self._resolve_region(s3)
                kwargs: dict[str, Any] = {"Bucket": bucket_name}
                if region_name != "us-east-1":
                    kwargs["CreateBucketConfiguration"] = {"LocationConstraint": region_name}

                try:
                    await s3.create_bucket(**kwargs)
                    logger.info("Created S3 bucket %s in %s", bucket_name, region_name)
                except ClientError as exc:
                    code = exc.response.get("Error", {}).get("Code")
                    if code != "BucketAlreadyOwnedByYou":
                        raise
                    logger.info("S3 bucket %s already exists and is owned by you", bucket_name)

                # Public-read bucket policies are rejected while Block Public Access is on.
                await s3.put_public_access_block(
                    Bucket=bucket_name,
                    PublicAccessBlockConfiguration={
                        "BlockPublicAcls": False,
                        "IgnorePublicAcls": False,
                        "BlockPublicPolicy": False,
                        "RestrictPublicBuckets": False,
                    },
                )
        except Exception as exc:
            logger.exception("S3 create_bucket failed")
            raise ProvisioningError(f"Failed to create S3 bucket (bucket={bucket_name})") from exc

        ref = declaration.ref
        self._buckets[ref] = bucket_name
        self._regions[ref] = region_name
        return ref

    async def set_policy(self, bucket: ResourceRef, policy: dict[str, Any]) -> None:
        bucket_name = self._bucket_name(bucket)
        try:
            s3_client: Any = self._client()
            async with s3_client as s3:
                await s3.put_bucket_policy(Bucket=bucket_name, Policy=json.dumps(policy))
        except Exception as exc:
            logger.exception("S3 put_bucket_policy failed")
            raise ProvisioningError(f"Failed to apply bucket policy (bucket={bucket_name})") from exc

        logger.info("Applied public-read policy to %s", bucket_name)

    async def configure_website(self, bucket: ResourceRef, website: WebsiteSettings) -> None:
        bucket_name = self._bucket_name(bucket)
        try:
            s3_client: Any = self._client()
            async with s3_client as s3:
                await s3.put_bucket_website(
                    Bucket=bucket_name,
                    WebsiteConfiguration={
                        "IndexDocument": {"Suffix": website.index_document},
                        "ErrorDocument": {"Key": website.error_document},
                    },
                )
        except Exception as exc:
            logger.exception("S3 put_bucket_website failed")
            raise ProvisioningError(f"Failed to configure website hosting (bucket={bucket_name})") from exc

        logger.info(
            "Configured website hosting on %s (index=%s, error=%s)",
            bucket_name,
            website.index_document,
            website.error_document,
        )

    async def _put_object(self, s3: Any, declaration: ObjectDeclaration) -> None:
        bucket_name = self._bucket_name(declaration.bucket)
        try:
            body = Path(declaration.source).read_bytes()

            extra_args: dict[str, Any] = {}
            if declaration.content_type:
                extra_args["ContentType"] = declaration.content_type

            await s3.put_object(
                Bucket=bucket_name,
                Key=declaration.key,
                Body=body,
                **extra_args,
            )
        except Exception as exc:
            logger.exception("S3 put_object failed")
            raise ProvisioningError(
                f"Failed to upload object (resource={declaration.logical_name}, key={declaration.key})"
            ) from exc

    async def upload_object(self, declaration: ObjectDeclaration) -> None:
        self._bucket_name(declaration.bucket)
        s3_client: Any = self._client()
        async with s3_client as s3:
            await self._put_object(s3, declaration)

    async def upload_objects(self, declarations: Sequence[ObjectDeclaration]) -> int:
        """Upload every declared object with bounded concurrency.

        Stops at the first failure: pending uploads are cancelled and the
        ProvisioningError is raised. Returns the number of objects uploaded.
        """

        if not declarations:
            return 0

        for declaration in declarations:
            self._bucket_name(declaration.bucket)

        semaphore = asyncio.Semaphore(self._concurrency)
        s3_client: Any = self._client()
        async with s3_client as s3:

            async def _upload_one(declaration: ObjectDeclaration) -> None:
                async with semaphore:
                    await self._put_object(s3, declaration)

            tasks = [asyncio.create_task(_upload_one(d)) for d in declarations]
            uploaded = 0
            try:
                for fut in tqdm(
                    asyncio.as_completed(tasks),
                    total=len(tasks),
                    desc="Uploading website files",
                    unit="file",
                ):
                    await fut
                    uploaded += 1
            except BaseException:
                for task in tasks:
                    task.cancel()
                await asyncio.gather(*tasks, return_exceptions=True)
                raise

        logger.info("Uploaded %d object(s)", uploaded)
        return uploaded

    async def website_domain(self, bucket: ResourceRef) -> str:
        self._bucket_name(bucket)
        if self._config.website_domain:
            return self._config.website_domain
        return self.website_domain_for_region(self._regions[bucket])
