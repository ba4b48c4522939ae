from __future__ import annotations

import logging
from typing import Any

from site_bucket.models.provisioning import (
    BucketDeclaration,
    ObjectDeclaration,
    ProvisioningPlan,
    ProvisioningResult,
    WebsiteSettings,
)
from site_bucket.services.config import S3Config, WebsiteConfig
from site_bucket.services.files_manager import FilesManager
from site_bucket.services.setup.backend import ProvisioningBackend


logger = logging.getLogger(__name__)


class DuplicateResourceNameError(ValueError):
    pass


def public_read_policy(bucket_name: str) -> dict[str, Any]:
    """Bucket policy granting anonymous read access to every object."""

    return {
        "Version": "2012-10-17",
        "Statement": [
            {
                "Sid": "Allow-Public-Access-To-Bucket",
                "Effect": "Allow",
                "Principal": "*",
                "Action": ["s3:GetObject"],
                "Resource": f"arn:aws:s3:::{bucket_name}/*",
            }
        ],
    }


def bucket_url(bucket_name: str, website_domain: str) -> str:
    # NOTE: when the backend's domain already starts with the bucket name this
    # repeats it; kept as the published output format.
    return f"{bucket_name}.{website_domain}"


class ProvisioningService:
    """Declares the website bucket plus one object per local file, then has
    the backend realize them.

    The directory walk always finishes before the backend is called, so a
    failed walk leaves nothing declared.
    """

    def __init__(
        self,
        *,
        s3: S3Config,
        website: WebsiteConfig,
        files: FilesManager,
        backend: ProvisioningBackend,
    ) -> None:
        self._s3 = s3
        self._website = website
        self._files = files
        self._backend = backend

    def _bucket_declaration(self) -> BucketDeclaration:
        bucket_name = self._s3.bucket_name
        return BucketDeclaration(
            logical_name=bucket_name,
            bucket_name=bucket_name,
            policy=public_read_policy(bucket_name),
            website=WebsiteSettings(
                index_document=self._website.index_document,
                error_document=self._website.error_document,
            ),
        )

    def plan(self) -> ProvisioningPlan:
        bucket = self._bucket_declaration()
        descriptors = self._files.get_files()

        objects: list[ObjectDeclaration] = []
        seen: dict[str, str] = {bucket.logical_name: "<bucket>"}
        for descriptor in descriptors:
            name = descriptor.display_name
            if name in seen:
                raise DuplicateResourceNameError(
                    f"Resource name {name!r} is used by both {seen[name]!r} and {descriptor.remote_key!r}"
                )
            seen[name] = descriptor.remote_key

            objects.append(
                ObjectDeclaration(
                    logical_name=name,
                    bucket=bucket.ref,
                    key=descriptor.remote_key,
                    source=descriptor.absolute_path,
                    content_type=descriptor.content_type,
                )
            )

        return ProvisioningPlan(bucket=bucket, objects=objects)

    def preview(self) -> ProvisioningPlan:
        plan = self.plan()
        logger.info(
            "Preview: bucket %s with %d object(s) from %s",
            plan.bucket.bucket_name,
            len(plan.objects),
            self._files.build_path,
        )
        for obj in plan.objects:
            logger.info("  + %s -> %s (%s)", obj.logical_name, obj.key, obj.content_type or "default content type")
        return plan

    async def up(self) -> ProvisioningResult:
        plan = self.plan()
        logger.info("Provisioning bucket %s with %d object(s)", plan.bucket.bucket_name, len(plan.objects))

        ref = await self._backend.create_bucket(plan.bucket)
        await self._backend.set_policy(ref, plan.bucket.policy)
        await self._backend.configure_website(ref, plan.bucket.website)
        uploaded = await self._backend.upload_objects(plan.objects)

        website_domain = await self._backend.website_domain(ref)
        url = bucket_url(plan.bucket.bucket_name, website_domain)
        logger.info("Provisioning complete: %s", url)

        return ProvisioningResult(
            bucket_name=plan.bucket.bucket_name,
            website_domain=website_domain,
            bucket_url=url,
            objects_uploaded=uploaded,
        )
