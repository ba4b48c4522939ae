from __future__ import annotations

from typing import Optional

from site_bucket.services.config import S3Config, WebsiteConfig
from site_bucket.services.files_manager import FilesManager
from site_bucket.services.provisioning_service import ProvisioningService
from site_bucket.services.setup import ProvisioningBackend, S3WebsiteSetupService


def get_s3_config() -> S3Config:
    return S3Config.from_env()


def get_website_config() -> WebsiteConfig:
    return WebsiteConfig.from_env()


def get_files_manager(website: WebsiteConfig) -> FilesManager:
    """Provider for the local website files under `website.source_dir`."""

    return FilesManager(website.source_dir)


def get_s3_setup_service(s3: S3Config, website: WebsiteConfig) -> S3WebsiteSetupService:
    return S3WebsiteSetupService(s3, concurrency=website.upload_concurrency)


def get_provisioning_service(
    *,
    s3: Optional[S3Config] = None,
    website: Optional[WebsiteConfig] = None,
    backend: Optional[ProvisioningBackend] = None,
) -> ProvisioningService:
    """Wire the driver from environment config unless pieces are passed in."""

    s3 = s3 or get_s3_config()
    website = website or get_website_config()

    return ProvisioningService(
        s3=s3,
        website=website,
        files=get_files_manager(website),
        backend=backend or get_s3_setup_service(s3, website),
    )
