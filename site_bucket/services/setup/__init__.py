"""Setup (provisioning) services.

This package contains the backends that *realize* the declared website bucket
and its objects against external infrastructure (S3 or an S3-compatible store).
"""

from site_bucket.services.setup.backend import ProvisioningBackend, ProvisioningError
from site_bucket.services.setup.s3_setup_service import S3WebsiteSetupService

__all__ = ["ProvisioningBackend", "ProvisioningError", "S3WebsiteSetupService"]
