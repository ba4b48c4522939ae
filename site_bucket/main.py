from __future__ import annotations

import asyncio
import logging
import sys
from typing import Optional

from site_bucket.services.config import S3Config, WebsiteConfig
from site_bucket.services.dependencies import get_provisioning_service
from site_bucket.services.files_manager import FilesystemError
from site_bucket.services.setup import ProvisioningError


logger = logging.getLogger(__name__)


def _ensure_logging() -> None:
    formatter = logging.Formatter("%(levelname)s: %(message)s")
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
    else:
        root.setLevel(logging.INFO)
        for handler in root.handlers:
            handler.setFormatter(formatter)


def run(*, s3: Optional[S3Config] = None, website: Optional[WebsiteConfig] = None) -> Optional[str]:
    """Provision the website bucket and return its URL.

    Returns None for a dry run, where the plan is only logged.
    """

    website = website or WebsiteConfig.from_env()
    service = get_provisioning_service(s3=s3, website=website)

    if website.dry_run:
        service.preview()
        return None

    result = asyncio.run(service.up())
    return result.bucket_url


def main() -> int:
    _ensure_logging()
    try:
        url = run()
    except (FilesystemError, ProvisioningError, ValueError) as exc:
        logger.exception("Provisioning failed: %s", exc)
        return 1

    if url is not None:
        print(f"bucketURL: {url}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
