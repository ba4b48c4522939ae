"""Configuration package (Facade).

Re-exports the public config types so callers import from a single path:

	from site_bucket.services.config import S3Config, WebsiteConfig

The underlying modules can be reorganised without touching call sites.
"""

from site_bucket.services.config.s3_config import S3Config
from site_bucket.services.config.website_config import WebsiteConfig

__all__ = ["S3Config", "WebsiteConfig"]
