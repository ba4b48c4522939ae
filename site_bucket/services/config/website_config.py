from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import ClassVar


@dataclass(frozen=True)
class WebsiteConfig:
    """What gets published and how the bucket serves it."""

    source_dir: Path
    index_document: str = "index.html"
    error_document: str = "404.html"
    _DEFAULT_CONCURRENCY: ClassVar[int] = 10
    upload_concurrency: int = _DEFAULT_CONCURRENCY
    dry_run: bool = False

    @staticmethod
    def from_env() -> "WebsiteConfig":
        source_dir = Path(os.getenv("SITE_SOURCE_DIR", "source"))

        concurrency_raw = os.getenv("SITE_UPLOAD_CONCURRENCY")
        upload_concurrency = WebsiteConfig._DEFAULT_CONCURRENCY
        if concurrency_raw:
            try:
                upload_concurrency = int(concurrency_raw)
            except ValueError as exc:
                raise ValueError("Invalid SITE_UPLOAD_CONCURRENCY; must be an integer") from exc
            if upload_concurrency <= 0:
                raise ValueError("Invalid SITE_UPLOAD_CONCURRENCY; must be positive")

        dry_run = os.getenv("SITE_DRY_RUN", "").strip().lower() in {"1", "true", "yes", "on"}

        return WebsiteConfig(
            source_dir=source_dir,
            index_document=os.getenv("SITE_INDEX_DOCUMENT", "index.html"),
            error_document=os.getenv("SITE_ERROR_DOCUMENT", "404.html"),
            upload_concurrency=upload_concurrency,
            dry_run=dry_run,
        )
