from pathlib import Path
from types import SimpleNamespace
from typing import Any, Optional

import pytest

from site_bucket.models.provisioning import BucketDeclaration, ObjectDeclaration, ResourceRef, WebsiteSettings
from site_bucket.services.setup.backend import ProvisioningBackend, ProvisioningError


class FakeS3Client:
    """Async stand-in for an aioboto3 S3 client; records every call."""

    def __init__(
        self,
        calls: list[tuple[str, dict[str, Any]]],
        failures: dict[str, Exception],
        region_name: Optional[str] = None,
    ) -> None:
        self._calls = calls
        self._failures = failures
        self.meta = SimpleNamespace(region_name=region_name)

    async def __aenter__(self) -> "FakeS3Client":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        return None

    async def _record(self, operation: str, kwargs: dict[str, Any]) -> dict[str, Any]:
        self._calls.append((operation, kwargs))
        failure = self._failures.get(operation)
        if failure is not None:
            raise failure
        return {}

    async def create_bucket(self, **kwargs: Any) -> dict[str, Any]:
        return await self._record("create_bucket", kwargs)

    async def put_public_access_block(self, **kwargs: Any) -> dict[str, Any]:
        return await self._record("put_public_access_block", kwargs)

    async def put_bucket_policy(self, **kwargs: Any) -> dict[str, Any]:
        return await self._record("put_bucket_policy", kwargs)

    async def put_bucket_website(self, **kwargs: Any) -> dict[str, Any]:
        return await self._record("put_bucket_website", kwargs)

    async def put_object(self, **kwargs: Any) -> dict[str, Any]:
        return await self._record("put_object", kwargs)


class FakeSession:
    def __init__(self, region_name: Optional[str] = None) -> None:
        self.region_name = region_name
        self.calls: list[tuple[str, dict[str, Any]]] = []
        self.failures: dict[str, Exception] = {}
        self.client_kwargs: list[dict[str, Any]] = []

    def client(self, service_name: str, **kwargs: Any) -> FakeS3Client:
        assert service_name == "s3"
        self.client_kwargs.append(kwargs)
        return FakeS3Client(self.calls, self.failures, kwargs.get("region_name") or self.region_name)

    def operations(self) -> list[str]:
        return [name for name, _ in self.calls]


class InMemoryBackend(ProvisioningBackend):
    """Backend that only records what it was asked to realize."""

    def __init__(self, *, domain: str = "s3-website-us-east-1.amazonaws.com") -> None:
        self.domain = domain
        self.events: list[str] = []
        self.buckets: dict[ResourceRef, BucketDeclaration] = {}
        self.objects: list[ObjectDeclaration] = []
        self.policies: dict[ResourceRef, dict[str, Any]] = {}
        self.websites: dict[ResourceRef, WebsiteSettings] = {}

    async def create_bucket(self, declaration: BucketDeclaration) -> ResourceRef:
        self.events.append(f"bucket:{declaration.bucket_name}")
        self.buckets[declaration.ref] = declaration
        return declaration.ref

    async def set_policy(self, bucket: ResourceRef, policy: dict[str, Any]) -> None:
        self.events.append("policy")
        self.policies[bucket] = policy

    async def configure_website(self, bucket: ResourceRef, website: WebsiteSettings) -> None:
        self.events.append("website")
        self.websites[bucket] = website

    async def upload_object(self, declaration: ObjectDeclaration) -> None:
        if declaration.bucket not in self.buckets:
            raise ProvisioningError(f"Bucket has not been created yet: {declaration.bucket}")
        self.events.append(f"object:{declaration.key}")
        self.objects.append(declaration)

    async def website_domain(self, bucket: ResourceRef) -> str:
        return self.domain


def write_file(path: Path, content: str = "") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    return path


@pytest.fixture
def site_dir(tmp_path: Path) -> Path:
    """index.html at the root plus css/style.css one level down."""

    root = tmp_path / "site"
    write_file(root / "index.html", "<html></html>")
    write_file(root / "css" / "style.css", "body {}")
    return root


@pytest.fixture
def fake_session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def memory_backend() -> InMemoryBackend:
    return InMemoryBackend()


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for name in (
        "SITE_BUCKET_NAME",
        "AWS_REGION",
        "AWS_DEFAULT_REGION",
        "S3_ENDPOINT_URL",
        "S3_WEBSITE_DOMAIN",
        "SITE_SOURCE_DIR",
        "SITE_INDEX_DOCUMENT",
        "SITE_ERROR_DOCUMENT",
        "SITE_UPLOAD_CONCURRENCY",
        "SITE_DRY_RUN",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def client_error(code: str, operation: str = "Operation", message: Optional[str] = None) -> Exception:
    from botocore.exceptions import ClientError

    return ClientError({"Error": {"Code": code, "Message": message or code}}, operation)
