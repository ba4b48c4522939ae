from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class ResourceRef(BaseModel):
    """Opaque handle to a declared resource.

    Object declarations point at their bucket through a ref rather than the
    literal bucket name, so the backend can check the bucket was realized
    before any object bound to it.
    """

    model_config = ConfigDict(frozen=True)

    resource_type: str
    logical_name: str

    def __str__(self) -> str:
        return f"{self.resource_type}::{self.logical_name}"


class WebsiteSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    index_document: str = "index.html"
    error_document: str = "404.html"


class BucketDeclaration(BaseModel):
    model_config = ConfigDict(frozen=True)

    logical_name: str
    bucket_name: str
    policy: dict[str, Any]
    website: WebsiteSettings = Field(default_factory=WebsiteSettings)

    @property
    def ref(self) -> ResourceRef:
        return ResourceRef(resource_type="aws:s3:Bucket", logical_name=self.logical_name)


class ObjectDeclaration(BaseModel):
    model_config = ConfigDict(frozen=True)

    logical_name: str = Field(..., description="Unique resource name (the file's display name)")
    bucket: ResourceRef = Field(..., description="Handle of the parent bucket declaration")
    key: str = Field(..., description="S3 object key")
    source: str = Field(..., description="Local file whose bytes are uploaded")
    content_type: Optional[str] = None


class ProvisioningPlan(BaseModel):
    bucket: BucketDeclaration
    objects: list[ObjectDeclaration] = Field(default_factory=list)


class ProvisioningResult(BaseModel):
    bucket_name: str
    website_domain: str
    bucket_url: str
    objects_uploaded: int
