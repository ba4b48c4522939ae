from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Sequence

from site_bucket.models.provisioning import BucketDeclaration, ObjectDeclaration, ResourceRef, WebsiteSettings


class ProvisioningError(RuntimeError):
    pass


class ProvisioningBackend(ABC):
    """Contract for whatever turns declarations into real resources.

    The driver only describes desired state; ordering beyond bucket-before-
    objects and any parallelism are the backend's business.
    """

    @abstractmethod
    async def create_bucket(self, declaration: BucketDeclaration) -> ResourceRef:
        """Create (or adopt) the bucket and return the handle objects bind to."""

    @abstractmethod
    async def set_policy(self, bucket: ResourceRef, policy: dict[str, Any]) -> None:
        pass

    @abstractmethod
    async def configure_website(self, bucket: ResourceRef, website: WebsiteSettings) -> None:
        pass

    @abstractmethod
    async def upload_object(self, declaration: ObjectDeclaration) -> None:
        pass

    @abstractmethod
    async def website_domain(self, bucket: ResourceRef) -> str:
        """Domain the backend serves the bucket's website from."""

    async def upload_objects(self, declarations: Sequence[ObjectDeclaration]) -> int:
        for declaration in declarations:
            await self.upload_object(declaration)
        return len(declarations)
