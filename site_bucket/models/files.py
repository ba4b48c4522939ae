from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class FileDescriptor(BaseModel):
    """A local file that will become one object in the website bucket."""

    model_config = ConfigDict(frozen=True)

    content_type: Optional[str] = Field(default=None, description="MIME type inferred from the file extension")
    absolute_path: str = Field(..., description="Resolved path of the local file")
    remote_key: str = Field(..., description="S3 object key, relative to the walked root")
    display_name: str = Field(..., description="Flat logical name of the object resource")
