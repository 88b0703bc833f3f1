"""Vendor-neutral ("general") API records.

Every source platform is offramped into these records, and every target
platform is onramped from them.
"""

from pydantic import BaseModel, ConfigDict


class CanonicalRecord(BaseModel):
    """One deployed instance of an API on one platform."""

    model_config = ConfigDict(extra="ignore")

    name: str = ""
    displayName: str = ""
    version: str = ""
    description: str = ""
    ownerName: str = ""
    ownerEmail: str = ""
    documentationUrl: str = ""
    gatewayUrl: str = ""
    basePath: str = ""
    platformId: str = ""
    platformName: str = ""
    platformResourceUri: str = ""
    spec: str | None = None  # raw spec text, usually OpenAPI JSON


class PlatformStatus(BaseModel):
    """Result of a connectivity check against one platform."""

    connected: bool
    message: str
