"""Mapping between general records and API Hub documents.

All functions here are pure. Project and region are not part of the
general record; they come in through ``ResourceNames``.
"""

import base64
from dataclasses import dataclass

from oasync.catalog.hierarchy import DeploymentNode, VersionNode
from oasync.models.apihub import (
    HubApi,
    HubAttribute,
    HubAttributeValue,
    HubContents,
    HubDeployment,
    HubDocumentation,
    HubEnumValues,
    HubOwner,
    HubSpec,
    HubVersion,
)
from oasync.models.general import CanonicalRecord

DEPLOYMENT_TYPE_ATTRIBUTE = "system-deployment-type"
SPEC_TYPE_ATTRIBUTE = "system-spec-type"
SPEC_MIME_TYPE = "application/json"
OPENAPI_SPEC_TYPE = HubAttributeValue(
    id="openapi",
    displayName="OpenAPI Spec",
    description="OpenAPI Spec",
    immutable=True,
)


@dataclass(frozen=True)
class ResourceNames:
    """Builds fully qualified API Hub resource names."""

    project: str
    region: str

    @property
    def parent(self) -> str:
        return f"projects/{self.project}/locations/{self.region}"

    def top_level(self, collection: str, local_id: str) -> str:
        return f"{self.parent}/{collection}/{local_id}"

    def api(self, api_id: str) -> str:
        return self.top_level("apis", api_id)

    def version(self, api_id: str, version_id: str) -> str:
        return f"{self.api(api_id)}/versions/{version_id}"

    def spec(self, api_id: str, version_id: str, spec_id: str) -> str:
        return f"{self.version(api_id, version_id)}/specs/{spec_id}"

    def deployment(self, deployment_id: str) -> str:
        return self.top_level("deployments", deployment_id)

    def attribute(self, attribute_id: str) -> str:
        return self.top_level("attributes", attribute_id)


def local_id(name: str) -> str:
    """Last segment of a resource name."""
    return name.rsplit("/", 1)[-1]


def _documentation(url: str) -> HubDocumentation | None:
    return HubDocumentation(externalUri=url) if url else None


def _attribute(attribute: str, value: HubAttributeValue) -> HubAttribute:
    return HubAttribute(attribute=attribute, enumValues=HubEnumValues(values=[value]))


def to_hub_api(names: ResourceNames, api_id: str, record: CanonicalRecord) -> HubApi:
    owner = None
    if record.ownerName:
        owner = HubOwner(displayName=record.ownerName, email=record.ownerEmail)
    return HubApi(
        name=names.api(api_id),
        displayName=record.displayName,
        description=record.description,
        documentation=_documentation(record.documentationUrl),
        owner=owner,
    )


def to_hub_deployment(names: ResourceNames, deployment_id: str, record: CanonicalRecord) -> HubDeployment:
    platform = HubAttributeValue(
        id=record.platformId,
        displayName=record.platformName,
        description=record.platformName,
        immutable=True,
    )
    return HubDeployment(
        name=names.deployment(deployment_id),
        displayName=record.displayName,
        description=record.description,
        documentation=_documentation(record.documentationUrl),
        deploymentType=_attribute(names.attribute(DEPLOYMENT_TYPE_ATTRIBUTE), platform),
        resourceUri=record.platformResourceUri,
        endpoints=[record.gatewayUrl] if record.gatewayUrl else [],
        apiVersions=[record.version] if record.version else [],
    )


def to_hub_version(names: ResourceNames, api_id: str, node: VersionNode) -> HubVersion:
    """Version document referencing every deployment grouped under ``node``."""
    return HubVersion(
        name=names.version(api_id, node.version_key),
        displayName=node.display_name,
        description=node.description,
        documentation=_documentation(node.documentation_url),
        deployments=[names.deployment(key) for key in node.deployment_keys],
    )


def to_hub_spec(
    names: ResourceNames,
    api_id: str,
    version_id: str,
    deployment_id: str,
    record: CanonicalRecord,
    spec_bytes: bytes,
) -> HubSpec:
    display_name = record.displayName
    if record.platformName:
        display_name = f"{display_name} ({record.platformName})"
    return HubSpec(
        name=names.spec(api_id, version_id, deployment_id),
        displayName=display_name,
        specType=_attribute(names.attribute(SPEC_TYPE_ATTRIBUTE), OPENAPI_SPEC_TYPE),
        contents=HubContents(
            mimeType=SPEC_MIME_TYPE,
            contents=base64.b64encode(spec_bytes).decode("ascii"),
        ),
        documentation=_documentation(record.documentationUrl),
    )


def spec_from_node(names: ResourceNames, api_id: str, version_id: str, node: DeploymentNode) -> HubSpec | None:
    if node.spec is None:
        return None
    return to_hub_spec(names, api_id, version_id, node.deployment_key, node.record, node.spec.body)


# Inverse mappings. Fields the general record has no room for are dropped.

def from_hub_api(api: HubApi) -> CanonicalRecord:
    return CanonicalRecord(
        name=local_id(api.name),
        displayName=api.displayName,
        description=api.description,
        documentationUrl=api.documentation.externalUri if api.documentation else "",
        ownerName=api.owner.displayName if api.owner else "",
        ownerEmail=api.owner.email if api.owner else "",
    )


def from_hub_deployment(deployment: HubDeployment) -> CanonicalRecord:
    values = deployment.deploymentType.enumValues.values
    platform = values[0] if values else None
    return CanonicalRecord(
        name=local_id(deployment.name),
        displayName=deployment.displayName,
        description=deployment.description,
        version=deployment.apiVersions[0] if deployment.apiVersions else "",
        documentationUrl=deployment.documentation.externalUri if deployment.documentation else "",
        gatewayUrl=deployment.endpoints[0] if deployment.endpoints else "",
        platformId=platform.id if platform else "",
        platformName=platform.displayName if platform else "",
        platformResourceUri=deployment.resourceUri,
    )


def decode_spec(spec: HubSpec) -> bytes:
    if spec.contents is None or not spec.contents.contents:
        return b""
    return base64.b64decode(spec.contents.contents)
