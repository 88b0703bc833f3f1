"""API Hub wire schema.

Field names follow the REST representation so documents can be written to
and read from the local store unchanged. Optional fields are ``None`` and
are dropped on serialization; API Hub rejects empty documentation objects.
"""

from pydantic import BaseModel, ConfigDict, Field


class HubModel(BaseModel):
    model_config = ConfigDict(extra="ignore")

    def to_document(self) -> dict:
        return self.model_dump(exclude_none=True, mode="json")


class HubDocumentation(HubModel):
    externalUri: str


class HubOwner(HubModel):
    displayName: str
    email: str = ""


class HubAttributeValue(HubModel):
    id: str
    displayName: str = ""
    description: str = ""
    immutable: bool = False


class HubEnumValues(HubModel):
    values: list[HubAttributeValue] = Field(default_factory=list)


class HubAttribute(HubModel):
    """A value of one of API Hub's extensible attributes."""

    attribute: str = ""
    enumValues: HubEnumValues = Field(default_factory=HubEnumValues)


class HubApi(HubModel):
    name: str
    displayName: str = ""
    description: str = ""
    documentation: HubDocumentation | None = None
    owner: HubOwner | None = None
    versions: list[str] | None = None


class HubDeployment(HubModel):
    name: str
    displayName: str = ""
    description: str = ""
    documentation: HubDocumentation | None = None
    deploymentType: HubAttribute = Field(default_factory=HubAttribute)
    resourceUri: str = ""
    endpoints: list[str] = Field(default_factory=list)
    apiVersions: list[str] = Field(default_factory=list)


class HubVersion(HubModel):
    name: str
    displayName: str = ""
    description: str = ""
    documentation: HubDocumentation | None = None
    deployments: list[str] = Field(default_factory=list)


class HubContents(HubModel):
    mimeType: str = ""
    contents: str = ""  # base64


class HubSpec(HubModel):
    name: str
    displayName: str = ""
    specType: HubAttribute = Field(default_factory=HubAttribute)
    contents: HubContents | None = None
    documentation: HubDocumentation | None = None


class HubApiList(HubModel):
    apis: list[HubApi] = Field(default_factory=list)


class HubVersionList(HubModel):
    versions: list[HubVersion] = Field(default_factory=list)


class HubDeploymentList(HubModel):
    deployments: list[HubDeployment] = Field(default_factory=list)


class HubSpecList(HubModel):
    specs: list[HubSpec] = Field(default_factory=list)
