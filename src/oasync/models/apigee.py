"""Apigee management API payloads."""

from pydantic import BaseModel, ConfigDict, Field


class ApigeeModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class ApigeeProxy(ApigeeModel):
    name: str
    revision: list[str] = Field(default_factory=list)
    apiProxyType: str = ""

    def latest_revision(self) -> str | None:
        numeric = [r for r in self.revision if r.isdigit()]
        if not numeric:
            return None
        return max(numeric, key=int)


class ApigeeProxyList(ApigeeModel):
    proxies: list[ApigeeProxy] = Field(default_factory=list)


class ApigeeEnvironmentProxy(ApigeeModel):
    name: str


class ApigeeEnvironment(ApigeeModel):
    """Contents of ``environments/<env>/deployments.json``."""

    proxies: list[ApigeeEnvironmentProxy] = Field(default_factory=list)
    sharedflows: list[ApigeeEnvironmentProxy] = Field(default_factory=list)

    def add_proxy(self, name: str) -> None:
        if not any(p.name == name for p in self.proxies):
            self.proxies.append(ApigeeEnvironmentProxy(name=name))


class ApigeeDeveloper(ApigeeModel):
    email: str
    userName: str = ""
    firstName: str = ""
    lastName: str = ""


class ApigeeDeveloperList(ApigeeModel):
    developers: list[ApigeeDeveloper] = Field(default_factory=list, alias="developer")


class ApigeeDeveloperApp(ApigeeModel):
    developerEmail: str
    name: str
    displayName: str = ""
    apiProducts: list[str] = Field(default_factory=list)
    expiryType: str = "never"


class ApigeeProduct(ApigeeModel):
    name: str
    displayName: str = ""
    scopes: list[str] = Field(default_factory=list)
    environments: list[str] = Field(default_factory=list)
    apiResources: list[str] = Field(default_factory=list)
    proxies: list[str] = Field(default_factory=list)


class ApigeeProductList(ApigeeModel):
    products: list[ApigeeProduct] = Field(default_factory=list, alias="apiProduct")
