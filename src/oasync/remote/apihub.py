"""API Hub REST client.

Covers the collections oasync synchronizes: apis, apis/*/versions,
apis/*/versions/*/specs and deployments. Only the first page of each list
is read.
"""

from oasync.errors import OasyncError
from oasync.models.apihub import (
    HubApi,
    HubApiList,
    HubContents,
    HubDeployment,
    HubDeploymentList,
    HubSpec,
    HubSpecList,
    HubVersion,
    HubVersionList,
)
from oasync.models.general import PlatformStatus
from oasync.remote.result import CallResult, json_body
from oasync.remote.transport import AuthenticatedHTTPClient
from oasync.translate import ResourceNames

APIHUB_URL = "https://apihub.googleapis.com/v1"


class ApiHubClient:
    def __init__(self, http: AuthenticatedHTTPClient, names: ResourceNames, base_url: str = APIHUB_URL):
        self.http = http
        self.names = names
        self.base_url = base_url.rstrip("/")

    def _url(self, resource: str) -> str:
        return f"{self.base_url}/{resource}"

    def _get(self, resource: str) -> dict:
        return json_body(self.http.request("GET", self._url(resource)))

    def _call(self, method: str, resource: str, *, params=None, doc: dict | None = None) -> CallResult:
        resp = self.http.request(method, self._url(resource), params=params, json=doc)
        return CallResult.from_response(resp)

    # apis

    def list_apis(self) -> list[HubApi]:
        return HubApiList.model_validate(self._get(f"{self.names.parent}/apis")).apis

    def get_api(self, api_id: str) -> HubApi:
        return HubApi.model_validate(self._get(self.names.api(api_id)))

    def create_api(self, api_id: str, doc: dict) -> CallResult:
        return self._call("POST", f"{self.names.parent}/apis", params={"apiId": api_id}, doc=doc)

    def patch_api(self, api_id: str, doc: dict, update_mask: str) -> CallResult:
        return self._call("PATCH", self.names.api(api_id), params={"updateMask": update_mask}, doc=doc)

    def delete_api(self, name: str, force: bool = True) -> CallResult:
        params = {"force": "true"} if force else None
        return self._call("DELETE", name, params=params)

    # versions

    def list_versions(self, api_id: str) -> list[HubVersion]:
        data = self._get(f"{self.names.api(api_id)}/versions")
        return HubVersionList.model_validate(data).versions

    def create_version(self, api_id: str, version_id: str, doc: dict) -> CallResult:
        return self._call(
            "POST", f"{self.names.api(api_id)}/versions", params={"versionId": version_id}, doc=doc
        )

    def patch_version(self, api_id: str, version_id: str, doc: dict, update_mask: str) -> CallResult:
        return self._call(
            "PATCH", self.names.version(api_id, version_id), params={"updateMask": update_mask}, doc=doc
        )

    # specs

    def list_specs(self, api_id: str, version_id: str) -> list[HubSpec]:
        data = self._get(f"{self.names.version(api_id, version_id)}/specs")
        return HubSpecList.model_validate(data).specs

    def get_spec_contents(self, api_id: str, version_id: str, spec_id: str) -> HubContents:
        data = self._get(f"{self.names.spec(api_id, version_id, spec_id)}:contents")
        return HubContents.model_validate(data)

    def create_spec(self, api_id: str, version_id: str, spec_id: str, doc: dict) -> CallResult:
        return self._call(
            "POST",
            f"{self.names.version(api_id, version_id)}/specs",
            params={"specId": spec_id},
            doc=doc,
        )

    # deployments

    def list_deployments(self) -> list[HubDeployment]:
        data = self._get(f"{self.names.parent}/deployments")
        return HubDeploymentList.model_validate(data).deployments

    def create_deployment(self, deployment_id: str, doc: dict) -> CallResult:
        return self._call(
            "POST", f"{self.names.parent}/deployments", params={"deploymentId": deployment_id}, doc=doc
        )

    def delete_deployment(self, name: str) -> CallResult:
        return self._call("DELETE", name)

    def status(self) -> PlatformStatus:
        try:
            apis = self.list_apis()
        except OasyncError as e:
            return PlatformStatus(connected=False, message=str(e))
        return PlatformStatus(
            connected=True,
            message=(
                f"Connected to API Hub, {len(apis)} APIs found in project "
                f"{self.names.project} and region {self.names.region}."
            ),
        )
