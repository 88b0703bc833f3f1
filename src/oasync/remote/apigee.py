"""Apigee management API client (organization scoped)."""

from oasync.errors import OasyncError
from oasync.models.apigee import (
    ApigeeDeveloper,
    ApigeeDeveloperList,
    ApigeeProduct,
    ApigeeProductList,
    ApigeeProxy,
    ApigeeProxyList,
)
from oasync.models.general import PlatformStatus
from oasync.remote.result import CallResult, json_body, rejection
from oasync.remote.transport import AuthenticatedHTTPClient

APIGEE_URL = "https://apigee.googleapis.com/v1"


class ApigeeClient:
    def __init__(self, http: AuthenticatedHTTPClient, org: str, base_url: str = APIGEE_URL):
        self.http = http
        self.org = org
        self.base_url = base_url.rstrip("/")

    def _url(self, resource: str) -> str:
        return f"{self.base_url}/organizations/{self.org}/{resource}"

    def list_proxies(self) -> list[ApigeeProxy]:
        resp = self.http.request("GET", self._url("apis"), params={"includeRevisions": "true"})
        return ApigeeProxyList.model_validate(json_body(resp)).proxies

    def get_proxy(self, name: str) -> ApigeeProxy:
        return ApigeeProxy.model_validate(json_body(self.http.request("GET", self._url(f"apis/{name}"))))

    def latest_revision(self, name: str) -> str | None:
        return self.get_proxy(name).latest_revision()

    def get_bundle(self, name: str, revision: str) -> bytes:
        resp = self.http.request(
            "GET", self._url(f"apis/{name}/revisions/{revision}"), params={"format": "bundle"}
        )
        if not resp.ok:
            raise rejection(resp)
        return resp.body

    def import_bundle(self, name: str, bundle: bytes) -> CallResult:
        resp = self.http.request(
            "POST",
            self._url("apis"),
            params={"name": name, "action": "import"},
            files={"file": (f"{name}.zip", bundle, "application/zip")},
        )
        return CallResult.from_response(resp)

    def deploy(self, environment: str, name: str, revision: str,
               service_account: str | None = None) -> CallResult:
        params = {"override": "true"}
        if service_account:
            params["serviceAccount"] = service_account
        resp = self.http.request(
            "POST",
            self._url(f"environments/{environment}/apis/{name}/revisions/{revision}/deployments"),
            params=params,
        )
        return CallResult.from_response(resp)

    def delete_proxy(self, name: str) -> CallResult:
        return CallResult.from_response(self.http.request("DELETE", self._url(f"apis/{name}")))

    def list_products(self) -> list[ApigeeProduct]:
        resp = self.http.request("GET", self._url("apiproducts"), params={"expand": "true"})
        return ApigeeProductList.model_validate(json_body(resp)).products

    def delete_product(self, name: str) -> CallResult:
        return CallResult.from_response(self.http.request("DELETE", self._url(f"apiproducts/{name}")))

    def list_developers(self) -> list[ApigeeDeveloper]:
        resp = self.http.request("GET", self._url("developers"), params={"expand": "true"})
        return ApigeeDeveloperList.model_validate(json_body(resp)).developers

    def delete_developer(self, email: str) -> CallResult:
        return CallResult.from_response(self.http.request("DELETE", self._url(f"developers/{email}")))

    def status(self) -> PlatformStatus:
        try:
            proxies = self.list_proxies()
        except OasyncError as e:
            return PlatformStatus(connected=False, message=str(e))
        return PlatformStatus(
            connected=True,
            message=f"Connected to Apigee, {len(proxies)} APIs found in project {self.org}.",
        )
