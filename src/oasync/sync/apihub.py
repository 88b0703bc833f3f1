"""Onramp, import, export and clean for API Hub."""

import logging
from collections.abc import Callable

from oasync.catalog.hierarchy import load_hierarchy
from oasync.catalog.keys import ResourceKey
from oasync.catalog.store import DocumentKind, LocalCatalogStore, classify, spec_id
from oasync.errors import LocalIOError, RemoteRejectionError, TransportError
from oasync.models.apihub import HubApi, HubDeployment, HubModel, HubSpec, HubVersion
from oasync.remote.apihub import ApiHubClient
from oasync.sync.outcome import Outcome, SyncReport, reconcile, run_call
from oasync.translate import (
    ResourceNames,
    local_id,
    spec_from_node,
    to_hub_api,
    to_hub_deployment,
    to_hub_version,
)

log = logging.getLogger(__name__)

APIHUB_PLATFORM = "apihub"

# Fields of a version that may change after creation.
VERSION_UPDATE_MASK = "deployments"

API = "API"
VERSION = "version"
DEPLOYMENT = "deployment"
SPEC = "spec"


class ApiHubSync:
    """Moves catalog documents between the general store, the API Hub store and API Hub."""

    def __init__(
        self,
        store: LocalCatalogStore,
        names: ResourceNames,
        client: ApiHubClient | None = None,
        general_store: LocalCatalogStore | None = None,
        api_filter: str | None = None,
    ):
        self.store = store
        self.names = names
        self.client = client
        self.general_store = general_store
        self.api_filter = api_filter or None
        self.report = SyncReport()

    def _selected(self, api_key: str) -> bool:
        return self.api_filter is None or self.api_filter == api_key

    # onramp

    def onramp(self) -> SyncReport:
        """Translate general records into API Hub documents, locally."""
        for api_key in self.general_store.list_apis():
            if self._selected(api_key):
                self._onramp_api(api_key)
        return self.report

    def _onramp_api(self, api_key: str) -> None:
        log.info("Onramping %s...", api_key)
        try:
            tree = load_hierarchy(self.general_store, api_key)
        except LocalIOError as e:
            log.error("  >> Cannot onramp %s: %s", api_key, e)
            self.report.record(API, api_key, Outcome.FAILED, str(e))
            return
        if not tree.api.record.name:
            log.warning("Skipping %s: API record has no name", api_key)
            self.report.record(API, api_key, Outcome.SKIPPED, "API record has no name")
            return

        self._write(api_key, api_key, to_hub_api(self.names, api_key, tree.api.record), API)
        for version_key, version in tree.versions.items():
            for node in version.deployments:
                deployment = to_hub_deployment(self.names, node.deployment_key, node.record)
                self._write(api_key, node.deployment_key, deployment, DEPLOYMENT)

                spec = spec_from_node(self.names, api_key, version_key, node)
                if spec is not None:
                    self._write(api_key, spec_id(node.deployment_key), spec, SPEC)

            version_doc = to_hub_version(self.names, api_key, version)
            self._write(api_key, version_key, version_doc, VERSION)

    def _write(self, api_key: str, doc_id: str, doc, kind: str) -> None:
        self.store.write(api_key, doc_id, doc.to_document())
        self.report.record(kind, doc_id, Outcome.WRITTEN)

    # import

    def import_(self) -> SyncReport:
        """Create (or patch) every local API Hub document remotely."""
        log.info("Importing APIs to API Hub in project %s...", self.names.project)
        for api_key in self.store.list_apis():
            if self._selected(api_key):
                self._import_api(api_key)
        return self.report

    def _load(self, api_key: str, doc_id: str, model: type[HubModel]) -> dict | None:
        try:
            return model.model_validate(self.store.read(api_key, doc_id)).to_document()
        except LocalIOError as e:
            log.warning("%s", e)
        except ValueError as e:
            log.warning("%s: invalid %s document (%s)", self.store.path_for(api_key, doc_id), model.__name__, e)
        return None

    def _import_api(self, api_key: str) -> None:
        log.info("Importing %s...", api_key)
        try:
            api_doc = HubApi.model_validate(self.store.read(api_key, api_key)).to_document()
        except (LocalIOError, ValueError) as e:
            log.error("  >> Error, could not create API %s because its definition is unusable: %s", api_key, e)
            self.report.record(API, api_key, Outcome.FAILED, str(e))
            return
        reconcile(self.report, API, api_key, lambda: self.client.create_api(api_key, api_doc))

        versions: dict[str, list[str]] = {}
        for doc_id in self.store.list_documents(api_key, DocumentKind.DEPLOYMENT):
            key = ResourceKey.parse(doc_id)
            versions.setdefault(key.version_key, []).append(doc_id)

        for version_key, deployment_ids in versions.items():
            if version_key == api_key:
                log.warning("Skipping version %s: its key collides with the API document", version_key)
                continue
            for deployment_id in deployment_ids:
                self._import_deployment(api_key, deployment_id)
            self._import_version(api_key, version_key)
            for deployment_id in deployment_ids:
                self._import_spec(api_key, version_key, deployment_id)

    def _import_deployment(self, api_key: str, deployment_id: str) -> None:
        doc = self._load(api_key, deployment_id, HubDeployment)
        if doc is None:
            self.report.record(DEPLOYMENT, deployment_id, Outcome.SKIPPED, "unreadable document")
            return
        reconcile(self.report, DEPLOYMENT, deployment_id,
                  lambda: self.client.create_deployment(deployment_id, doc))

    def _import_version(self, api_key: str, version_key: str) -> None:
        doc = self._load(api_key, version_key, HubVersion)
        if doc is None:
            self.report.record(VERSION, version_key, Outcome.SKIPPED, "unreadable document")
            return
        reconcile(
            self.report,
            VERSION,
            version_key,
            lambda: self.client.create_version(api_key, version_key, doc),
            lambda: self.client.patch_version(api_key, version_key, doc, VERSION_UPDATE_MASK),
        )

    def _import_spec(self, api_key: str, version_key: str, deployment_id: str) -> None:
        doc_id = spec_id(deployment_id)
        if not self.store.exists(api_key, doc_id):
            return
        doc = self._load(api_key, doc_id, HubSpec)
        if doc is None:
            self.report.record(SPEC, doc_id, Outcome.SKIPPED, "unreadable document")
            return
        reconcile(self.report, SPEC, deployment_id,
                  lambda: self.client.create_spec(api_key, version_key, deployment_id, doc))

    # export

    def _fetch(self, kind: str, name: str, call: Callable):
        try:
            return call()
        except (TransportError, RemoteRejectionError) as e:
            log.error("  >> Error listing %s of %s: %s", kind, name, e)
            self.report.record(kind, name, Outcome.FAILED, str(e))
            return None

    def export(self) -> SyncReport:
        """Write the remote catalog into the local API Hub store."""
        log.info("Exporting all API Hub APIs for project %s...", self.names.project)
        apis = self._fetch(API, self.names.parent, self.client.list_apis) or []
        for api in apis:
            api_id = local_id(api.name)
            if self._selected(api_id):
                self._export_api(api_id, api)

        deployments = self._fetch(DEPLOYMENT, self.names.parent, self.client.list_deployments) or []
        for deployment in deployments:
            deployment_id = local_id(deployment.name)
            key = ResourceKey.derive(deployment_id)
            if not self._selected(key.api_key):
                continue
            if classify(key.api_key, deployment_id) != DocumentKind.DEPLOYMENT:
                log.warning("Skipping deployment %s: its id would not be stored as a deployment document", deployment_id)
                self.report.record(DEPLOYMENT, deployment_id, Outcome.SKIPPED, "not a deployment id")
                continue
            log.info("Exporting deployment %s...", deployment_id)
            self.store.write(key.api_key, deployment_id, deployment.to_document())
            self.report.record(DEPLOYMENT, deployment_id, Outcome.EXPORTED)
        return self.report

    def _export_api(self, api_id: str, api: HubApi) -> None:
        log.info("Exporting %s...", api_id)
        self.store.write(api_id, api_id, api.to_document())
        self.report.record(API, api_id, Outcome.EXPORTED)

        versions = self._fetch(VERSION, api_id, lambda: self.client.list_versions(api_id)) or []
        for version in versions:
            version_id = local_id(version.name)
            log.info("Exporting %s version %s...", api_id, version_id)
            self.store.write(api_id, version_id, version.to_document())
            self.report.record(VERSION, version_id, Outcome.EXPORTED)

            specs = self._fetch(SPEC, version_id, lambda: self.client.list_specs(api_id, version_id)) or []
            for spec in specs:
                self._export_spec(api_id, version_id, spec)

    def _export_spec(self, api_id: str, version_id: str, spec: HubSpec) -> None:
        spec_local_id = local_id(spec.name)
        log.info("Exporting %s spec %s...", api_id, spec_local_id)
        contents = self._fetch(
            SPEC, spec_local_id,
            lambda: self.client.get_spec_contents(api_id, version_id, spec_local_id),
        )
        if contents is None:
            return
        spec = spec.model_copy(update={"contents": contents})
        self.store.write(api_id, spec_id(spec_local_id), spec.to_document())
        self.report.record(SPEC, spec_local_id, Outcome.EXPORTED)

    # clean

    def clean(self) -> SyncReport:
        """Delete remote APIs (with their versions and specs) and deployments."""
        log.info("Removing all API Hub APIs for project %s...", self.names.project)
        for api in self._fetch(API, self.names.parent, self.client.list_apis) or []:
            if self._selected(local_id(api.name)):
                log.info("Deleting %s...", api.name)
                run_call(self.report, API, api.name, lambda: self.client.delete_api(api.name), Outcome.DELETED)

        for deployment in self._fetch(DEPLOYMENT, self.names.parent, self.client.list_deployments) or []:
            if self._selected(ResourceKey.derive(local_id(deployment.name)).api_key):
                log.info("Deleting %s...", deployment.name)
                run_call(self.report, DEPLOYMENT, deployment.name,
                         lambda: self.client.delete_deployment(deployment.name), Outcome.DELETED)
        return self.report

    def clean_local(self) -> bool:
        return self.store.clear()
