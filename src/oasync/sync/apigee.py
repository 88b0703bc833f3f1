"""Export, import, deploy and clean for Apigee proxy bundles."""

import logging
from pathlib import Path

from oasync.catalog.store import LocalCatalogStore, read_json, write_json
from oasync.errors import LocalIOError, PreconditionError, RemoteRejectionError, TransportError
from oasync.models.apigee import (
    ApigeeDeveloper,
    ApigeeDeveloperApp,
    ApigeeEnvironment,
    ApigeeProduct,
)
from oasync.remote.apigee import ApigeeClient
from oasync.remote.bundle import pack_bundle, unpack_bundle
from oasync.sync.outcome import Outcome, SyncReport, run_call

log = logging.getLogger(__name__)

APIGEE_PLATFORM = "apigee"

PROXY = "proxy"
PRODUCT = "product"
DEVELOPER = "developer"

TEST_DEVELOPER = ApigeeDeveloper(
    email="test@example.com", userName="testUser", firstName="Test", lastName="User"
)
TEST_PRODUCT_NAME = "test_product"


class ApigeeSync:
    def __init__(
        self,
        store: LocalCatalogStore,
        client: ApigeeClient | None = None,
        environment: str | None = None,
        service_account: str | None = None,
        api_filter: str | None = None,
    ):
        self.store = store
        self.client = client
        self.environment = environment or None
        self.service_account = service_account or None
        self.api_filter = api_filter or None
        self.report = SyncReport()

    def _selected(self, name: str) -> bool:
        return self.api_filter is None or self.api_filter == name

    def _require_environment(self) -> str:
        if not self.environment:
            raise PreconditionError(
                "No Apigee environment given. Please specify an --environment YOUR_ENVIRONMENT flag."
            )
        return self.environment

    def environment_file(self, environment: str) -> Path:
        return self.store.platform_dir / "environments" / environment / "deployments.json"

    def load_environment(self, environment: str) -> ApigeeEnvironment:
        path = self.environment_file(environment)
        if not path.is_file():
            return ApigeeEnvironment()
        try:
            return ApigeeEnvironment.model_validate(read_json(path))
        except (LocalIOError, ValueError) as e:
            log.warning("Ignoring unreadable %s: %s", path, e)
            return ApigeeEnvironment()

    def _list_proxies(self):
        try:
            return self.client.list_proxies()
        except (TransportError, RemoteRejectionError) as e:
            log.error("  >> Error listing Apigee proxies: %s", e)
            self.report.record(PROXY, self.client.org, Outcome.FAILED, str(e))
            return []

    def export(self) -> SyncReport:
        """Download the latest revision bundle of every proxy into the local store."""
        log.info("Exporting Apigee APIs for project %s...", self.client.org)
        environment = self.load_environment(self.environment) if self.environment else None

        for proxy in self._list_proxies():
            if not self._selected(proxy.name):
                continue
            revision = proxy.latest_revision()
            if revision is None:
                log.warning("Skipping %s: no revisions", proxy.name)
                self.report.record(PROXY, proxy.name, Outcome.SKIPPED, "no revisions")
                continue
            log.info("Exporting %s revision %s...", proxy.name, revision)
            try:
                bundle = self.client.get_bundle(proxy.name, revision)
                unpack_bundle(bundle, self.store.api_dir(proxy.name))
            except (TransportError, RemoteRejectionError, LocalIOError) as e:
                log.error("  >> Error exporting %s: %s", proxy.name, e)
                self.report.record(PROXY, proxy.name, Outcome.FAILED, str(e))
                continue
            self.report.record(PROXY, proxy.name, Outcome.EXPORTED)
            if environment is not None:
                environment.add_proxy(proxy.name)

        if environment is not None:
            write_json(self.environment_file(self.environment), environment.model_dump(mode="json"))
        return self.report

    def import_(self) -> SyncReport:
        """Upload every local proxy directory as a new revision."""
        log.info("Importing Apigee APIs to project %s...", self.client.org)
        for name in self.store.list_apis():
            if not self._selected(name):
                continue
            log.info("Importing %s...", name)
            try:
                bundle = pack_bundle(self.store.api_dir(name))
            except LocalIOError as e:
                log.error("  >> Error importing %s: %s", name, e)
                self.report.record(PROXY, name, Outcome.FAILED, str(e))
                continue
            run_call(self.report, PROXY, name, lambda: self.client.import_bundle(name, bundle), Outcome.CREATED)
        return self.report

    def deploy(self) -> SyncReport:
        """Deploy the latest revision of every local proxy to the environment."""
        environment = self._require_environment()
        log.info("Deploying Apigee APIs to project %s...", self.client.org)
        for name in self.store.list_apis():
            if not self._selected(name):
                continue
            try:
                revision = self.client.latest_revision(name)
            except (TransportError, RemoteRejectionError) as e:
                log.error("  >> Error reading revisions of %s: %s", name, e)
                self.report.record(PROXY, name, Outcome.FAILED, str(e))
                continue
            if revision is None:
                self.report.record(PROXY, name, Outcome.SKIPPED, "no revisions")
                continue
            log.info("Deploying %s version %s to environment %s...", name, revision, environment)
            run_call(
                self.report, PROXY, name,
                lambda: self.client.deploy(environment, name, revision, self.service_account),
                Outcome.DEPLOYED,
            )
        return self.report

    def clean(self) -> SyncReport:
        log.info("Removing all Apigee APIs for project %s...", self.client.org)
        for proxy in self._list_proxies():
            if self._selected(proxy.name):
                log.info("Deleting %s...", proxy.name)
                run_call(self.report, PROXY, proxy.name,
                         lambda: self.client.delete_proxy(proxy.name), Outcome.DELETED)
        return self.report

    def clean_products(self, product: str | None = None) -> SyncReport:
        log.info("Removing all Apigee Products for project %s...", self.client.org)
        try:
            products = self.client.list_products()
        except (TransportError, RemoteRejectionError) as e:
            log.error("  >> Error listing products: %s", e)
            self.report.record(PRODUCT, self.client.org, Outcome.FAILED, str(e))
            return self.report
        log.info("Found %d products.", len(products))
        for item in products:
            if product is None or product == item.name:
                log.info("Deleting %s...", item.name)
                run_call(self.report, PRODUCT, item.name,
                         lambda: self.client.delete_product(item.name), Outcome.DELETED)
        return self.report

    def clean_developers(self, email: str | None = None) -> SyncReport:
        log.info("Removing all Apigee Developers for project %s...", self.client.org)
        try:
            developers = self.client.list_developers()
        except (TransportError, RemoteRejectionError) as e:
            log.error("  >> Error listing developers: %s", e)
            self.report.record(DEVELOPER, self.client.org, Outcome.FAILED, str(e))
            return self.report
        for developer in developers:
            if email is None or email == developer.email:
                log.info("Deleting %s...", developer.email)
                run_call(self.report, DEVELOPER, developer.email,
                         lambda: self.client.delete_developer(developer.email), Outcome.DELETED)
        return self.report

    def init_test_data(self) -> Path:
        """Write a test developer, product and app covering the environment's proxies."""
        environment = self._require_environment()
        deployed = self.load_environment(environment)

        product = ApigeeProduct(
            name=TEST_PRODUCT_NAME,
            displayName="Test Product",
            apiResources=["/"],
            proxies=[p.name for p in deployed.proxies],
        )
        app = ApigeeDeveloperApp(
            developerEmail=TEST_DEVELOPER.email,
            name="test_app",
            displayName="Test App",
            apiProducts=[TEST_PRODUCT_NAME],
        )

        test_dir = self.store.platform_dir / "tests" / environment
        for filename, items in (
            ("developers.json", [TEST_DEVELOPER]),
            ("products.json", [product]),
            ("developerapps.json", [app]),
        ):
            path = write_json(test_dir / filename, [i.model_dump(mode="json", by_alias=True) for i in items])
            self.report.record("test data", path.name, Outcome.WRITTEN)
        return test_dir
