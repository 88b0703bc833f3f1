"""Group flat per-deployment records into the API / version / deployment tree.

The tree is never stored; it is rebuilt from the store on every run, and the
deployment key of each record is the only source of its parents.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from oasync.catalog.keys import ResourceKey
from oasync.catalog.store import DocumentKind, LocalCatalogStore, spec_id
from oasync.errors import LocalIOError
from oasync.models.general import CanonicalRecord

log = logging.getLogger(__name__)


@dataclass
class SpecNode:
    deployment_key: str
    body: bytes

    @property
    def spec_id(self) -> str:
        return spec_id(self.deployment_key)


@dataclass
class DeploymentNode:
    key: ResourceKey
    record: CanonicalRecord
    spec: SpecNode | None = None

    @property
    def deployment_key(self) -> str:
        return self.key.deployment_key


@dataclass
class VersionNode:
    version_key: str
    display_name: str = ""
    description: str = ""
    documentation_url: str = ""
    deployments: list[DeploymentNode] = field(default_factory=list)

    @property
    def deployment_keys(self) -> list[str]:
        return [d.deployment_key for d in self.deployments]


@dataclass
class ApiNode:
    api_key: str
    record: CanonicalRecord


@dataclass
class ApiHierarchy:
    api: ApiNode
    versions: dict[str, VersionNode] = field(default_factory=dict)

    @property
    def specs(self) -> dict[str, SpecNode | None]:
        return {
            d.deployment_key: d.spec
            for version in self.versions.values()
            for d in version.deployments
        }


def build_hierarchy(
    api: ApiNode,
    records: Iterable[tuple[str, CanonicalRecord | None]],
    specs: dict[str, bytes] | None = None,
) -> ApiHierarchy:
    """Group ``(doc_id, record)`` pairs of one API by version key.

    Ids without a recognized platform suffix (the root API document, spec
    documents) are ignored. A ``None`` record stands for a document that
    could not be read and is skipped. The first deployment seen for a
    version supplies that version's display metadata.
    """
    specs = specs or {}
    tree = ApiHierarchy(api=api)
    for doc_id, record in records:
        key = ResourceKey.parse(doc_id)
        if key is None:
            continue
        if record is None:
            log.warning("Skipping deployment %s of %s: document unreadable", doc_id, api.api_key)
            continue
        if key.version_key == api.api_key:
            log.warning(
                "Skipping deployment %s: its version key collides with API %s",
                doc_id, api.api_key,
            )
            continue

        version = tree.versions.get(key.version_key)
        if version is None:
            version = VersionNode(
                version_key=key.version_key,
                display_name=record.displayName,
                description=record.description,
                documentation_url=record.documentationUrl,
            )
            tree.versions[key.version_key] = version

        body = specs.get(doc_id)
        spec = SpecNode(doc_id, body) if body is not None else None
        version.deployments.append(DeploymentNode(key=key, record=record, spec=spec))
    return tree


def load_hierarchy(store: LocalCatalogStore, api_key: str) -> ApiHierarchy:
    """Read one API's general records from ``store`` and group them.

    A missing or malformed root document raises ``LocalIOError``; broken
    deployment documents only produce a warning.
    """
    data = store.read(api_key, api_key)
    try:
        api = ApiNode(api_key, CanonicalRecord.model_validate(data))
    except ValueError as e:
        raise LocalIOError(store.path_for(api_key, api_key), f"invalid API record ({e})") from e

    records: list[tuple[str, CanonicalRecord | None]] = []
    specs: dict[str, bytes] = {}
    for doc_id in store.list_documents(api_key, DocumentKind.DEPLOYMENT):
        try:
            record = CanonicalRecord.model_validate(store.read(api_key, doc_id))
        except (LocalIOError, ValueError) as e:
            log.warning("%s", e)
            records.append((doc_id, None))
            continue
        records.append((doc_id, record))

        if record.spec:
            specs[doc_id] = record.spec.encode("utf-8")
        elif store.exists(api_key, spec_id(doc_id)):
            try:
                specs[doc_id] = store.read_bytes(api_key, spec_id(doc_id))
            except LocalIOError as e:
                log.warning("%s", e)
    return build_hierarchy(api, records, specs)
