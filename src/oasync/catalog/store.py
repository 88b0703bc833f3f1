"""File-tree backed catalog store.

Each platform keeps its documents under ``<root>/src/main/<platform>/apiproxies``,
one directory per API key and one JSON document per resource::

    apiproxies/<apiKey>/<apiKey>.json            API
    apiproxies/<apiKey>/<versionKey>.json        version
    apiproxies/<apiKey>/<deploymentKey>.json     deployment
    apiproxies/<apiKey>/<deploymentKey>-oas.json spec
"""

import json
import logging
import shutil
from enum import Enum
from pathlib import Path

from oasync.catalog.keys import ResourceKey
from oasync.errors import LocalIOError

log = logging.getLogger(__name__)

SPEC_SUFFIX = "-oas"
DOCUMENT_EXT = ".json"


class DocumentKind(str, Enum):
    API = "api"
    VERSION = "version"
    DEPLOYMENT = "deployment"
    SPEC = "spec"


def classify(api_key: str, doc_id: str) -> DocumentKind:
    """Tell which resource a document id inside ``api_key`` describes."""
    if doc_id == api_key:
        return DocumentKind.API
    if doc_id.endswith(SPEC_SUFFIX):
        return DocumentKind.SPEC
    if ResourceKey.parse(doc_id) is not None:
        return DocumentKind.DEPLOYMENT
    return DocumentKind.VERSION


def spec_id(deployment_key: str) -> str:
    return deployment_key + SPEC_SUFFIX


def read_json(path: Path) -> dict:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise LocalIOError(path, f"cannot read document ({e.strerror or e})") from e
    except UnicodeDecodeError as e:
        raise LocalIOError(path, f"not valid UTF-8 ({e.reason} at byte {e.start})") from e
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise LocalIOError(path, f"malformed JSON ({e.msg}, line {e.lineno})") from e
    if not isinstance(data, dict):
        raise LocalIOError(path, "document is not a JSON object")
    return data


def write_json(path: Path, data) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    log.debug("wrote %s", path)
    return path


class LocalCatalogStore:
    """Persistence for one platform's catalog documents."""

    def __init__(self, root: Path, platform: str):
        self.root = Path(root)
        self.platform = platform

    @property
    def platform_dir(self) -> Path:
        return self.root / "src" / "main" / self.platform

    @property
    def base_dir(self) -> Path:
        return self.platform_dir / "apiproxies"

    def api_dir(self, api_key: str) -> Path:
        return self.base_dir / api_key

    def path_for(self, api_key: str, doc_id: str) -> Path:
        return self.api_dir(api_key) / f"{doc_id}{DOCUMENT_EXT}"

    def list_apis(self) -> list[str]:
        if not self.base_dir.is_dir():
            return []
        return sorted(p.name for p in self.base_dir.iterdir() if p.is_dir())

    def list_documents(self, api_key: str, kind: DocumentKind | None = None) -> list[str]:
        """Document ids of one API in listing order, optionally of one kind."""
        api_dir = self.api_dir(api_key)
        if not api_dir.is_dir():
            return []
        ids = sorted(
            p.name[: -len(DOCUMENT_EXT)]
            for p in api_dir.iterdir()
            if p.is_file() and p.name.endswith(DOCUMENT_EXT)
        )
        if kind is None:
            return ids
        return [i for i in ids if classify(api_key, i) == kind]

    def exists(self, api_key: str, doc_id: str) -> bool:
        return self.path_for(api_key, doc_id).is_file()

    def read_bytes(self, api_key: str, doc_id: str) -> bytes:
        path = self.path_for(api_key, doc_id)
        try:
            return path.read_bytes()
        except OSError as e:
            raise LocalIOError(path, f"cannot read document ({e.strerror or e})") from e

    def read(self, api_key: str, doc_id: str) -> dict:
        return read_json(self.path_for(api_key, doc_id))

    def write(self, api_key: str, doc_id: str, data: dict) -> Path:
        return write_json(self.path_for(api_key, doc_id), data)

    def clear(self) -> bool:
        """Remove everything stored for this platform. Returns False if nothing was there."""
        if not self.platform_dir.exists():
            return False
        shutil.rmtree(self.platform_dir)
        return True
