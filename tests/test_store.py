import json
import shutil
from pathlib import Path

import pytest

from oasync.catalog.store import DocumentKind, LocalCatalogStore, classify, read_json, spec_id
from oasync.errors import LocalIOError

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture
def general_store(tmp_path):
    shutil.copytree(FIXTURES / "general", tmp_path, dirs_exist_ok=True)
    return LocalCatalogStore(tmp_path, "general")


class TestClassify:
    def test_root_document_is_api(self):
        assert classify("orders", "orders") == DocumentKind.API

    def test_spec_document(self):
        assert classify("orders", "orders-v1-aws-oas") == DocumentKind.SPEC

    def test_deployment_document(self):
        assert classify("orders", "orders-v1-azure") == DocumentKind.DEPLOYMENT

    def test_anything_else_is_version(self):
        assert classify("orders", "orders-v1") == DocumentKind.VERSION

    def test_spec_id(self):
        assert spec_id("orders-v1-aws") == "orders-v1-aws-oas"


class TestLocalCatalogStore:
    def test_layout(self, tmp_path):
        store = LocalCatalogStore(tmp_path, "apihub")
        assert store.path_for("orders", "orders-v1") == (
            tmp_path / "src" / "main" / "apihub" / "apiproxies" / "orders" / "orders-v1.json"
        )

    def test_list_apis_sorted(self, general_store):
        assert general_store.list_apis() == ["orders", "payments"]

    def test_list_apis_missing_tree(self, tmp_path):
        assert LocalCatalogStore(tmp_path, "apihub").list_apis() == []

    def test_list_documents(self, general_store):
        assert general_store.list_documents("orders") == [
            "orders",
            "orders-v1-aws",
            "orders-v1-aws-oas",
            "orders-v1-azure",
            "orders-v2-aws",
        ]

    def test_list_documents_by_kind(self, general_store):
        assert general_store.list_documents("orders", DocumentKind.DEPLOYMENT) == [
            "orders-v1-aws",
            "orders-v1-azure",
            "orders-v2-aws",
        ]
        assert general_store.list_documents("orders", DocumentKind.SPEC) == ["orders-v1-aws-oas"]

    def test_list_documents_ignores_other_files(self, general_store):
        (general_store.api_dir("orders") / "notes.txt").write_text("x")
        assert "notes" not in general_store.list_documents("orders")

    def test_write_then_read(self, tmp_path):
        store = LocalCatalogStore(tmp_path, "apihub")
        path = store.write("orders", "orders", {"name": "orders", "displayName": "Orders"})
        assert path.read_text().endswith("}\n")
        assert json.loads(path.read_text()) == {"name": "orders", "displayName": "Orders"}
        assert store.read("orders", "orders")["displayName"] == "Orders"
        assert store.exists("orders", "orders")

    def test_write_overwrites(self, tmp_path):
        store = LocalCatalogStore(tmp_path, "apihub")
        store.write("orders", "orders", {"name": "a"})
        store.write("orders", "orders", {"name": "b"})
        assert store.read("orders", "orders") == {"name": "b"}

    def test_read_missing_raises(self, tmp_path):
        store = LocalCatalogStore(tmp_path, "apihub")
        with pytest.raises(LocalIOError):
            store.read("orders", "orders")

    def test_read_malformed_raises(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json")
        with pytest.raises(LocalIOError, match="malformed JSON"):
            read_json(path)

    def test_read_non_utf8_raises(self, tmp_path):
        path = tmp_path / "latin1.json"
        path.write_bytes(b'{"displayName": "Caf\xe9"}')
        with pytest.raises(LocalIOError, match="not valid UTF-8"):
            read_json(path)

    def test_read_bytes_keeps_raw_content(self, tmp_path):
        store = LocalCatalogStore(tmp_path, "general")
        path = store.path_for("orders", "orders-v1-aws-oas")
        path.parent.mkdir(parents=True)
        path.write_bytes(b"openapi: '3.0' # caf\xe9\n")
        assert store.read_bytes("orders", "orders-v1-aws-oas") == b"openapi: '3.0' # caf\xe9\n"

    def test_read_non_object_raises(self, tmp_path):
        path = tmp_path / "list.json"
        path.write_text("[1, 2]")
        with pytest.raises(LocalIOError, match="not a JSON object"):
            read_json(path)

    def test_clear(self, general_store):
        assert general_store.clear() is True
        assert not general_store.platform_dir.exists()
        assert general_store.clear() is False
