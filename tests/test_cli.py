import shutil
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner

from oasync.cli import main
from oasync.config import Settings
from oasync.errors import AuthenticationError
from oasync.remote.result import CallResult, CallStatus

FIXTURES = Path(__file__).parent / "fixtures"

HUB_FLAGS = ["--project", "my-project", "--region", "europe-west1", "--token", "abc"]


@pytest.fixture(autouse=True)
def isolated(monkeypatch, tmp_path):
    for name in Settings.model_fields:
        monkeypatch.delenv(f"OASYNC_{name.upper()}", raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def root(tmp_path):
    shutil.copytree(FIXTURES / "general", tmp_path / "catalog")
    return tmp_path / "catalog"


def _ok() -> CallResult:
    return CallResult(CallStatus.SUCCESS, 200, "OK")


def _hub_client() -> MagicMock:
    client = MagicMock()
    for method in ("create_api", "create_deployment", "create_version", "patch_version", "create_spec"):
        getattr(client, method).return_value = _ok()
    return client


class TestCliGeneral:
    def test_clean_local(self, root):
        runner = CliRunner()
        result = runner.invoke(main, ["--root", str(root), "general", "apis", "cleanlocal"])
        assert result.exit_code == 0
        assert "Removed local general APIs" in result.output
        assert not (root / "src" / "main" / "general").exists()

    def test_clean_local_nothing_there(self, tmp_path):
        runner = CliRunner()
        result = runner.invoke(main, ["--root", str(tmp_path), "general", "apis", "cleanlocal"])
        assert result.exit_code == 0
        assert "No local general APIs found" in result.output


class TestCliApiHub:
    def test_missing_project_is_usage_error(self, root):
        runner = CliRunner()
        result = runner.invoke(main, ["--root", str(root), "apihub", "apis", "onramp"])
        assert result.exit_code == 2
        assert "No project and region given" in result.output

    def test_onramp_writes_documents(self, root):
        runner = CliRunner()
        result = runner.invoke(main, [
            "--root", str(root), "apihub", "apis", "onramp",
            "--project", "my-project", "--region", "europe-west1",
        ])
        assert result.exit_code == 0
        assert "Done:" in result.output
        assert (root / "src" / "main" / "apihub" / "apiproxies" / "orders" / "orders-v1.json").exists()

    def test_onramp_reads_config_file(self, root, tmp_path):
        config = tmp_path / "oasync.yaml"
        config.write_text(f"project: my-project\nregion: europe-west1\nroot: {root}\napi: payments\n")
        runner = CliRunner()
        result = runner.invoke(main, ["--config", str(config), "apihub", "apis", "onramp"])
        assert result.exit_code == 0
        assert sorted(p.name for p in (root / "src" / "main" / "apihub" / "apiproxies").iterdir()) == ["payments"]

    @patch("oasync.cli.ApiHubClient")
    def test_import(self, MockClient, root):
        client = _hub_client()
        MockClient.return_value = client
        runner = CliRunner()
        runner.invoke(main, ["--root", str(root), "apihub", "apis", "onramp", *HUB_FLAGS])

        result = runner.invoke(main, ["--root", str(root), "apihub", "apis", "import", *HUB_FLAGS])

        assert result.exit_code == 0
        assert client.create_api.call_count == 2
        assert client.create_version.call_count == 3

    @patch("oasync.cli.ApiHubClient")
    def test_import_failure_exit_code(self, MockClient, root):
        client = _hub_client()
        client.create_api.return_value = CallResult(CallStatus.FAILED, 403, "Forbidden", "denied")
        MockClient.return_value = client
        runner = CliRunner()
        runner.invoke(main, ["--root", str(root), "apihub", "apis", "onramp", *HUB_FLAGS])

        result = runner.invoke(main, ["--root", str(root), "apihub", "apis", "import", *HUB_FLAGS])

        assert result.exit_code == 1
        assert "FAILED API orders" in result.output

    @patch("oasync.cli.CredentialProvider")
    def test_missing_credentials_is_usage_error(self, MockProvider, root):
        MockProvider.return_value.token.side_effect = AuthenticationError("no credentials")
        runner = CliRunner()
        result = runner.invoke(main, [
            "--root", str(root), "apihub", "apis", "export",
            "--project", "my-project", "--region", "europe-west1",
        ])
        assert result.exit_code == 2
        assert "no credentials" in result.output

    @patch("oasync.cli.ApiHubClient")
    def test_status(self, MockClient, root):
        MockClient.return_value.status.return_value = MagicMock(connected=True, message="Connected to API Hub")
        runner = CliRunner()
        result = runner.invoke(main, ["apihub", "status", *HUB_FLAGS])
        assert result.exit_code == 0
        assert "Connected to API Hub" in result.output

    def test_clean_local(self, root):
        runner = CliRunner()
        runner.invoke(main, ["--root", str(root), "apihub", "apis", "onramp", *HUB_FLAGS])
        result = runner.invoke(main, ["--root", str(root), "apihub", "apis", "cleanlocal"])
        assert result.exit_code == 0
        assert "Removed local API Hub APIs" in result.output
        assert (root / "src" / "main" / "general").exists()


class TestCliApigee:
    def test_deploy_requires_environment(self, tmp_path):
        runner = CliRunner()
        result = runner.invoke(main, [
            "--root", str(tmp_path), "apigee", "apis", "deploy", "--project", "my-project", "--token", "abc",
        ])
        assert result.exit_code == 2
        assert "--environment YOUR_ENVIRONMENT" in result.output

    def test_deploy_names_every_missing_parameter(self, tmp_path):
        runner = CliRunner()
        result = runner.invoke(main, ["--root", str(tmp_path), "apigee", "apis", "deploy"])
        assert result.exit_code == 2
        assert "No project and environment given" in result.output
        assert "--project YOUR_PROJECT_ID --environment YOUR_ENVIRONMENT" in result.output

    @patch("oasync.cli.ApigeeClient")
    def test_clean_products(self, MockClient, tmp_path):
        client = MagicMock()
        client.list_products.return_value = []
        MockClient.return_value = client
        runner = CliRunner()
        result = runner.invoke(main, [
            "--root", str(tmp_path), "apigee", "products", "clean", "--project", "my-project", "--token", "abc",
        ])
        assert result.exit_code == 0
        assert "nothing to do" in result.output

    def test_test_init(self, tmp_path):
        runner = CliRunner()
        result = runner.invoke(main, [
            "--root", str(tmp_path), "apigee", "test", "init", "--project", "my-project", "--environment", "test",
        ])
        assert result.exit_code == 0
        assert (tmp_path / "src" / "main" / "apigee" / "tests" / "test" / "products.json").exists()
