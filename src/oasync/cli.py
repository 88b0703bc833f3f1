"""CLI entry point for oasync."""

import functools
import logging
from pathlib import Path

import click

from oasync.catalog.store import LocalCatalogStore
from oasync.config import Settings, load_settings, require
from oasync.errors import AuthenticationError, ConfigError, PreconditionError
from oasync.remote.apigee import ApigeeClient
from oasync.remote.apihub import ApiHubClient
from oasync.remote.auth import CredentialProvider
from oasync.remote.transport import AuthenticatedHTTPClient
from oasync.sync.apigee import APIGEE_PLATFORM, ApigeeSync
from oasync.sync.apihub import APIHUB_PLATFORM, ApiHubSync
from oasync.sync.general import GENERAL_PLATFORM, clean_general
from oasync.sync.outcome import SyncReport
from oasync.translate import ResourceNames

EXIT_FAILED = 1


def _settings(ctx: click.Context, **flags) -> Settings:
    try:
        return load_settings(ctx.obj["config"], root=ctx.obj["root"], **flags)
    except ConfigError as e:
        raise click.UsageError(str(e)) from e


def _http(settings: Settings) -> AuthenticatedHTTPClient:
    """Build the transport and resolve the bearer token once, up front."""
    credentials = CredentialProvider(settings.token)
    credentials.token()
    return AuthenticatedHTTPClient(credentials, timeout=settings.timeout)


def _fail_fast(f):
    """Turn precondition and credential errors into usage errors (exit code 2)."""

    @functools.wraps(f)
    def wrapper(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except (PreconditionError, AuthenticationError) as e:
            raise click.UsageError(str(e)) from e

    return wrapper


def _finish(report: SyncReport) -> None:
    click.echo(f"Done: {report.summary()}.")
    for failure in report.failed:
        click.echo(f"  FAILED {failure.kind} {failure.name}: {failure.detail}", err=True)
    if report.failed:
        click.get_current_context().exit(EXIT_FAILED)


def _api_option(f):
    return click.option("--api", default=None, help="Only process the API with this name.")(f)


def _project_option(help_text: str):
    return click.option("--project", default=None, help=help_text)


def _token_option(f):
    return click.option("--token", default=None, help="Access token to call the platform with.")(f)


@click.group()
@click.option("--config", "config_path", default=None, type=click.Path(exists=True, dir_okay=False, path_type=Path),
              help="YAML file with default option values.")
@click.option("--root", default=None, type=click.Path(file_okay=False, path_type=Path),
              help="Directory holding the local src/main/<platform> trees.")
@click.option("-v", "--verbose", is_flag=True, help="Log every request.")
@click.version_option(package_name="oasync")
@click.pass_context
def main(ctx, config_path: Path | None, root: Path | None, verbose: bool):
    """oasync: sync API catalog metadata between API platforms."""
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO, format="%(message)s")
    ctx.ensure_object(dict)
    ctx.obj["config"] = config_path
    ctx.obj["root"] = root


# general


@main.group()
def general():
    """Vendor-neutral API records."""


@general.group("apis")
def general_apis():
    """Functions for general API resources."""


@general_apis.command("cleanlocal")
@click.pass_context
def general_clean_local(ctx):
    """Remove all offramped general definitions from local storage."""
    settings = _settings(ctx)
    if clean_general(settings.root):
        click.echo(f"Removed local {GENERAL_PLATFORM} APIs.")
    else:
        click.echo(f"No local {GENERAL_PLATFORM} APIs found.")


# API Hub


def _hub_options(f):
    f = _api_option(f)
    f = _token_option(f)
    f = click.option("--region", default=None, help="The Google Cloud region of API Hub.")(f)
    f = _project_option("The Google Cloud project of API Hub.")(f)
    return f


def _hub_sync(settings: Settings, remote: bool = True) -> ApiHubSync:
    require(settings, "project", "region")
    names = ResourceNames(settings.project, settings.region)
    client = None
    if remote:
        client = ApiHubClient(_http(settings), names, settings.apihub_url)
    return ApiHubSync(
        store=LocalCatalogStore(settings.root, APIHUB_PLATFORM),
        names=names,
        client=client,
        general_store=LocalCatalogStore(settings.root, GENERAL_PLATFORM),
        api_filter=settings.api,
    )


@main.group()
def apihub():
    """API Hub catalog."""


@apihub.group("apis")
def apihub_apis():
    """'apis export', 'apis import', 'apis onramp', 'apis clean'..."""


@apihub.command("status")
@_hub_options
@click.pass_context
@_fail_fast
def apihub_status(ctx, **flags):
    """Check the connection to API Hub."""
    settings = _settings(ctx, **flags)
    status = _hub_sync(settings).client.status()
    click.echo(status.message)
    if not status.connected:
        ctx.exit(EXIT_FAILED)


@apihub_apis.command("onramp")
@_hub_options
@click.pass_context
@_fail_fast
def apihub_onramp(ctx, **flags):
    """Onramp APIs from general to API Hub documents."""
    settings = _settings(ctx, **flags)
    _finish(_hub_sync(settings, remote=False).onramp())


@apihub_apis.command("import")
@_hub_options
@click.pass_context
@_fail_fast
def apihub_import(ctx, **flags):
    """Import local API Hub documents to API Hub."""
    settings = _settings(ctx, **flags)
    _finish(_hub_sync(settings).import_())


@apihub_apis.command("export")
@_hub_options
@click.pass_context
@_fail_fast
def apihub_export(ctx, **flags):
    """Export APIs from API Hub to local storage."""
    settings = _settings(ctx, **flags)
    _finish(_hub_sync(settings).export())


@apihub_apis.command("clean")
@_hub_options
@click.pass_context
@_fail_fast
def apihub_clean(ctx, **flags):
    """Remove all APIs and deployments from API Hub."""
    settings = _settings(ctx, **flags)
    _finish(_hub_sync(settings).clean())


@apihub_apis.command("cleanlocal")
@click.pass_context
def apihub_clean_local(ctx):
    """Remove all API Hub APIs from local storage."""
    settings = _settings(ctx)
    if LocalCatalogStore(settings.root, APIHUB_PLATFORM).clear():
        click.echo("Removed local API Hub APIs.")
    else:
        click.echo("No local API Hub APIs found.")


# Apigee


def _apigee_options(f):
    f = _api_option(f)
    f = _token_option(f)
    f = click.option("--service-account", default=None, help="Service account email to deploy proxies with.")(f)
    f = click.option("--environment", default=None, help="A specific Apigee environment.")(f)
    f = _project_option("The Google Cloud project that Apigee is running in.")(f)
    return f


def _apigee_sync(settings: Settings, remote: bool = True) -> ApigeeSync:
    require(settings, "project")
    client = None
    if remote:
        client = ApigeeClient(_http(settings), settings.project, settings.apigee_url)
    return ApigeeSync(
        store=LocalCatalogStore(settings.root, APIGEE_PLATFORM),
        client=client,
        environment=settings.environment,
        service_account=settings.service_account,
        api_filter=settings.api,
    )


@main.group()
def apigee():
    """Apigee proxies, products and developers."""


@apigee.group("apis")
def apigee_apis():
    """'apis export', 'apis import', 'apis deploy', 'apis clean'..."""


@apigee.command("status")
@_apigee_options
@click.pass_context
@_fail_fast
def apigee_status(ctx, **flags):
    """Check the connection to Apigee."""
    settings = _settings(ctx, **flags)
    status = _apigee_sync(settings).client.status()
    click.echo(status.message)
    if not status.connected:
        ctx.exit(EXIT_FAILED)


@apigee_apis.command("export")
@_apigee_options
@click.pass_context
@_fail_fast
def apigee_export(ctx, **flags):
    """Export Apigee proxy bundles from a project."""
    settings = _settings(ctx, **flags)
    _finish(_apigee_sync(settings).export())


@apigee_apis.command("import")
@_apigee_options
@click.pass_context
@_fail_fast
def apigee_import(ctx, **flags):
    """Import local proxy bundles to an Apigee project."""
    settings = _settings(ctx, **flags)
    _finish(_apigee_sync(settings).import_())


@apigee_apis.command("deploy")
@_apigee_options
@click.pass_context
@_fail_fast
def apigee_deploy(ctx, **flags):
    """Deploy the latest proxy revisions to an environment."""
    settings = _settings(ctx, **flags)
    require(settings, "project", "environment")
    _finish(_apigee_sync(settings).deploy())


@apigee_apis.command("clean")
@_apigee_options
@click.pass_context
@_fail_fast
def apigee_clean(ctx, **flags):
    """Remove all proxies from an Apigee project."""
    settings = _settings(ctx, **flags)
    _finish(_apigee_sync(settings).clean())


@apigee.group("products")
def apigee_products():
    """Functions for Apigee products."""


@apigee_products.command("clean")
@_project_option("The Google Cloud project that Apigee is running in.")
@_token_option
@click.option("--product", default=None, help="A specific Apigee product.")
@click.pass_context
@_fail_fast
def apigee_products_clean(ctx, project, token, product):
    """Remove all products from a project."""
    settings = _settings(ctx, project=project, token=token)
    _finish(_apigee_sync(settings).clean_products(product))


@apigee.group("developers")
def apigee_developers():
    """Functions for Apigee developers."""


@apigee_developers.command("clean")
@_project_option("The Google Cloud project that Apigee is running in.")
@_token_option
@click.option("--developer-email", default=None, help="A specific Apigee developer email.")
@click.pass_context
@_fail_fast
def apigee_developers_clean(ctx, project, token, developer_email):
    """Remove all developers and their apps from a project."""
    settings = _settings(ctx, project=project, token=token)
    _finish(_apigee_sync(settings).clean_developers(developer_email))


@apigee.group("test")
def apigee_test():
    """Local test commands."""


@apigee_test.command("init")
@_project_option("The Google Cloud project that Apigee is running in.")
@click.option("--environment", default=None, help="A specific Apigee environment.")
@click.pass_context
@_fail_fast
def apigee_test_init(ctx, project, environment):
    """Initialize local test data for an environment."""
    settings = _settings(ctx, project=project, environment=environment)
    require(settings, "project", "environment")
    test_dir = _apigee_sync(settings, remote=False).init_test_data()
    click.echo(f"Test data written to {test_dir}")
