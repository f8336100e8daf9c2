"""Command line entry point: rank a Flickr user's photos."""

import logging
import sys
import time
import uuid
from dataclasses import dataclass

import click
import httpx
import structlog

from flickrate import __version__
from flickrate.api import ApiMetrics, FlickrClient, PhotoDetail
from flickrate.browser import open_in_browser
from flickrate.cache import PhotoCache
from flickrate.config import AppSettings, ConfigStore, UserConfig, get_settings
from flickrate.errors import BrowserLaunchError, FlickrateError
from flickrate.oauth import AuthorizationFlow
from flickrate.observability import bind_run_context, clear_run_context, configure_logging
from flickrate.pipeline import DetailFetchPipeline, PipelineMetrics
from flickrate.ranking import ALL_METRICS, RankCriteria, RankMetric, rank_photos
from flickrate.renderer import render_table
from flickrate.transport import create_http_client


logger = structlog.get_logger()

COMPONENT_CLI = "cli"


@dataclass
class RunOptions:
    """Options for a ranking run."""

    target_user: str
    auth_user: str
    api_key: str
    api_secret: str
    min_days: int
    max_days: int | None
    min_views: int
    top: int
    workers: int | None
    metrics: frozenset[RankMetric]
    refresh: bool
    no_cache: bool
    open_urls: bool
    verbose: bool
    json_logs: bool


def _setup_logging_and_context(
    options: RunOptions, run_id: str
) -> structlog.typing.FilteringBoundLogger:
    """Set up logging and return bound logger.

    Args:
        options: Run options.
        run_id: Unique run identifier.

    Returns:
        Bound logger with run context.
    """
    log_level = logging.DEBUG if options.verbose else logging.INFO
    configure_logging(level=log_level, json_format=options.json_logs)
    bind_run_context(run_id)
    return logger.bind(component=COMPONENT_CLI, run_id=run_id)  # type: ignore[no-any-return]


def _echo_and_open(url: str) -> None:
    """Show the authorization URL and try to open it."""
    click.echo("Authorize flickrate in your browser:", err=True)
    click.echo(f"  {url}", err=True)
    try:
        open_in_browser(url)
    except BrowserLaunchError as e:
        click.echo(f"Could not open a browser ({e.message}); open the URL by hand.", err=True)


def _authorize(
    user_config: UserConfig,
    settings: AppSettings,
    http_client: httpx.Client,
    run_id: str,
) -> None:
    """Run the OAuth handshake and store the new token pair.

    The configuration is only modified once the handshake has succeeded.
    """
    flow = AuthorizationFlow(
        credential=user_config.credential(),
        http_client=http_client,
        browser=_echo_and_open,
        verifier_timeout=settings.verifier_timeout_seconds,
        run_id=run_id,
    )
    user_config.apply_credential(flow.run())


def _resolve_target(
    client: FlickrClient, user_config: UserConfig, target_user: str
) -> str:
    """Return the NSID of the user whose photos are ranked."""
    if target_user == user_config.auth_user and user_config.auth_user_nsid:
        return user_config.auth_user_nsid
    return client.find_user_id(target_user)


def _fetch_details(
    client: FlickrClient,
    settings: AppSettings,
    options: RunOptions,
    user_id: str,
    run_id: str,
    log: structlog.typing.FilteringBoundLogger,
) -> list[PhotoDetail]:
    """List the target's photos and fetch their detail records."""
    refs = client.search_photos(user_id)
    click.echo(f"Found {len(refs)} photos.")

    cache = PhotoCache(
        path=settings.cache_path,
        ttl=settings.cache_ttl,
        read_existing=not options.no_cache,
    )
    pipeline = DetailFetchPipeline(
        source=client,
        cache=cache,
        concurrency=options.workers or settings.workers,
        run_id=run_id,
    )
    result = pipeline.fetch(refs)

    failures = result.failures
    if failures:
        log.warning("details_incomplete", failed=len(failures), total=len(refs))
        click.echo(
            f"Warning: {len(failures)} of {len(refs)} photo details could not "
            "be fetched; ranking the rest.",
            err=True,
        )

    return list(result.details.values())


def _execute_run(options: RunOptions) -> None:
    """Execute a ranking run.

    1. Load settings and the stored configuration
    2. Authorize if a user is configured without a token
    3. Verify the credential and resolve the target user
    4. Fetch photo details through the cache
    5. Rank and print
    """
    run_id = str(uuid.uuid4())
    log = _setup_logging_and_context(options, run_id)
    settings = get_settings()

    store = ConfigStore(settings.config_path, run_id=run_id)
    user_config = store.load()
    changed = user_config.apply_overrides(
        user=options.auth_user,
        api_key=options.api_key,
        api_secret=options.api_secret,
        refresh=options.refresh,
    )

    criteria = RankCriteria(
        min_days=options.min_days,
        max_days=options.max_days,
        min_views=options.min_views,
        top=options.top,
        metrics=options.metrics,
    )

    with create_http_client(timeout=settings.http_timeout_seconds) as http_client:
        if user_config.needs_authorization:
            _authorize(user_config, settings, http_client, run_id)
            changed = True

        if changed:
            store.save(user_config)

        client = FlickrClient(user_config.credential(), http_client, run_id=run_id)

        if client.is_authenticated:
            identity = client.check_login()
            log.info("login_verified", user_id=identity.user_id, username=identity.username)
            if not user_config.auth_user_nsid and identity.username == user_config.auth_user:
                user_config.auth_user_nsid = identity.user_id
                store.save(user_config)

        target_user = options.target_user or user_config.auth_user
        if not target_user:
            click.echo("Error: Must supply a user name to query.", err=True)
            sys.exit(1)

        user_id = _resolve_target(client, user_config, target_user)
        log.info("target_resolved", target_user=target_user, user_id=user_id)

        details = _fetch_details(client, settings, options, user_id, run_id, log)

    ranking = rank_photos(details, criteria, now=int(time.time()), run_id=run_id)

    click.echo()
    click.echo(render_table(ranking.selected))

    if options.open_urls:
        for photo in ranking.selected:
            url = photo.detail.info.page_url
            if not url:
                continue
            try:
                open_in_browser(url)
            except BrowserLaunchError as e:
                log.warning("photo_open_failed", photo_id=photo.detail.id, error=e.message)

    log.debug(
        "run_metrics",
        api=ApiMetrics.get_instance().to_dict(),
        pipeline=PipelineMetrics.get_instance().to_dict(),
    )
    log.info("run_complete", selected=len(ranking.selected))


def _selected_metrics(views: bool, rate: bool, faves: bool, faverate: bool) -> frozenset[RankMetric]:
    """Map the metric flags to a metric set; no flag selects all metrics."""
    flags = {
        RankMetric.VIEWS: views,
        RankMetric.RATE: rate,
        RankMetric.FAVES: faves,
        RankMetric.FAVE_RATE: faverate,
    }
    chosen = frozenset(metric for metric, on in flags.items() if on)
    return chosen or ALL_METRICS


@click.command()
@click.version_option(version=__version__)
@click.argument("target_user", required=False, default="")
@click.option("--user", "auth_user", default="", help="Your Flickr user name.")
@click.option("--key", "api_key", default="", help="Flickr API key.")
@click.option("--secret", "api_secret", default="", help="Flickr API secret.")
@click.option(
    "--mindays", "min_days", type=click.IntRange(min=0), default=60,
    help="Minimum age in days (default: 60).",
)
@click.option(
    "--maxdays", "max_days", type=click.IntRange(min=0), default=None,
    help="Maximum age in days (default: no limit).",
)
@click.option(
    "--minviews", "min_views", type=click.IntRange(min=0), default=1000,
    help="Minimum views (default: 1000).",
)
@click.option(
    "--top", type=click.IntRange(min=0), default=10,
    help="Show the top N photos per metric (default: 10).",
)
@click.option(
    "--workers", "-w", type=click.IntRange(min=1), default=None,
    help="Number of queries to make at a time (default: 20).",
)
@click.option("--views", is_flag=True, help="Select by total views.")
@click.option("--rate", is_flag=True, help="Select by views per day.")
@click.option("--faves", is_flag=True, help="Select by total favorites.")
@click.option("--faverate", is_flag=True, help="Select by favorites per view.")
@click.option("--refresh", is_flag=True, help="Refresh login credentials.")
@click.option("--nocache", "no_cache", is_flag=True, help="Ignore cached photo details.")
@click.option("--open", "-o", "open_urls", is_flag=True, help="Open photo URLs in the browser.")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging.")
@click.option("--json-logs", is_flag=True, help="Use JSON format for logs.")
def cli(  # noqa: PLR0913
    target_user: str,
    auth_user: str,
    api_key: str,
    api_secret: str,
    min_days: int,
    max_days: int | None,
    min_views: int,
    top: int,
    workers: int | None,
    views: bool,
    rate: bool,
    faves: bool,
    faverate: bool,
    refresh: bool,
    no_cache: bool,
    open_urls: bool,
    verbose: bool,
    json_logs: bool,
) -> None:
    """Rank TARGET_USER's photos by views, favorites and their rates.

    TARGET_USER defaults to the authorized user. Without any of --views,
    --rate, --faves or --faverate, photos are selected by all four.
    """
    if max_days is not None and max_days < min_days:
        raise click.BadParameter("must not be below --mindays", param_hint="--maxdays")

    options = RunOptions(
        target_user=target_user,
        auth_user=auth_user,
        api_key=api_key,
        api_secret=api_secret,
        min_days=min_days,
        max_days=max_days,
        min_views=min_views,
        top=top,
        workers=workers,
        metrics=_selected_metrics(views, rate, faves, faverate),
        refresh=refresh,
        no_cache=no_cache,
        open_urls=open_urls,
        verbose=verbose,
        json_logs=json_logs,
    )

    try:
        _execute_run(options)
    except FlickrateError as e:
        logger.bind(component=COMPONENT_CLI).error("run_failed", **e.to_dict())
        click.echo(f"Error: {e.message}", err=True)
        sys.exit(1)
    finally:
        clear_run_context()
