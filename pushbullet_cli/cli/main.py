"""
Command-line interface for pushbullet_cli.

Provides CLI commands for listing devices and chats, sending pushes, and
reading, pulling and deleting pushes.

Usage:
    # Show help
    pushbullet --help

    # List devices
    pushbullet list

    # Send a note to every device, or to one matched by name
    pushbullet push all note "Title" "Body"
    pushbullet push laptop link "Docs" https://docs.pushbullet.com

    # Show what arrived since the last pull
    pushbullet pull
"""

import sys
from pathlib import Path
from typing import Any, NoReturn, Optional
from urllib.parse import urlparse

import click

from pushbullet_cli import __version__
from pushbullet_cli.api.client import DEFAULT_API_URL, DEFAULT_TIMEOUT, PushbulletAPI
from pushbullet_cli.api.fetcher import PaginatedFetcher
from pushbullet_cli.cli.formatters import (
    format_timestamp,
    show_chats,
    show_devices,
    show_push,
    show_pushes,
)
from pushbullet_cli.config.generator import save_config_file
from pushbullet_cli.config.loader import (
    ConfigError,
    ConfigLoader,
    get_api_key,
)
from pushbullet_cli.errors import MalformedInput, ObjectNotFound, PushbulletError
from pushbullet_cli.models import Item
from pushbullet_cli.sync.resolver import (
    BROADCAST_QUERY,
    is_email_target,
    resolve_device,
    resolve_push_target,
)
from pushbullet_cli.sync.tracker import SyncTracker
from pushbullet_cli.sync.watermark import INITIAL_WATERMARK, ConfigWatermarkStore
from pushbullet_cli.utils import CONFIG_FILE_NAME, resolve_config_dir
from pushbullet_cli.utils.logging import cleanup_old_logs, get_logger, setup_logging

# Push kinds accepted by the push command
PUSH_KINDS = ("note", "link", "file")

# Pushes shown by `pushes recent` when no count is given
DEFAULT_RECENT_COUNT = 10

# Items requested per page when listing
DEFAULT_PAGE_LIMIT = 500

ACTIVE_ONLY = {"active": "true"}


def get_config_dir(config_dir: Optional[str]) -> Path:
    """Get the configuration directory path."""
    return resolve_config_dir(config_dir)


def get_config_file(config_dir: Path, config_file: Optional[str]) -> Path:
    """Get the configuration file path."""
    if config_file:
        return Path(config_file).expanduser()
    return config_dir / CONFIG_FILE_NAME


def parse_count(value: str, what: str = "count") -> int:
    """
    Parse a non-negative integer given on the command line.

    Raises:
        MalformedInput: If value is not a non-negative integer
    """
    try:
        count = int(value)
    except (TypeError, ValueError):
        raise MalformedInput(f"Invalid {what} '{value}': expected a number") from None
    if count < 0:
        raise MalformedInput(f"Invalid {what} '{value}': must not be negative")
    return count


def validate_url(url: str) -> str:
    """
    Check that url has a scheme and a host.

    Raises:
        MalformedInput: If the URL is not absolute
    """
    parsed = urlparse(url)
    if not parsed.scheme or not parsed.netloc:
        raise MalformedInput(
            f"Invalid URL '{url}': expected something like https://example.com"
        )
    return url


def read_stdin_body() -> Optional[str]:
    """Return text piped on stdin, or None when stdin is a terminal."""
    stdin = click.get_text_stream("stdin")
    if stdin.isatty():
        return None
    text = stdin.read()
    return text.rstrip("\n") or None


def exit_with_error(error: PushbulletError) -> NoReturn:
    """Report a failure on stderr and exit with the error's code."""
    logger = get_logger(__name__)
    logger.debug(f"{type(error).__name__}: {error}")
    click.echo(click.style(f"Error: {error}", fg="red"), err=True)
    if error.payload:
        logger.debug(f"Response payload: {error.payload}")
    sys.exit(error.exit_code)


def get_api(ctx: click.Context) -> PushbulletAPI:
    """Build the API client from the loaded configuration."""
    config = ctx.obj["config"]
    return PushbulletAPI(
        api_key=get_api_key(config) or "",
        base_url=config.get("api_url", DEFAULT_API_URL),
        timeout=config.get("api_timeout", DEFAULT_TIMEOUT),
    )


def get_fetcher(ctx: click.Context) -> PaginatedFetcher:
    return PaginatedFetcher(get_api(ctx))


def page_params(ctx: click.Context, **extra: Any) -> dict[str, Any]:
    params: dict[str, Any] = dict(ACTIVE_ONLY)
    params["limit"] = ctx.obj["config"].get("page_limit", DEFAULT_PAGE_LIMIT)
    params.update(extra)
    return params


@click.group()
@click.version_option(version=__version__, prog_name="pushbullet")
@click.option(
    "--verbose", "-v", is_flag=True, help="Enable verbose output with detailed logging."
)
@click.option(
    "--config-dir",
    "-c",
    type=click.Path(exists=False, file_okay=False, dir_okay=True),
    envvar="PUSHBULLET_CONFIG_DIR",
    help="Configuration directory path (default: ~/.config/pushbullet).",
)
@click.option(
    "--config-file",
    "-f",
    type=click.Path(exists=False, file_okay=True, dir_okay=False),
    envvar="PUSHBULLET_CONFIG_FILE",
    help="Configuration file path (default: <config dir>/config.yaml).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    config_dir: Optional[str],
    config_file: Optional[str],
) -> None:
    """
    Pushbullet command-line client.

    Lists devices and chats, sends notes, links and files, and reads,
    pulls or deletes pushes.
    """
    ctx.ensure_object(dict)

    resolved_config_dir = get_config_dir(config_dir)
    resolved_config_file = get_config_file(resolved_config_dir, config_file)

    ctx.obj["config_dir"] = resolved_config_dir
    ctx.obj["config_file"] = resolved_config_file

    config: dict[str, Any] = {}
    ctx.obj["file_config"] = None
    try:
        loader = ConfigLoader()
        config = loader.load_from_file(resolved_config_file)
        if config:
            loader.validate(config)
        ctx.obj["file_config"] = config
    except ConfigError as e:
        # Keep going with defaults; the API key may still come from the environment
        click.echo(
            click.style(f"Warning: Configuration error: {e}", fg="yellow"), err=True
        )
        config = {}

    ctx.obj["config"] = config

    effective_verbose = verbose or config.get("verbose", False)
    ctx.obj["verbose"] = effective_verbose

    log_dir = resolved_config_dir / "logs"
    if config.get("log_dir"):
        log_dir = Path(config["log_dir"])
    setup_logging(verbose=effective_verbose, log_dir=log_dir, enable_file_logging=True)

    log_retention = config.get("log_retention_count", 10)
    if log_retention > 0:
        cleanup_old_logs(log_dir=log_dir, keep_count=log_retention)


# =============================================================================
# List Command
# =============================================================================


@cli.command("list")
@click.pass_context
def list_command(ctx: click.Context) -> None:
    """
    List active devices.

    Example:

        pushbullet list
    """
    try:
        devices = get_fetcher(ctx).fetch_all("devices", page_params(ctx))
    except PushbulletError as e:
        exit_with_error(e)

    show_devices(devices)


# =============================================================================
# Chats Command
# =============================================================================


@cli.command("chats")
@click.pass_context
def chats_command(ctx: click.Context) -> None:
    """
    List active chats (contacts you can push to by email).

    Example:

        pushbullet chats
    """
    try:
        chats = get_fetcher(ctx).fetch_all("chats", page_params(ctx))
    except PushbulletError as e:
        exit_with_error(e)

    show_chats(chats)


# =============================================================================
# Push Command
# =============================================================================


def build_push(kind: str, args: tuple[str, ...], api: PushbulletAPI) -> dict[str, Any]:
    """
    Build the push body for one push kind from positional arguments.

    note: [TITLE] [BODY]
    link: TITLE URL [BODY]
    file: PATH [BODY]

    A missing body is read from stdin when something is piped in.

    Raises:
        MalformedInput: If the arguments do not fit the kind
    """
    push: dict[str, Any] = {"type": kind}

    if kind == "note":
        if len(args) > 2:
            raise MalformedInput("Usage: push TARGET note [TITLE] [BODY]")
        title = args[0] if args else None
        body = args[1] if len(args) > 1 else read_stdin_body()
        if title:
            push["title"] = title
        if body:
            push["body"] = body
        if not title and not body:
            raise MalformedInput("A note needs a title or a body")

    elif kind == "link":
        if not 2 <= len(args) <= 3:
            raise MalformedInput("Usage: push TARGET link TITLE URL [BODY]")
        push["title"] = args[0]
        push["url"] = validate_url(args[1])
        body = args[2] if len(args) > 2 else read_stdin_body()
        if body:
            push["body"] = body

    else:
        if not 1 <= len(args) <= 2:
            raise MalformedInput("Usage: push TARGET file PATH [BODY]")
        path = Path(args[0]).expanduser()
        if path.is_dir():
            raise MalformedInput(f"Cannot push a directory: {path}")
        if not path.exists():
            raise MalformedInput(f"No such file: {path}")
        push.update(api.upload_file(path))
        if len(args) > 1:
            push["body"] = args[1]

    return push


@cli.command("push", context_settings={"ignore_unknown_options": True})
@click.argument("target")
@click.argument("kind", type=click.Choice(PUSH_KINDS, case_sensitive=False))
@click.argument("args", nargs=-1)
@click.pass_context
def push_command(
    ctx: click.Context, target: str, kind: str, args: tuple[str, ...]
) -> None:
    """
    Send a note, link or file.

    TARGET is "all", a device name fragment, an email address or a
    channel tag.

    Examples:

        pushbullet push all note "Groceries" "milk, eggs"

        pushbullet push laptop link "Docs" https://docs.pushbullet.com

        pushbullet push friend@example.com file ./photo.jpg

        echo "build finished" | pushbullet push phone note "CI"
    """
    logger = get_logger(__name__)

    try:
        api = get_api(ctx)
        kind = kind.lower()

        devices: list[Item] = []
        if target.lower() != BROADCAST_QUERY and not is_email_target(target):
            devices = PaginatedFetcher(api).fetch_all("devices", page_params(ctx))

        resolved = resolve_push_target(devices, target)
        push = build_push(kind, args, api)
        push.update(resolved.push_fields())

        created = api.create_push(push)
    except PushbulletError as e:
        exit_with_error(e)

    logger.info(f"Pushed {kind} {created.get('iden')} to {resolved.name}")
    click.echo(click.style(f"Sent {kind} to {resolved.name}.", fg="green"))


# =============================================================================
# SMS Command
# =============================================================================


@cli.command("sms")
@click.argument("device")
@click.argument("number")
@click.argument("message")
@click.pass_context
def sms_command(ctx: click.Context, device: str, number: str, message: str) -> None:
    """
    Send an SMS through one of your phones.

    Example:

        pushbullet sms pixel +15551234567 "running late"
    """
    try:
        if is_email_target(device):
            raise MalformedInput(f"'{device}' is not a device name")

        api = get_api(ctx)
        devices = PaginatedFetcher(api).fetch_all("devices", page_params(ctx))
        resolved = resolve_device(devices, device)

        phone = next(d for d in devices if d.iden == resolved.iden)
        if not phone.get("has_sms"):
            raise MalformedInput(f"Device '{resolved.name}' cannot send SMS")

        api.send_sms(resolved.iden or "", number, message)
    except PushbulletError as e:
        exit_with_error(e)

    click.echo(click.style(f"SMS to {number} queued on {resolved.name}.", fg="green"))


# =============================================================================
# Pushes Commands
# =============================================================================


@cli.group("pushes")
@click.pass_context
def pushes_group(ctx: click.Context) -> None:
    """Read and delete pushes."""


@pushes_group.command("recent")
@click.argument("count", required=False, default=str(DEFAULT_RECENT_COUNT))
@click.pass_context
def pushes_recent_command(ctx: click.Context, count: str) -> None:
    """
    Show the most recent active pushes (default 10).

    Example:

        pushbullet pushes recent 5
    """
    try:
        limit = parse_count(count)
        payload = get_api(ctx).call(
            "GET", "pushes", params={**ACTIVE_ONLY, "limit": limit}
        )
    except PushbulletError as e:
        exit_with_error(e)

    logger = get_logger(__name__)
    pushes: list[Item] = []
    for entry in payload.get("pushes") or []:
        try:
            pushes.append(Item.from_api_response(entry, default_type="push"))
        except ValueError as e:
            logger.warning(f"Skipping unparseable push: {e}")
    show_pushes(pushes[:limit], verbose=ctx.obj["verbose"])


@pushes_group.command("active")
@click.pass_context
def pushes_active_command(ctx: click.Context) -> None:
    """
    Show every active push, newest first.

    Example:

        pushbullet pushes active
    """
    try:
        pushes = get_fetcher(ctx).fetch_all("pushes", page_params(ctx))
    except PushbulletError as e:
        exit_with_error(e)

    show_pushes(pushes, verbose=ctx.obj["verbose"])


@pushes_group.command("get")
@click.argument("iden")
@click.pass_context
def pushes_get_command(ctx: click.Context, iden: str) -> None:
    """
    Show a single push by identifier.

    Example:

        pushbullet pushes get ujpah72o0sjAoRtnM0jc
    """
    try:
        pushes = get_fetcher(ctx).fetch_all("pushes", page_params(ctx))
        push = next((p for p in pushes if p.iden == iden), None)
        if push is None:
            raise ObjectNotFound(f"No active push with iden {iden}")
    except PushbulletError as e:
        exit_with_error(e)

    show_push(push, verbose=True)


@pushes_group.command("delete")
@click.argument("what")
@click.argument("count", required=False)
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation prompt.")
@click.pass_context
def pushes_delete_command(
    ctx: click.Context, what: str, count: Optional[str], yes: bool
) -> None:
    """
    Delete pushes.

    WHAT is a push identifier, "all", or "except" followed by the number of
    most recent pushes to keep.

    Examples:

        pushbullet pushes delete ujpah72o0sjAoRtnM0jc

        pushbullet pushes delete except 20

        pushbullet pushes delete all --yes
    """
    logger = get_logger(__name__)

    try:
        api = get_api(ctx)

        if what == "all":
            if count is not None:
                raise MalformedInput("Usage: pushes delete all")
            if not yes:
                click.confirm("Delete ALL pushes?", abort=True)
            api.delete_all_pushes()
            click.echo(click.style("Deleted all pushes.", fg="green"))
            return

        if what == "except":
            if count is None:
                raise MalformedInput("Usage: pushes delete except COUNT")
            keep = parse_count(count)
            pushes = PaginatedFetcher(api).fetch_all("pushes", page_params(ctx))
            # Newest first by modification time, not by page position
            pushes.sort(key=lambda p: p.modified or 0.0, reverse=True)
            doomed = pushes[keep:]
            if doomed and not yes:
                click.confirm(
                    f"Delete {len(doomed)} push(es), keeping the {keep} most recent?",
                    abort=True,
                )
            for push in doomed:
                api.delete_push(push.iden)
            logger.info(f"Deleted {len(doomed)} pushes, kept {min(keep, len(pushes))}")
            click.echo(click.style(f"Deleted {len(doomed)} push(es).", fg="green"))
            return

        if count is not None:
            raise MalformedInput("Usage: pushes delete IDEN")
        api.delete_push(what)
        click.echo(click.style(f"Deleted push {what}.", fg="green"))

    except PushbulletError as e:
        exit_with_error(e)


# =============================================================================
# Pull Command
# =============================================================================


@cli.command("pull")
@click.option(
    "--reset", is_flag=True, help="Forget the stored watermark and pull everything."
)
@click.option(
    "--include-inactive",
    is_flag=True,
    help="Also report pushes deleted since the last pull.",
)
@click.pass_context
def pull_command(ctx: click.Context, reset: bool, include_inactive: bool) -> None:
    """
    Show pushes that arrived since the last pull.

    The modification time of the newest push seen is stored as
    PB_LASTMODIFIED in the configuration file and only advances after a
    complete, successful pull.

    Examples:

        pushbullet pull

        pushbullet pull --reset
    """
    logger = get_logger(__name__)
    store = ConfigWatermarkStore(ctx.obj["config_file"], ctx.obj["file_config"])

    try:
        tracker = SyncTracker(get_fetcher(ctx), store)
        result = tracker.sync_since(
            "pushes",
            watermark=INITIAL_WATERMARK if reset else None,
            active=not include_inactive,
        )
        # A reset may lower the stored value, but only once the pull succeeded
        if reset and result.watermark != store.load():
            store.save(result.watermark)
            logger.info(f"Watermark reset to {result.watermark}")
    except ConfigError as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        sys.exit(1)
    except PushbulletError as e:
        exit_with_error(e)

    if not result.items:
        click.echo("No new pushes.")
        return

    show_pushes(result.items, verbose=ctx.obj["verbose"])


# =============================================================================
# Status Command
# =============================================================================


@cli.command("status")
@click.pass_context
def status_command(ctx: click.Context) -> None:
    """
    Show configuration and account status.

    Example:

        pushbullet status
    """
    config = ctx.obj["config"]
    config_file = ctx.obj["config_file"]

    click.echo("=== Pushbullet Status ===\n")
    click.echo(f"Configuration directory: {ctx.obj['config_dir']}")
    click.echo(
        f"Configuration file: {config_file}"
        f"{'' if config_file.exists() else click.style(' (not found)', fg='yellow')}"
    )

    try:
        watermark = ConfigWatermarkStore(config_file, ctx.obj["file_config"]).load()
    except ConfigError as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        sys.exit(1)
    last_pull = format_timestamp(watermark) if watermark else "Never"
    click.echo(f"Last pull watermark: {last_pull}")

    if not get_api_key(config):
        click.echo(click.style("API key: Not configured", fg="red"))
        click.echo("Set PB_API_KEY in the environment or in the configuration file.")
        sys.exit(1)

    click.echo("API key: Configured")
    try:
        user = get_api(ctx).get_user()
    except PushbulletError as e:
        exit_with_error(e)

    click.echo(f"Account: {user.get('name', '?')} <{user.get('email', '?')}>")
    click.echo(click.style("\nReady to push!", fg="green"))


# =============================================================================
# Init-Config Command
# =============================================================================


@cli.command("init-config")
@click.option(
    "--force",
    "-f",
    is_flag=True,
    help="Overwrite existing configuration file if it exists.",
)
@click.pass_context
def init_config_command(ctx: click.Context, force: bool) -> None:
    """
    Generate a default configuration file.

    Examples:

        pushbullet init-config

        pushbullet init-config --force
    """
    logger = get_logger(__name__)
    config_file = ctx.obj["config_file"]

    click.echo(f"Creating configuration file: {config_file}")

    success, error = save_config_file(config_file, overwrite=force)

    if success:
        click.echo(click.style("Configuration file created successfully!", fg="green"))
        click.echo("\nNext steps:")
        click.echo("1. Add your access token as PB_API_KEY")
        click.echo("2. Run 'pushbullet status' to check the setup")
        logger.info(f"Created configuration file: {config_file}")
    else:
        click.echo(click.style(f"Error: {error}", fg="red"), err=True)
        logger.error(f"Failed to create configuration file: {error}")
        sys.exit(1)
