"""Typer-powered command line interface for the Beget hosting API.

Commands fall into two families. ``auth`` manages the local profile store.
Every other group is a thin shell over one catalog entry: the command builds
the payload and hands it to :func:`begetctl.pipeline.execute`, which owns the
dry-run, confirmation, credential, and invocation steps.

Each command runs inside a structured-log operation scope. Failures raised as
:class:`~begetctl.errors.BegetError` are rendered once on stderr and mapped to
their exit code by :func:`_command_error`.
"""
from __future__ import annotations

import json
import os
import sys
import textwrap
from collections.abc import Callable, Iterator, Mapping, Sequence
from contextlib import contextmanager
from dataclasses import dataclass, field
from functools import partial
from pathlib import Path
from typing import Any, NoReturn, TypeAlias

import httpx
import typer

from . import get_version
from .catalog import GROUP_HELP, get_operation
from .client import CallRequest, invoke
from .config import SECRET_ENV_VARS, AppConfig, load_config
from .credentials import EffectiveCredentials, EnvironmentCredentials, resolve_credentials
from .errors import AbortedError, BegetError, UsageError
from .exit_codes import ExitCode
from .interaction import Interaction, TerminalInteraction, acquire_secret, interaction_allowed
from .logging import OperationScope, StructuredLogger
from .output import emit_error, emit_profiles, emit_result
from .pipeline import PipelineOptions, execute
from .profiles import Profile, ProfileStore, load_store, save_store

InputData: TypeAlias = Mapping[str, object] | Callable[[], Mapping[str, object]] | None

CONFIG_FILE_OPTION = typer.Option(
    None,
    "--config",
    help="Path to the profile store (overrides BEGET_CONFIG).",
)
DRY_RUN_OPTION = typer.Option(
    False,
    "--dry-run",
    help="Print the request that would be sent without calling the API.",
)
YES_OPTION = typer.Option(
    False,
    "--yes",
    "-y",
    help="Confirm risky actions without prompting.",
)
NO_INPUT_OPTION = typer.Option(
    False,
    "--no-input",
    help="Never prompt; secrets must come from the environment.",
)

API_PASSWORD_PROMPT = "Beget API password: "
LOGIN_PROMPT = "Beget login: "

app = typer.Typer(
    add_completion=False,
    help=textwrap.dedent(
        """
        Command line client for the Beget hosting API.

        Credentials come from --login/--profile, BEGET_* environment variables,
        or a stored profile managed with `beget auth`.
        """
    ).strip(),
)

auth_app = typer.Typer(help="Manage local Beget credentials.")
account_app = typer.Typer(help=GROUP_HELP["account"])
domains_app = typer.Typer(help=GROUP_HELP["domains"])
dns_app = typer.Typer(help=GROUP_HELP["dns"])
ftp_app = typer.Typer(help=GROUP_HELP["ftp"])
mail_app = typer.Typer(help=GROUP_HELP["mail"])
mysql_app = typer.Typer(help=GROUP_HELP["mysql"])
backup_app = typer.Typer(help=GROUP_HELP["backup"])
cron_app = typer.Typer(help=GROUP_HELP["cron"])
sites_app = typer.Typer(help=GROUP_HELP["sites"])

app.add_typer(auth_app, name="auth")
app.add_typer(account_app, name="account")
app.add_typer(domains_app, name="domains")
app.add_typer(dns_app, name="dns")
app.add_typer(ftp_app, name="ftp")
app.add_typer(mail_app, name="mail")
app.add_typer(mysql_app, name="mysql")
app.add_typer(backup_app, name="backup")
app.add_typer(cron_app, name="cron")
app.add_typer(sites_app, name="sites")


@dataclass
class Services:
    """Replaceable collaborators; pass an instance as the Click ``obj``."""

    interaction: Interaction = field(default_factory=TerminalInteraction)
    transport: httpx.AsyncBaseTransport | None = None


@dataclass
class RuntimeContext:
    """Aggregated runtime objects shared by commands."""

    config: AppConfig
    logger: StructuredLogger
    interaction: Interaction
    env: Mapping[str, str]
    transport: httpx.AsyncBaseTransport | None = None
    json_output: bool = False
    assume_yes: bool = False
    no_input: bool = False
    profile: str | None = None
    login: str | None = None
    base_url: str | None = None


def _ensure_runtime(
    ctx: typer.Context,
    *,
    config_file: Path | None = None,
    timeout_ms: int | None = None,
    json_output: bool = False,
    assume_yes: bool = False,
    no_input: bool = False,
    profile: str | None = None,
    login: str | None = None,
    base_url: str | None = None,
) -> RuntimeContext:
    runtime = ctx.obj
    if isinstance(runtime, RuntimeContext):
        return runtime

    services = ctx.obj if isinstance(ctx.obj, Services) else Services()
    env = dict(os.environ)
    try:
        config = load_config(config_file, env=env, overrides={"timeout_ms": timeout_ms})
    except BegetError as exc:
        emit_error(exc, json_output=json_output)
        raise typer.Exit(code=int(exc.exit_code)) from exc

    runtime = RuntimeContext(
        config=config,
        logger=StructuredLogger(config.logs_dir),
        interaction=services.interaction,
        env=env,
        transport=services.transport,
        json_output=json_output,
        assume_yes=assume_yes,
        no_input=no_input,
        profile=profile,
        login=login,
        base_url=base_url,
    )
    ctx.obj = runtime
    return runtime


def _get_runtime(ctx: typer.Context) -> RuntimeContext:
    runtime = ctx.find_object(RuntimeContext)
    if isinstance(runtime, RuntimeContext):
        return runtime
    return _ensure_runtime(ctx.find_root())


@app.callback(invoke_without_command=True)
def _root(  # noqa: D401 - Typer displays help for us, docstring optional.
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show the beget CLI version and exit.",
    ),
    config_file: Path | None = CONFIG_FILE_OPTION,
    profile: str | None = typer.Option(None, "--profile", help="Profile to use."),
    login: str | None = typer.Option(
        None,
        "--login",
        help="Override the login for this invocation.",
    ),
    base_url: str | None = typer.Option(None, "--base-url", help="Override the API base URL."),
    timeout: int | None = typer.Option(
        None,
        "--timeout",
        min=1,
        help="Request timeout in milliseconds (default 20000).",
    ),
    json_output: bool = typer.Option(False, "--json", help="Emit JSON output."),
    yes: bool = typer.Option(False, "--yes", help="Auto-confirm risky actions."),
    no_input: bool = typer.Option(False, "--no-input", help="Never prompt for input."),
) -> None:
    """Entry point callback invoked for every CLI execution."""
    if version:
        typer.echo(f"beget {get_version()}")
        raise typer.Exit(code=0)

    _ensure_runtime(
        ctx,
        config_file=config_file,
        timeout_ms=timeout,
        json_output=json_output,
        assume_yes=yes,
        no_input=no_input,
        profile=profile,
        login=login,
        base_url=base_url,
    )

    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(code=0)


# ----------------------------------------------------------------------
# Shared helpers
# ----------------------------------------------------------------------
def _command_error(runtime: RuntimeContext, op: OperationScope, error: BegetError) -> NoReturn:
    """Render *error* once, record it, and terminate the command."""
    rc = int(error.exit_code)
    emit_error(error, json_output=runtime.json_output)
    op.error(
        error.message,
        rc=rc,
        context={"kind": str(error.kind), "code": error.provider_code},
    )
    raise typer.Exit(code=rc)


@contextmanager
def _operation(
    runtime: RuntimeContext,
    command: str,
    *,
    args: Mapping[str, object] | None = None,
    target: Mapping[str, object] | None = None,
) -> Iterator[OperationScope]:
    with runtime.logger.operation(command, args=args, target=target) as op:
        try:
            yield op
        except BegetError as exc:
            _command_error(runtime, op, exc)


def _dry_run_complete(
    runtime: RuntimeContext,
    op: OperationScope,
    payload: Mapping[str, object],
) -> None:
    """Standardise dry-run completion messaging."""
    op.add_step("dry-run", status="success")
    emit_result(payload, json_output=runtime.json_output)
    op.success("Dry run complete.", changed=0, context=payload)


def _resolve_credentials(runtime: RuntimeContext) -> EffectiveCredentials:
    store = load_store(runtime.config.config_file)
    return resolve_credentials(
        store,
        explicit_login=runtime.login,
        explicit_base_url=runtime.base_url,
        explicit_profile=runtime.profile,
        environment=EnvironmentCredentials.from_env(runtime.env),
        default_base_url=runtime.config.default_base_url,
    )


def _run_remote(
    ctx: typer.Context,
    group: str,
    name: str,
    *,
    input_data: InputData = None,
    query: Mapping[str, object] | None = None,
    dry_run: bool = False,
    yes: bool = False,
    no_input: bool = False,
    transform: Callable[[object], object] | None = None,
) -> None:
    """Run one catalog operation through the pipeline and print its result."""
    runtime = _get_runtime(ctx)
    descriptor = get_operation(group, name)
    options = PipelineOptions(
        dry_run=dry_run,
        assume_yes=yes or runtime.assume_yes,
        no_input=no_input or runtime.no_input,
    )

    with _operation(
        runtime,
        descriptor.key,
        args={"query": query, "dry_run": dry_run, "yes": options.assume_yes},
        target={"kind": "remote", "address": descriptor.address},
    ) as op:
        payload = input_data() if callable(input_data) else input_data
        op.args["input"] = payload
        request = CallRequest(
            section=descriptor.section,
            method=descriptor.method,
            input_data=payload,
            query=query,
            timeout_ms=runtime.config.timeout_ms,
        )
        result = execute(
            descriptor,
            request,
            options=options,
            interaction=runtime.interaction,
            load_credentials=partial(_resolve_credentials, runtime),
            invoker=partial(invoke, transport=runtime.transport),
            op=op,
            env=runtime.env,
        )
        if options.dry_run and descriptor.mutates:
            emit_result(result, json_output=runtime.json_output)
            op.success("Dry run complete.", changed=0)
            return

        if transform is not None:
            result = transform(result)
        emit_result(result, json_output=runtime.json_output)
        op.success(
            f"{descriptor.address} succeeded.",
            changed=1 if descriptor.mutates else 0,
        )


def _parse_json_option(raw: str, label: str) -> object:
    try:
        return json.loads(raw)
    except json.JSONDecodeError as exc:
        raise UsageError(f"Invalid JSON in --{label}: {exc.msg}") from exc


def _parse_csv(raw: str) -> list[str]:
    """Split a comma-separated option, dropping blanks."""
    return [part.strip() for part in raw.split(",") if part.strip()]


def _parse_flag(raw: str) -> bool:
    return raw.strip().lower() in {"1", "true", "yes"}


def _profile_name(name: str) -> str:
    cleaned = name.strip()
    if not cleaned:
        raise UsageError("Profile name must not be empty.")
    return cleaned


def _profile_rows(store: ProfileStore) -> list[dict[str, object]]:
    rows: list[dict[str, object]] = []
    for name in store:
        profile = store.require(name)
        row: dict[str, object] = {
            "name": name,
            "login": profile.login,
            "active": name == store.active_profile,
        }
        if profile.base_url:
            row["baseUrl"] = profile.base_url
        rows.append(row)
    return rows


# ----------------------------------------------------------------------
# auth
# ----------------------------------------------------------------------
@auth_app.command("add")
def auth_add(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Profile name."),
    login: str | None = typer.Option(None, "--login", help="Beget account login."),
    endpoint: str | None = typer.Option(
        None,
        "--endpoint",
        help="Custom API base URL stored with the profile.",
    ),
    dry_run: bool = DRY_RUN_OPTION,
    no_input: bool = NO_INPUT_OPTION,
) -> None:
    """Add or update a profile. The first profile becomes active."""
    runtime = _get_runtime(ctx)
    path = runtime.config.config_file

    with _operation(
        runtime,
        "auth add",
        args={"name": name, "login": login, "endpoint": endpoint, "dry_run": dry_run},
        target={"kind": "profile", "name": name, "path": path},
    ) as op:
        profile_name = _profile_name(name)
        store = load_store(path)
        allow_interactive = interaction_allowed(
            runtime.interaction,
            no_input=no_input or runtime.no_input,
        )

        login_value = (login or runtime.login or "").strip()
        if not login_value and allow_interactive:
            login_value = runtime.interaction.read_line(LOGIN_PROMPT).strip()
        if not login_value:
            raise UsageError("Missing login: pass --login or run interactively.")
        base_url = (endpoint or "").strip() or None

        if dry_run:
            preview = store.with_profile(profile_name, Profile(login_value, "", base_url))
            _dry_run_complete(
                runtime,
                op,
                {
                    "dryRun": True,
                    "action": "auth.add",
                    "profile": profile_name,
                    "login": login_value,
                    "baseUrl": base_url,
                    "activeProfile": preview.active_profile,
                    "configPath": str(path),
                },
            )
            return

        secret = acquire_secret(
            SECRET_ENV_VARS,
            API_PASSWORD_PROMPT,
            runtime.interaction,
            allow_interactive=allow_interactive,
            env=runtime.env,
        )
        op.add_step("secret.acquire", status="success")

        updated = store.with_profile(
            profile_name,
            Profile(login=login_value, secret=secret, base_url=base_url),
        )
        save_store(path, updated)
        op.add_step("store.write", status="success", detail=str(path))

        emit_result(
            {"ok": True, "profile": profile_name, "activeProfile": updated.active_profile},
            json_output=runtime.json_output,
        )
        op.success(f"Saved profile '{profile_name}'.", changed=1)


@auth_app.command("list")
def auth_list(ctx: typer.Context) -> None:
    """List stored profiles and mark the active one."""
    runtime = _get_runtime(ctx)
    path = runtime.config.config_file

    with _operation(runtime, "auth list", target={"kind": "store", "path": path}) as op:
        store = load_store(path)
        emit_profiles(
            _profile_rows(store),
            active=store.active_profile,
            json_output=runtime.json_output,
        )
        op.success("Reported profiles.", changed=0)


@auth_app.command("use")
def auth_use(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Profile to activate."),
    dry_run: bool = DRY_RUN_OPTION,
) -> None:
    """Set the active profile."""
    runtime = _get_runtime(ctx)
    path = runtime.config.config_file

    with _operation(
        runtime,
        "auth use",
        args={"name": name, "dry_run": dry_run},
        target={"kind": "profile", "name": name, "path": path},
    ) as op:
        store = load_store(path)
        updated = store.with_active(name)

        if dry_run:
            _dry_run_complete(
                runtime,
                op,
                {"dryRun": True, "action": "auth.use", "activeProfile": name},
            )
            return

        save_store(path, updated)
        op.add_step("store.write", status="success", detail=str(path))
        emit_result({"ok": True, "activeProfile": name}, json_output=runtime.json_output)
        op.success(f"Activated profile '{name}'.", changed=1)


@auth_app.command("remove")
def auth_remove(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Profile to remove."),
    dry_run: bool = DRY_RUN_OPTION,
) -> None:
    """Remove a profile; removing the active one activates another."""
    runtime = _get_runtime(ctx)
    path = runtime.config.config_file

    with _operation(
        runtime,
        "auth remove",
        args={"name": name, "dry_run": dry_run},
        target={"kind": "profile", "name": name, "path": path},
    ) as op:
        store = load_store(path)
        updated = store.without_profile(name)

        if dry_run:
            _dry_run_complete(
                runtime,
                op,
                {
                    "dryRun": True,
                    "action": "auth.remove",
                    "profile": name,
                    "activeProfile": updated.active_profile,
                },
            )
            return

        save_store(path, updated)
        op.add_step("store.write", status="success", detail=str(path))
        emit_result(
            {"ok": True, "removed": name, "activeProfile": updated.active_profile},
            json_output=runtime.json_output,
        )
        op.success(f"Removed profile '{name}'.", changed=1)


@auth_app.command("show")
def auth_show(ctx: typer.Context) -> None:
    """Show the credentials this invocation would use (secret masked)."""
    runtime = _get_runtime(ctx)

    with _operation(runtime, "auth show", target={"kind": "credentials"}) as op:
        credentials = _resolve_credentials(runtime)
        op.add_step("credentials.resolve", detail=credentials.source_profile or "environment")
        emit_result(credentials.to_public_dict(), json_output=runtime.json_output)
        op.success("Reported effective credentials.", changed=0)


# ----------------------------------------------------------------------
# account
# ----------------------------------------------------------------------
@account_app.command("info")
def account_info(ctx: typer.Context) -> None:
    """Show account information (user/getAccountInfo)."""
    _run_remote(ctx, "account", "info")


@account_app.command("toggle-ssh")
def account_toggle_ssh(
    ctx: typer.Context,
    status: int = typer.Option(..., "--status", min=0, max=1, help="1 enables SSH, 0 disables."),
    ftplogin: str | None = typer.Option(None, "--ftplogin", help="FTP account to target."),
    dry_run: bool = DRY_RUN_OPTION,
) -> None:
    """Enable or disable SSH access (user/toggleSsh)."""
    _run_remote(
        ctx,
        "account",
        "toggle-ssh",
        input_data={"status": status, "ftplogin": ftplogin},
        dry_run=dry_run,
    )


# ----------------------------------------------------------------------
# domains
# ----------------------------------------------------------------------
@domains_app.command("list")
def domains_list(ctx: typer.Context) -> None:
    """List domains (domain/getList)."""
    _run_remote(ctx, "domains", "list")


@domains_app.command("zone-list")
def domains_zone_list(ctx: typer.Context) -> None:
    """List available domain zones (domain/getZoneList)."""
    _run_remote(ctx, "domains", "zone-list")


@domains_app.command("add-virtual")
def domains_add_virtual(
    ctx: typer.Context,
    hostname: str = typer.Option(..., "--hostname", help="Domain name without the zone."),
    zone_id: int = typer.Option(..., "--zone-id", help="Zone identifier."),
    dry_run: bool = DRY_RUN_OPTION,
) -> None:
    """Add a virtual domain (domain/addVirtual)."""
    _run_remote(
        ctx,
        "domains",
        "add-virtual",
        input_data={"hostname": hostname, "zone_id": zone_id},
        dry_run=dry_run,
    )


@domains_app.command("delete")
def domains_delete(
    ctx: typer.Context,
    domain_id: int = typer.Option(..., "--id", help="Domain identifier."),
    dry_run: bool = DRY_RUN_OPTION,
    yes: bool = YES_OPTION,
) -> None:
    """Delete a domain (domain/delete)."""
    _run_remote(
        ctx,
        "domains",
        "delete",
        input_data={"id": domain_id},
        dry_run=dry_run,
        yes=yes,
    )


@domains_app.command("subdomain-list")
def domains_subdomain_list(ctx: typer.Context) -> None:
    """List subdomains (domain/getSubdomainList)."""
    _run_remote(ctx, "domains", "subdomain-list")


@domains_app.command("add-subdomain-virtual")
def domains_add_subdomain_virtual(
    ctx: typer.Context,
    subdomain: str = typer.Option(..., "--subdomain", help="Subdomain label."),
    domain_id: int = typer.Option(..., "--domain-id", help="Parent domain identifier."),
    dry_run: bool = DRY_RUN_OPTION,
) -> None:
    """Add a virtual subdomain (domain/addSubdomainVirtual)."""
    _run_remote(
        ctx,
        "domains",
        "add-subdomain-virtual",
        input_data={"subdomain": subdomain, "domain_id": domain_id},
        dry_run=dry_run,
    )


@domains_app.command("delete-subdomain")
def domains_delete_subdomain(
    ctx: typer.Context,
    subdomain_id: int = typer.Option(..., "--id", help="Subdomain identifier."),
    dry_run: bool = DRY_RUN_OPTION,
    yes: bool = YES_OPTION,
) -> None:
    """Delete a subdomain (domain/deleteSubdomain)."""
    _run_remote(
        ctx,
        "domains",
        "delete-subdomain",
        input_data={"id": subdomain_id},
        dry_run=dry_run,
        yes=yes,
    )


@domains_app.command("check-to-register")
def domains_check_to_register(
    ctx: typer.Context,
    hostname: str = typer.Option(..., "--hostname", help="Domain name without the zone."),
    zone_id: int = typer.Option(..., "--zone-id", help="Zone identifier."),
    period: int = typer.Option(..., "--period", help="Registration period in years."),
) -> None:
    """Check whether a domain can be registered (domain/checkDomainToRegister)."""
    _run_remote(
        ctx,
        "domains",
        "check-to-register",
        input_data={"hostname": hostname, "zone_id": zone_id, "period": period},
    )


@domains_app.command("php-version-get")
def domains_php_version_get(
    ctx: typer.Context,
    full_fqdn: str = typer.Option(..., "--full-fqdn", help="Fully qualified domain name."),
) -> None:
    """Show the PHP version of a domain (domain/getPhpVersion)."""
    _run_remote(ctx, "domains", "php-version-get", query={"full_fqdn": full_fqdn})


@domains_app.command("php-version-change")
def domains_php_version_change(
    ctx: typer.Context,
    full_fqdn: str = typer.Option(..., "--full-fqdn", help="Fully qualified domain name."),
    php_version: str = typer.Option(..., "--php-version", help="Target PHP version."),
    is_cgi: str = typer.Option("false", "--is-cgi", help="Run PHP as CGI (true/false)."),
    dry_run: bool = DRY_RUN_OPTION,
) -> None:
    """Change the PHP version of a domain (domain/changePhpVersion)."""
    _run_remote(
        ctx,
        "domains",
        "php-version-change",
        input_data={
            "full_fqdn": full_fqdn,
            "php_version": php_version,
            "is_cgi": _parse_flag(is_cgi),
        },
        dry_run=dry_run,
    )


@domains_app.command("directives-get")
def domains_directives_get(
    ctx: typer.Context,
    full_fqdn: str = typer.Option(..., "--full-fqdn", help="Fully qualified domain name."),
) -> None:
    """Show web server directives (domain/getDirectives)."""
    _run_remote(ctx, "domains", "directives-get", query={"full_fqdn": full_fqdn})


@domains_app.command("directives-add")
def domains_directives_add(
    ctx: typer.Context,
    full_fqdn: str = typer.Option(..., "--full-fqdn", help="Fully qualified domain name."),
    directives_json: str = typer.Option(..., "--directives-json", help="Directive list as JSON."),
    dry_run: bool = DRY_RUN_OPTION,
) -> None:
    """Add web server directives (domain/addDirectives)."""
    _run_remote(
        ctx,
        "domains",
        "directives-add",
        input_data=lambda: {
            "full_fqdn": full_fqdn,
            "directives_list": _parse_json_option(directives_json, "directives-json"),
        },
        dry_run=dry_run,
    )


@domains_app.command("directives-remove")
def domains_directives_remove(
    ctx: typer.Context,
    full_fqdn: str = typer.Option(..., "--full-fqdn", help="Fully qualified domain name."),
    directives_json: str = typer.Option(..., "--directives-json", help="Directive list as JSON."),
    dry_run: bool = DRY_RUN_OPTION,
) -> None:
    """Remove web server directives (domain/removeDirectives)."""
    _run_remote(
        ctx,
        "domains",
        "directives-remove",
        input_data=lambda: {
            "full_fqdn": full_fqdn,
            "directives_list": _parse_json_option(directives_json, "directives-json"),
        },
        dry_run=dry_run,
    )


# ----------------------------------------------------------------------
# dns
# ----------------------------------------------------------------------
def _project_name_servers(result: object) -> dict[str, object]:
    data = result if isinstance(result, Mapping) else {}
    records = data.get("records")
    if not isinstance(records, Mapping):
        records = {}
    dns = records.get("DNS")
    dns_ip = records.get("DNS_IP")
    return {
        "fqdn": data.get("fqdn"),
        "dns": dns if dns is not None else [],
        "dns_ip": dns_ip if dns_ip is not None else [],
    }


@dns_app.command("list")
def dns_list(
    ctx: typer.Context,
    domain: str = typer.Argument(..., help="Domain to inspect."),
) -> None:
    """Show DNS records of a domain (dns/getData)."""
    _run_remote(ctx, "dns", "list", input_data={"fqdn": domain})


@dns_app.command("change-records")
def dns_change_records(
    ctx: typer.Context,
    fqdn: str = typer.Option(..., "--fqdn", help="Domain whose records are replaced."),
    records_json: str = typer.Option(..., "--records-json", help="Record set as JSON."),
    dry_run: bool = DRY_RUN_OPTION,
) -> None:
    """Replace DNS records (dns/changeRecords)."""
    _run_remote(
        ctx,
        "dns",
        "change-records",
        input_data=lambda: {
            "fqdn": fqdn,
            "records": _parse_json_option(records_json, "records-json"),
        },
        dry_run=dry_run,
    )


@dns_app.command("ns-get")
def dns_ns_get(
    ctx: typer.Context,
    domain: str = typer.Argument(..., help="Domain to inspect."),
) -> None:
    """Show the name servers of a domain."""
    _run_remote(
        ctx,
        "dns",
        "ns-get",
        input_data={"fqdn": domain},
        transform=_project_name_servers,
    )


@dns_app.command("ns-set")
def dns_ns_set(
    ctx: typer.Context,
    domain: str = typer.Argument(..., help="Domain to update."),
    ns1: str = typer.Argument(..., help="Primary name server."),
    ns2: str = typer.Argument(..., help="Secondary name server."),
    ip1: str | None = typer.Option(None, "--ip1", help="Glue IP for the primary name server."),
    ip2: str | None = typer.Option(None, "--ip2", help="Glue IP for the secondary name server."),
    dry_run: bool = DRY_RUN_OPTION,
) -> None:
    """Set the name servers of a domain (dns/changeRecords)."""
    records: dict[str, object] = {
        "DNS": [{"priority": 10, "value": ns1}, {"priority": 20, "value": ns2}],
    }
    if ip1 or ip2:
        records["DNS_IP"] = [{"priority": 10, "value": ip1}, {"priority": 20, "value": ip2}]
    _run_remote(
        ctx,
        "dns",
        "ns-set",
        input_data={"fqdn": domain, "records": records},
        dry_run=dry_run,
    )


# ----------------------------------------------------------------------
# ftp
# ----------------------------------------------------------------------
@ftp_app.command("list")
def ftp_list(ctx: typer.Context) -> None:
    """List FTP accounts (ftp/getList)."""
    _run_remote(ctx, "ftp", "list")


@ftp_app.command("add")
def ftp_add(
    ctx: typer.Context,
    suffix: str = typer.Option(..., "--suffix", help="Account suffix."),
    homedir: str = typer.Option(..., "--homedir", help="Home directory of the account."),
    dry_run: bool = DRY_RUN_OPTION,
    no_input: bool = NO_INPUT_OPTION,
) -> None:
    """Create an FTP account (ftp/add). Password from BEGET_FTP_PASSWORD or prompt."""
    _run_remote(
        ctx,
        "ftp",
        "add",
        input_data={"suffix": suffix, "homedir": homedir},
        dry_run=dry_run,
        no_input=no_input,
    )


@ftp_app.command("change-password")
def ftp_change_password(
    ctx: typer.Context,
    suffix: str = typer.Option(..., "--suffix", help="Account suffix."),
    dry_run: bool = DRY_RUN_OPTION,
    no_input: bool = NO_INPUT_OPTION,
) -> None:
    """Change an FTP password (ftp/changePassword)."""
    _run_remote(
        ctx,
        "ftp",
        "change-password",
        input_data={"suffix": suffix},
        dry_run=dry_run,
        no_input=no_input,
    )


@ftp_app.command("delete")
def ftp_delete(
    ctx: typer.Context,
    suffix: str = typer.Option(..., "--suffix", help="Account suffix."),
    dry_run: bool = DRY_RUN_OPTION,
    yes: bool = YES_OPTION,
) -> None:
    """Delete an FTP account (ftp/delete)."""
    _run_remote(ctx, "ftp", "delete", input_data={"suffix": suffix}, dry_run=dry_run, yes=yes)


# ----------------------------------------------------------------------
# mail
# ----------------------------------------------------------------------
@mail_app.command("mailbox-list")
def mail_mailbox_list(
    ctx: typer.Context,
    domain: str = typer.Option(..., "--domain", help="Mail domain."),
) -> None:
    """List mailboxes of a domain (mail/getMailboxList)."""
    _run_remote(ctx, "mail", "mailbox-list", input_data={"domain": domain})


@mail_app.command("mailbox-password-change")
def mail_mailbox_password_change(
    ctx: typer.Context,
    domain: str = typer.Option(..., "--domain", help="Mail domain."),
    mailbox: str = typer.Option(..., "--mailbox", help="Mailbox name."),
    dry_run: bool = DRY_RUN_OPTION,
    no_input: bool = NO_INPUT_OPTION,
) -> None:
    """Change a mailbox password (mail/changeMailboxPassword)."""
    _run_remote(
        ctx,
        "mail",
        "mailbox-password-change",
        input_data={"domain": domain, "mailbox": mailbox},
        dry_run=dry_run,
        no_input=no_input,
    )


@mail_app.command("mailbox-create")
def mail_mailbox_create(
    ctx: typer.Context,
    domain: str = typer.Option(..., "--domain", help="Mail domain."),
    mailbox: str = typer.Option(..., "--mailbox", help="Mailbox name."),
    dry_run: bool = DRY_RUN_OPTION,
    no_input: bool = NO_INPUT_OPTION,
) -> None:
    """Create a mailbox (mail/createMailbox)."""
    _run_remote(
        ctx,
        "mail",
        "mailbox-create",
        input_data={"domain": domain, "mailbox": mailbox},
        dry_run=dry_run,
        no_input=no_input,
    )


@mail_app.command("mailbox-drop")
def mail_mailbox_drop(
    ctx: typer.Context,
    domain: str = typer.Option(..., "--domain", help="Mail domain."),
    mailbox: str = typer.Option(..., "--mailbox", help="Mailbox name."),
    dry_run: bool = DRY_RUN_OPTION,
    yes: bool = YES_OPTION,
) -> None:
    """Drop a mailbox (mail/dropMailbox)."""
    _run_remote(
        ctx,
        "mail",
        "mailbox-drop",
        input_data={"domain": domain, "mailbox": mailbox},
        dry_run=dry_run,
        yes=yes,
    )


@mail_app.command("mailbox-settings-change")
def mail_mailbox_settings_change(
    ctx: typer.Context,
    domain: str = typer.Option(..., "--domain", help="Mail domain."),
    mailbox: str = typer.Option(..., "--mailbox", help="Mailbox name."),
    spam_filter_status: int = typer.Option(..., "--spam-filter-status", help="0 or 1."),
    spam_filter: int = typer.Option(..., "--spam-filter", min=0, max=100, help="0-100."),
    forward_mail_status: str = typer.Option(..., "--forward-mail-status", help="Forwarding mode."),
    dry_run: bool = DRY_RUN_OPTION,
) -> None:
    """Change mailbox settings (mail/changeMailboxSettings)."""
    _run_remote(
        ctx,
        "mail",
        "mailbox-settings-change",
        input_data={
            "domain": domain,
            "mailbox": mailbox,
            "spam_filter_status": spam_filter_status,
            "spam_filter": spam_filter,
            "forward_mail_status": forward_mail_status,
        },
        dry_run=dry_run,
    )


@mail_app.command("forward-add")
def mail_forward_add(
    ctx: typer.Context,
    domain: str = typer.Option(..., "--domain", help="Mail domain."),
    mailbox: str = typer.Option(..., "--mailbox", help="Mailbox name."),
    forward_mailbox: str = typer.Option(..., "--forward-mailbox", help="Forwarding address."),
    dry_run: bool = DRY_RUN_OPTION,
) -> None:
    """Add a forwarding address (mail/forwardListAddMailbox)."""
    _run_remote(
        ctx,
        "mail",
        "forward-add",
        input_data={"domain": domain, "mailbox": mailbox, "forward_mailbox": forward_mailbox},
        dry_run=dry_run,
    )


@mail_app.command("forward-delete")
def mail_forward_delete(
    ctx: typer.Context,
    domain: str = typer.Option(..., "--domain", help="Mail domain."),
    mailbox: str = typer.Option(..., "--mailbox", help="Mailbox name."),
    forward_mailbox: str = typer.Option(..., "--forward-mailbox", help="Forwarding address."),
    dry_run: bool = DRY_RUN_OPTION,
) -> None:
    """Remove a forwarding address (mail/forwardListDeleteMailbox)."""
    _run_remote(
        ctx,
        "mail",
        "forward-delete",
        input_data={"domain": domain, "mailbox": mailbox, "forward_mailbox": forward_mailbox},
        dry_run=dry_run,
    )


@mail_app.command("forward-show")
def mail_forward_show(
    ctx: typer.Context,
    domain: str = typer.Option(..., "--domain", help="Mail domain."),
    mailbox: str = typer.Option(..., "--mailbox", help="Mailbox name."),
) -> None:
    """Show forwarding addresses (mail/forwardListShow)."""
    _run_remote(ctx, "mail", "forward-show", input_data={"domain": domain, "mailbox": mailbox})


@mail_app.command("domain-mail-set")
def mail_domain_mail_set(
    ctx: typer.Context,
    domain: str = typer.Option(..., "--domain", help="Mail domain."),
    domain_mailbox: str = typer.Option(..., "--domain-mailbox", help="Catch-all address."),
    dry_run: bool = DRY_RUN_OPTION,
) -> None:
    """Set the catch-all mailbox of a domain (mail/setDomainMail)."""
    _run_remote(
        ctx,
        "mail",
        "domain-mail-set",
        input_data={"domain": domain, "domain_mailbox": domain_mailbox},
        dry_run=dry_run,
    )


@mail_app.command("domain-mail-clear")
def mail_domain_mail_clear(
    ctx: typer.Context,
    domain: str = typer.Option(..., "--domain", help="Mail domain."),
    dry_run: bool = DRY_RUN_OPTION,
) -> None:
    """Clear the catch-all mailbox of a domain (mail/clearDomainMail)."""
    _run_remote(ctx, "mail", "domain-mail-clear", input_data={"domain": domain}, dry_run=dry_run)


# ----------------------------------------------------------------------
# mysql
# ----------------------------------------------------------------------
@mysql_app.command("list")
def mysql_list(ctx: typer.Context) -> None:
    """List databases (mysql/getList)."""
    _run_remote(ctx, "mysql", "list")


@mysql_app.command("db-add")
def mysql_db_add(
    ctx: typer.Context,
    suffix: str = typer.Option(..., "--suffix", help="Database suffix."),
    dry_run: bool = DRY_RUN_OPTION,
    no_input: bool = NO_INPUT_OPTION,
) -> None:
    """Create a database (mysql/addDb). Password from BEGET_MYSQL_PASSWORD or prompt."""
    _run_remote(
        ctx,
        "mysql",
        "db-add",
        input_data={"suffix": suffix},
        dry_run=dry_run,
        no_input=no_input,
    )


@mysql_app.command("access-add")
def mysql_access_add(
    ctx: typer.Context,
    suffix: str = typer.Option(..., "--suffix", help="Database suffix."),
    access: str = typer.Option(..., "--access", help="Host allowed to connect."),
    dry_run: bool = DRY_RUN_OPTION,
    no_input: bool = NO_INPUT_OPTION,
) -> None:
    """Grant access to a database (mysql/addAccess)."""
    _run_remote(
        ctx,
        "mysql",
        "access-add",
        input_data={"suffix": suffix, "access": access},
        dry_run=dry_run,
        no_input=no_input,
    )


@mysql_app.command("db-drop")
def mysql_db_drop(
    ctx: typer.Context,
    suffix: str = typer.Option(..., "--suffix", help="Database suffix."),
    dry_run: bool = DRY_RUN_OPTION,
    yes: bool = YES_OPTION,
) -> None:
    """Drop a database (mysql/dropDb)."""
    _run_remote(ctx, "mysql", "db-drop", input_data={"suffix": suffix}, dry_run=dry_run, yes=yes)


@mysql_app.command("access-drop")
def mysql_access_drop(
    ctx: typer.Context,
    suffix: str = typer.Option(..., "--suffix", help="Database suffix."),
    access: str = typer.Option(..., "--access", help="Host to revoke."),
    dry_run: bool = DRY_RUN_OPTION,
    yes: bool = YES_OPTION,
) -> None:
    """Revoke access to a database (mysql/dropAccess)."""
    _run_remote(
        ctx,
        "mysql",
        "access-drop",
        input_data={"suffix": suffix, "access": access},
        dry_run=dry_run,
        yes=yes,
    )


@mysql_app.command("access-password-change")
def mysql_access_password_change(
    ctx: typer.Context,
    suffix: str = typer.Option(..., "--suffix", help="Database suffix."),
    access: str = typer.Option(..., "--access", help="Host whose password changes."),
    dry_run: bool = DRY_RUN_OPTION,
    no_input: bool = NO_INPUT_OPTION,
) -> None:
    """Change a database access password (mysql/changeAccessPassword)."""
    _run_remote(
        ctx,
        "mysql",
        "access-password-change",
        input_data={"suffix": suffix, "access": access},
        dry_run=dry_run,
        no_input=no_input,
    )


# ----------------------------------------------------------------------
# backup
# ----------------------------------------------------------------------
@backup_app.command("file-backup-list")
def backup_file_backup_list(ctx: typer.Context) -> None:
    """List file backups (backup/getFileBackupList)."""
    _run_remote(ctx, "backup", "file-backup-list")


@backup_app.command("mysql-backup-list")
def backup_mysql_backup_list(ctx: typer.Context) -> None:
    """List MySQL backups (backup/getMysqlBackupList)."""
    _run_remote(ctx, "backup", "mysql-backup-list")


@backup_app.command("file-list")
def backup_file_list(
    ctx: typer.Context,
    backup_id: int | None = typer.Option(None, "--backup-id", help="Backup identifier."),
    path: str = typer.Option("/", "--path", help="Path inside the backup."),
) -> None:
    """List files inside a backup (backup/getFileList)."""
    _run_remote(ctx, "backup", "file-list", input_data={"backup_id": backup_id, "path": path})


@backup_app.command("mysql-list")
def backup_mysql_list(
    ctx: typer.Context,
    backup_id: int | None = typer.Option(None, "--backup-id", help="Backup identifier."),
) -> None:
    """List databases inside a backup (backup/getMysqlList)."""
    _run_remote(ctx, "backup", "mysql-list", input_data={"backup_id": backup_id})


@backup_app.command("restore-file")
def backup_restore_file(
    ctx: typer.Context,
    backup_id: int = typer.Option(..., "--backup-id", help="Backup identifier."),
    paths: str = typer.Option(..., "--paths", help="Comma-separated paths to restore."),
    dry_run: bool = DRY_RUN_OPTION,
    yes: bool = YES_OPTION,
) -> None:
    """Restore files from a backup (backup/restoreFile)."""
    _run_remote(
        ctx,
        "backup",
        "restore-file",
        input_data={"backup_id": backup_id, "paths": _parse_csv(paths)},
        dry_run=dry_run,
        yes=yes,
    )


@backup_app.command("restore-mysql")
def backup_restore_mysql(
    ctx: typer.Context,
    backup_id: int = typer.Option(..., "--backup-id", help="Backup identifier."),
    bases: str = typer.Option(..., "--bases", help="Comma-separated databases to restore."),
    dry_run: bool = DRY_RUN_OPTION,
    yes: bool = YES_OPTION,
) -> None:
    """Restore databases from a backup (backup/restoreMysql)."""
    _run_remote(
        ctx,
        "backup",
        "restore-mysql",
        input_data={"backup_id": backup_id, "bases": _parse_csv(bases)},
        dry_run=dry_run,
        yes=yes,
    )


@backup_app.command("download-file")
def backup_download_file(
    ctx: typer.Context,
    paths: str = typer.Option(..., "--paths", help="Comma-separated paths to download."),
    backup_id: int | None = typer.Option(None, "--backup-id", help="Backup identifier."),
    dry_run: bool = DRY_RUN_OPTION,
) -> None:
    """Request a file download from a backup (backup/downloadFile)."""
    _run_remote(
        ctx,
        "backup",
        "download-file",
        input_data={"backup_id": backup_id, "paths": _parse_csv(paths)},
        dry_run=dry_run,
    )


@backup_app.command("download-mysql")
def backup_download_mysql(
    ctx: typer.Context,
    bases: str = typer.Option(..., "--bases", help="Comma-separated databases to download."),
    backup_id: int | None = typer.Option(None, "--backup-id", help="Backup identifier."),
    dry_run: bool = DRY_RUN_OPTION,
) -> None:
    """Request a database download from a backup (backup/downloadMysql)."""
    _run_remote(
        ctx,
        "backup",
        "download-mysql",
        input_data={"backup_id": backup_id, "bases": _parse_csv(bases)},
        dry_run=dry_run,
    )


@backup_app.command("log")
def backup_log(ctx: typer.Context) -> None:
    """Show the backup task log (backup/getLog)."""
    _run_remote(ctx, "backup", "log")


# ----------------------------------------------------------------------
# cron
# ----------------------------------------------------------------------
@cron_app.command("list")
def cron_list(ctx: typer.Context) -> None:
    """List cron tasks (cron/getList)."""
    _run_remote(ctx, "cron", "list")


@cron_app.command("add")
def cron_add(
    ctx: typer.Context,
    minutes: str = typer.Option(..., "--minutes", help="Minute field."),
    hours: str = typer.Option(..., "--hours", help="Hour field."),
    days: str = typer.Option(..., "--days", help="Day-of-month field."),
    months: str = typer.Option(..., "--months", help="Month field."),
    weekdays: str = typer.Option(..., "--weekdays", help="Day-of-week field."),
    command: str = typer.Option(..., "--command", help="Command to run."),
    dry_run: bool = DRY_RUN_OPTION,
) -> None:
    """Add a cron task (cron/add)."""
    _run_remote(
        ctx,
        "cron",
        "add",
        input_data={
            "minutes": minutes,
            "hours": hours,
            "days": days,
            "months": months,
            "weekdays": weekdays,
            "command": command,
        },
        dry_run=dry_run,
    )


@cron_app.command("delete")
def cron_delete(
    ctx: typer.Context,
    row_number: int = typer.Option(..., "--row-number", help="Task identifier."),
    dry_run: bool = DRY_RUN_OPTION,
    yes: bool = YES_OPTION,
) -> None:
    """Delete a cron task (cron/delete)."""
    _run_remote(
        ctx,
        "cron",
        "delete",
        input_data={"row_number": row_number},
        dry_run=dry_run,
        yes=yes,
    )


@cron_app.command("change-hidden-state")
def cron_change_hidden_state(
    ctx: typer.Context,
    row_number: int = typer.Option(..., "--row-number", help="Task identifier."),
    is_hidden: int = typer.Option(..., "--is-hidden", min=0, max=1, help="1 hides the task."),
    dry_run: bool = DRY_RUN_OPTION,
) -> None:
    """Hide or show a cron task (cron/changeHiddenState)."""
    _run_remote(
        ctx,
        "cron",
        "change-hidden-state",
        input_data={"row_number": row_number, "is_hidden": is_hidden},
        dry_run=dry_run,
    )


@cron_app.command("email-get")
def cron_email_get(ctx: typer.Context) -> None:
    """Show the cron notification address (cron/getEmail)."""
    _run_remote(ctx, "cron", "email-get")


@cron_app.command("email-set")
def cron_email_set(
    ctx: typer.Context,
    email: str = typer.Option(..., "--email", help="Notification address."),
    dry_run: bool = DRY_RUN_OPTION,
) -> None:
    """Set the cron notification address (cron/setEmail)."""
    _run_remote(ctx, "cron", "email-set", input_data={"email": email}, dry_run=dry_run)


# ----------------------------------------------------------------------
# sites
# ----------------------------------------------------------------------
@sites_app.command("list")
def sites_list(ctx: typer.Context) -> None:
    """List sites (site/getList)."""
    _run_remote(ctx, "sites", "list")


@sites_app.command("add")
def sites_add(
    ctx: typer.Context,
    name: str = typer.Option(..., "--name", help="Site directory name."),
    dry_run: bool = DRY_RUN_OPTION,
) -> None:
    """Create a site (site/add)."""
    _run_remote(ctx, "sites", "add", input_data={"name": name}, dry_run=dry_run)


@sites_app.command("delete")
def sites_delete(
    ctx: typer.Context,
    site_id: int = typer.Option(..., "--id", help="Site identifier."),
    dry_run: bool = DRY_RUN_OPTION,
    yes: bool = YES_OPTION,
) -> None:
    """Delete a site (site/delete)."""
    _run_remote(ctx, "sites", "delete", input_data={"id": site_id}, dry_run=dry_run, yes=yes)


@sites_app.command("link-domain")
def sites_link_domain(
    ctx: typer.Context,
    domain_id: int = typer.Option(..., "--domain-id", help="Domain identifier."),
    site_id: int = typer.Option(..., "--site-id", help="Site identifier."),
    dry_run: bool = DRY_RUN_OPTION,
) -> None:
    """Attach a domain to a site (site/linkDomain)."""
    _run_remote(
        ctx,
        "sites",
        "link-domain",
        input_data={"domain_id": domain_id, "site_id": site_id},
        dry_run=dry_run,
    )


@sites_app.command("unlink-domain")
def sites_unlink_domain(
    ctx: typer.Context,
    domain_id: int = typer.Option(..., "--domain-id", help="Domain identifier."),
    dry_run: bool = DRY_RUN_OPTION,
) -> None:
    """Detach a domain from its site (site/unlinkDomain)."""
    _run_remote(
        ctx,
        "sites",
        "unlink-domain",
        input_data={"domain_id": domain_id},
        dry_run=dry_run,
    )


@sites_app.command("freeze")
def sites_freeze(
    ctx: typer.Context,
    site_id: int = typer.Option(..., "--id", help="Site identifier."),
    excluded_paths: str | None = typer.Option(
        None,
        "--excluded-paths",
        help="Comma-separated paths left writable.",
    ),
    dry_run: bool = DRY_RUN_OPTION,
) -> None:
    """Freeze a site (site/freeze)."""
    _run_remote(
        ctx,
        "sites",
        "freeze",
        input_data={
            "id": site_id,
            "excludedPaths": _parse_csv(excluded_paths) if excluded_paths else None,
        },
        dry_run=dry_run,
    )


@sites_app.command("unfreeze")
def sites_unfreeze(
    ctx: typer.Context,
    site_id: int = typer.Option(..., "--id", help="Site identifier."),
    dry_run: bool = DRY_RUN_OPTION,
) -> None:
    """Unfreeze a site (site/unfreeze)."""
    _run_remote(ctx, "sites", "unfreeze", input_data={"id": site_id}, dry_run=dry_run)


@sites_app.command("is-frozen")
def sites_is_frozen(
    ctx: typer.Context,
    site_id: int = typer.Option(..., "--site-id", help="Site identifier."),
) -> None:
    """Report whether a site is frozen (site/isSiteFrozen)."""
    _run_remote(ctx, "sites", "is-frozen", input_data={"site_id": site_id})


# ----------------------------------------------------------------------
# Entry points
# ----------------------------------------------------------------------
def _click_exception_type() -> type[Any]:
    """Return ``ClickException`` from the Click implementation Typer runs on."""
    for cls in typer.BadParameter.__mro__:
        if cls.__name__ == "ClickException":
            return cls
    return typer.BadParameter


_CLICK_EXCEPTION = _click_exception_type()


def main(argv: Sequence[str] | None = None) -> int:
    """Run the CLI and return its exit code."""
    args = list(sys.argv[1:] if argv is None else argv)
    json_output = "--json" in args
    try:
        result = app(args=args, prog_name="beget", standalone_mode=False)
    except typer.Exit as exc:
        return int(exc.exit_code)
    except typer.Abort:
        aborted = AbortedError("Aborted.")
        emit_error(aborted, json_output=json_output)
        return int(aborted.exit_code)
    except _CLICK_EXCEPTION as exc:
        if json_output:
            emit_error(UsageError(exc.format_message()), json_output=True)
        else:
            exc.show()
        return int(exc.exit_code)
    except BegetError as exc:
        emit_error(exc, json_output=json_output)
        return int(exc.exit_code)
    except Exception as exc:  # noqa: BLE001 - last-resort boundary
        emit_error(BegetError(f"Unexpected error: {exc}"), json_output=json_output)
        return int(ExitCode.GENERIC)
    return int(result) if isinstance(result, int) else int(ExitCode.OK)


def run() -> None:
    """Console script entry point."""
    raise SystemExit(main())


__all__ = ["RuntimeContext", "Services", "app", "main", "run"]
