from __future__ import annotations

from pathlib import Path
from typing import NoReturn, cast

import typer

from fcr.cli.context import build_context
from fcr.core.errors import ErrorCode
from fcr.core.result import Err
from fcr.output.console import ConsoleProtocol, Style
from fcr.output.errors import (
    print_release_error,
    print_template_error,
    release_error_exit_code,
    template_error_exit_code,
)
from fcr.services.release.model import EVICTION_POLICIES, EvictionPolicy
from fcr.services.release.qualifier import derive_release_context
from fcr.services.release.service import ReleaseOptions, ReleaseReport, reconcile_release
from fcr.template.decode import load_template


DEFAULT_TEMPLATE = Path("template.yml")


def _exit(err: str, *, code: ErrorCode) -> NoReturn:
    typer.echo(f"error: {err}", err=True)
    raise typer.Exit(code=int(code))


def _print_summary(console: ConsoleProtocol, report: ReleaseReport, *, dry_run: bool) -> None:
    console.header("Summary")
    published = sum(1 for a in report.aliases if a.published)
    aliases = sum(1 for a in report.aliases if a.alias_created)
    created = sum(1 for t in report.triggers if t.created)
    deleted = sum(len(t.deleted) for t in report.triggers)
    console.print(f"services: {len(report.aliases)} ({published} published, {aliases} new aliases)")
    console.print(f"http triggers: {created} created, {deleted} rotated out")
    for d in report.domains:
        console.print(f"custom domain {d.domain_name}: {d.action}")
    for p in report.provisions:
        drained = ", ".join(p.drained) or "-"
        console.print(
            f"provision {p.service}/{p.function}@{p.qualifier}: {p.target} (drained: {drained})"
        )

    if report.degraded:
        console.warning(f"{len(report.failures)} capacity drain(s) failed:")
        for f in report.failures:
            where = f"{f.service}/{f.qualifier or '*'}/{f.function}"
            console.print(f"  {where}: {f.message}", Style.DIM)

    suffix = " (dry run)" if dry_run else ""
    console.success(f"release {report.context.qualifier} reconciled{suffix}")


def release(
    version: str = typer.Option(
        ..., "--release", "-r", help="Release version (1.2.3, v1.2.3, 1.3.0-rc1)."
    ),
    config: Path | None = typer.Option(
        None, "--config", "-c", help="Credentials file (default: ~/.fcli/config.yaml)."
    ),
    template: Path = typer.Option(DEFAULT_TEMPLATE, "--template", "-t", help="Template file."),
    instances: int = typer.Option(
        0, "--instances", min=0, help="Provisioned instances for the new release."
    ),
    no_provision: bool = typer.Option(
        False, "--no-provision", help="Leave provisioned concurrency alone."
    ),
    stack_name: str | None = typer.Option(
        None, "--stack-name", help="Resolve service names through this ROS stack."
    ),
    region: str | None = typer.Option(
        None, "--region", help="Region id (default: taken from the endpoint)."
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print the plan, change nothing."),
    eviction_policy: str = typer.Option(
        "snapshot-first",
        "--eviction-policy",
        help="Which HTTP triggers go first when the limit is reached: "
        "snapshot-first or chronological.",
    ),
    dated_snapshot: bool = typer.Option(
        False, "--dated-snapshot", help="Append the UTC date to snapshot qualifiers."
    ),
    no_create_domains: bool = typer.Option(
        False, "--no-create-domains", help="Fail instead of creating missing custom domains."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show route tables and details."),
) -> None:
    """Publish a release and point aliases, triggers, routes and capacity at it."""
    if eviction_policy not in EVICTION_POLICIES:
        _exit(
            f"invalid --eviction-policy {eviction_policy!r} "
            f"(expected one of: {', '.join(EVICTION_POLICIES)})",
            code=ErrorCode.USER_ERROR,
        )

    # Reject a bad version before credentials or templates are read.
    context = derive_release_context(version, dated=dated_snapshot)
    if isinstance(context, Err):
        _exit(
            f"invalid release version {version!r}: {context.error.reason}",
            code=ErrorCode.USER_ERROR,
        )

    ctx = build_context(
        config_path=config, verbose=verbose, region=region, stack_name=stack_name
    )

    tpl = load_template(template)
    if isinstance(tpl, Err):
        print_template_error(tpl.error, ctx.console)
        raise typer.Exit(code=template_error_exit_code(tpl.error))

    options = ReleaseOptions(
        dry_run=dry_run,
        instances=instances,
        no_provision=no_provision,
        stack_name=stack_name,
        region=ctx.region,
        eviction_policy=cast(EvictionPolicy, eviction_policy),
        dated_snapshots=dated_snapshot,
        create_missing_domains=not no_create_domains,
    )
    result = reconcile_release(
        template=tpl.value,
        version=version,
        options=options,
        client=ctx.client,
        resolver=ctx.resolver,
        console=ctx.console,
    )
    if isinstance(result, Err):
        print_release_error(result.error, ctx.console)
        raise typer.Exit(code=release_error_exit_code(result.error))

    _print_summary(ctx.console, result.value, dry_run=dry_run)


def qualifier(
    version: str = typer.Argument(..., help="Release version."),
    dated_snapshot: bool = typer.Option(
        False, "--dated-snapshot", help="Append the UTC date to snapshot qualifiers."
    ),
) -> None:
    """Print the alias a release version maps to. No remote calls."""
    context = derive_release_context(version, dated=dated_snapshot)
    if isinstance(context, Err):
        _exit(
            f"invalid release version {version!r}: {context.error.reason}",
            code=ErrorCode.USER_ERROR,
        )

    c = context.value
    typer.echo(f"qualifier: {c.qualifier}")
    typer.echo(f"mode: {c.mode}")
    if c.prev_qualifier is not None:
        typer.echo(f"stable: {c.prev_qualifier}")
