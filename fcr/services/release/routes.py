from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace
from typing import Literal

from fcr.core.result import Err, Ok, Result
from fcr.output.console import ConsoleProtocol, Style
from fcr.services.release.config import (
    AUTO_DOMAIN,
    AUTO_DOMAIN_SUFFIX,
    DEFAULT_DOMAIN_PROTOCOL,
    LATEST_QUALIFIER,
)
from fcr.services.release.errors import DomainNotFound, ReleaseError
from fcr.services.release.model import DomainRecord, ReleaseContext
from fcr.services.release.platform import PlatformClient
from fcr.services.release.qualifier import is_release_qualifier
from fcr.template.model import CustomDomain, PathConfig

DomainAction = Literal["created", "updated", "unchanged"]


@dataclass(frozen=True, slots=True)
class DomainOutcome:
    domain_name: str
    action: DomainAction
    routes: tuple[PathConfig, ...]


def dedupe_routes(routes: Iterable[PathConfig]) -> tuple[PathConfig, ...]:
    """Drop repeated routes (same path, service, function, qualifier), keeping the first."""
    out: list[PathConfig] = []
    for route in routes:
        if route not in out:
            out.append(route)
    return tuple(out)


def resolve_auto_domain(
    domain: CustomDomain, deployed: Sequence[DomainRecord]
) -> Result[str, DomainNotFound]:
    """Resolve the `Auto` placeholder to a deployed test domain serving the same function.

    When several test domains qualify, the last one matched wins.
    """
    if domain.domain_name != AUTO_DOMAIN:
        return Ok(domain.domain_name)

    found: str | None = None
    for route in domain.route_config.routes:
        for record in deployed:
            if not record.domain_name.endswith(AUTO_DOMAIN_SUFFIX):
                continue
            for remote in record.routes:
                if (
                    remote.service_name == route.service_name
                    and remote.function_name == route.function_name
                ):
                    found = record.domain_name

    if found is not None:
        return Ok(found)
    return Err(
        DomainNotFound(
            domain_name=f"{domain.name} ({AUTO_DOMAIN})",
            hint=f"Deploy the domain once so a *{AUTO_DOMAIN_SUFFIX} name exists, "
            "or set DomainName explicitly.",
        )
    )


def _promotable(route: PathConfig) -> bool:
    # Routes pinned to a custom alias or a snapshot keep their qualifier.
    q = route.qualifier
    return q is None or q == LATEST_QUALIFIER or is_release_qualifier(q)


def merge_stable_routes(
    remote: Sequence[PathConfig], declared: Sequence[PathConfig], qualifier: str
) -> tuple[PathConfig, ...]:
    """Promote matching default routes to `qualifier`, in place.

    A declared route with its own qualifier pins the remote route to that
    qualifier instead. Remote routes that match nothing are kept as they are.
    """
    merged: list[PathConfig] = []
    for route in remote:
        if _promotable(route):
            for d in declared:
                if route.targets(d):
                    route = replace(route, qualifier=d.qualifier or qualifier)
                    break
        merged.append(route)
    return dedupe_routes(merged)


def snapshot_path(qualifier: str, path: str) -> str:
    if not path.startswith("/"):
        path = "/" + path
    return f"/{qualifier}{path}"


def merge_snapshot_routes(
    remote: Sequence[PathConfig], declared: Sequence[PathConfig], qualifier: str
) -> tuple[PathConfig, ...]:
    """Keep every remote route and add `/<qualifier><path>` routes pinned to `qualifier`."""
    additions = [
        PathConfig(
            path=snapshot_path(qualifier, d.path),
            service_name=d.service_name,
            function_name=d.function_name,
            qualifier=qualifier,
            methods=d.methods,
        )
        for d in declared
    ]
    return dedupe_routes([*remote, *additions])


def initial_routes(declared: Sequence[PathConfig], qualifier: str) -> tuple[PathConfig, ...]:
    return dedupe_routes(replace(d, qualifier=d.qualifier or qualifier) for d in declared)


def reconcile_routes(
    remote: Sequence[PathConfig], declared: Sequence[PathConfig], context: ReleaseContext
) -> tuple[PathConfig, ...]:
    if context.is_snapshot:
        return merge_snapshot_routes(remote, declared, context.qualifier)
    return merge_stable_routes(remote, declared, context.qualifier)


def _same_routes(a: Sequence[PathConfig], b: Sequence[PathConfig]) -> bool:
    return tuple(a) == tuple(b)


def reconcile_custom_domain(
    *,
    client: PlatformClient,
    console: ConsoleProtocol,
    domain: CustomDomain,
    deployed: Sequence[DomainRecord],
    context: ReleaseContext,
    create_missing: bool,
    dry_run: bool,
) -> Result[DomainOutcome, ReleaseError]:
    """Bring the routes of one custom domain in line with the release.

    `domain` must already carry the resolved domain name and service names.
    """
    declared = domain.route_config.routes
    current = next((d for d in deployed if d.domain_name == domain.domain_name), None)

    if current is None:
        if not create_missing:
            return Err(
                DomainNotFound(
                    domain_name=domain.domain_name,
                    hint="Create the domain first or allow creation.",
                )
            )
        routes = initial_routes(declared, context.qualifier)
        console.print(
            f"create custom domain {domain.domain_name} ({len(routes)} routes)", Style.DIM
        )
        _print_routes(console, routes)
        if not dry_run:
            created = client.create_custom_domain(
                DomainRecord(
                    domain_name=domain.domain_name,
                    protocol=domain.protocol or DEFAULT_DOMAIN_PROTOCOL,
                    routes=routes,
                ),
                domain.cert_config,
            )
            if isinstance(created, Err):
                return created
        return Ok(DomainOutcome(domain_name=domain.domain_name, action="created", routes=routes))

    routes = reconcile_routes(current.routes, declared, context)
    if _same_routes(routes, current.routes):
        console.print(f"custom domain {domain.domain_name}: routes up to date", Style.DIM)
        return Ok(
            DomainOutcome(domain_name=domain.domain_name, action="unchanged", routes=routes)
        )

    console.print(f"update custom domain {domain.domain_name}", Style.DIM)
    _print_routes(console, routes)
    if not dry_run:
        updated = client.update_custom_domain(
            DomainRecord(
                domain_name=domain.domain_name,
                protocol=domain.protocol or current.protocol,
                routes=routes,
            )
        )
        if isinstance(updated, Err):
            return updated

    return Ok(DomainOutcome(domain_name=domain.domain_name, action="updated", routes=routes))


def _print_routes(console: ConsoleProtocol, routes: Sequence[PathConfig]) -> None:
    for r in routes:
        console.debug(
            f"  {r.path} -> {r.service_name}/{r.function_name}@{r.qualifier or LATEST_QUALIFIER}"
        )
