from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date

from fcr.core.result import Err, Ok, Result
from fcr.output.console import ConsoleProtocol, Style
from fcr.services.release.alias import AliasOutcome, publish_and_alias
from fcr.services.release.config import AUTO_DOMAIN
from fcr.services.release.errors import ReleaseError
from fcr.services.release.model import EvictionPolicy, ReleaseContext
from fcr.services.release.platform import PlatformClient
from fcr.services.release.provision import DrainFailure, ProvisionOutcome, reconcile_provision
from fcr.services.release.qualifier import derive_release_context
from fcr.services.release.resolver import ServiceNameResolver
from fcr.services.release.routes import (
    DomainOutcome,
    reconcile_custom_domain,
    resolve_auto_domain,
)
from fcr.services.release.triggers import TriggerOutcome, ensure_http_trigger
from fcr.template.model import CustomDomain, RouteConfig, Service, Template


@dataclass(frozen=True, slots=True)
class ReleaseOptions:
    dry_run: bool = False
    instances: int = 0
    no_provision: bool = False
    stack_name: str | None = None
    region: str | None = None
    eviction_policy: EvictionPolicy = "snapshot-first"
    dated_snapshots: bool = False
    create_missing_domains: bool = True


@dataclass(frozen=True, slots=True)
class ReleaseReport:
    context: ReleaseContext
    aliases: tuple[AliasOutcome, ...] = ()
    triggers: tuple[TriggerOutcome, ...] = ()
    domains: tuple[DomainOutcome, ...] = ()
    provisions: tuple[ProvisionOutcome, ...] = ()

    @property
    def failures(self) -> tuple[DrainFailure, ...]:
        return tuple(f for p in self.provisions for f in p.failures)

    @property
    def degraded(self) -> bool:
        return bool(self.failures)


def resolve_template_names(
    template: Template, resolver: ServiceNameResolver
) -> Result[Template, ReleaseError]:
    """Return a copy of `template` with deployed service names everywhere."""
    services: list[Service] = []
    for service in template.services:
        name = resolver.resolve(service.name)
        if isinstance(name, Err):
            return name
        services.append(replace(service, name=name.value))

    domains: list[CustomDomain] = []
    for domain in template.custom_domains:
        routes = []
        for route in domain.route_config.routes:
            name = resolver.resolve(route.service_name)
            if isinstance(name, Err):
                return name
            routes.append(replace(route, service_name=name.value))
        domains.append(replace(domain, route_config=RouteConfig(routes=tuple(routes))))

    return Ok(replace(template, services=tuple(services), custom_domains=tuple(domains)))


def reconcile_release(
    *,
    template: Template,
    version: str,
    options: ReleaseOptions,
    client: PlatformClient,
    resolver: ServiceNameResolver,
    console: ConsoleProtocol,
    today: date | None = None,
) -> Result[ReleaseReport, ReleaseError]:
    """Promote `version` across every service, trigger and domain of `template`.

    The first fatal error stops the run; nothing already applied is rolled
    back. Draining provisioned concurrency of older qualifiers is best effort.
    """
    ctx_result = derive_release_context(version, dated=options.dated_snapshots, today=today)
    if isinstance(ctx_result, Err):
        return ctx_result
    context = ctx_result.value

    console.header(f"Release {context.version}")
    console.print(f"qualifier: {context.qualifier} ({context.mode})", Style.BOLD)
    if context.prev_qualifier is not None:
        console.print(
            f"snapshot of {context.prev_qualifier}: default routes and capacity are left alone",
            Style.DIM,
        )
    if options.dry_run:
        console.warning("dry run: no changes will be made")

    resolved = resolve_template_names(template, resolver)
    if isinstance(resolved, Err):
        return resolved
    tpl = resolved.value

    domains: list[CustomDomain] = []
    if any(d.domain_name == AUTO_DOMAIN for d in tpl.custom_domains):
        deployed = client.list_custom_domains()
        if isinstance(deployed, Err):
            return deployed
        for domain in tpl.custom_domains:
            name = resolve_auto_domain(domain, deployed.value)
            if isinstance(name, Err):
                return name
            if name.value != domain.domain_name:
                console.print(f"{domain.name}: using domain {name.value}", Style.DIM)
            domains.append(replace(domain, domain_name=name.value))
    else:
        domains.extend(tpl.custom_domains)

    aliases: list[AliasOutcome] = []
    triggers: list[TriggerOutcome] = []
    for service in tpl.services:
        console.header(f"Service {service.name}")
        alias = publish_and_alias(
            client=client,
            console=console,
            service=service.name,
            context=context,
            dry_run=options.dry_run,
        )
        if isinstance(alias, Err):
            return alias
        aliases.append(alias.value)

        for function in service.functions:
            for trigger in function.http_triggers:
                outcome = ensure_http_trigger(
                    client=client,
                    console=console,
                    service=service.name,
                    function=function.name,
                    trigger=trigger,
                    context=context,
                    policy=options.eviction_policy,
                    dry_run=options.dry_run,
                )
                if isinstance(outcome, Err):
                    return outcome
                triggers.append(outcome.value)

    domain_outcomes: list[DomainOutcome] = []
    if domains:
        console.header("Custom domains")
        for domain in domains:
            # Fresh read per domain: the routes are patched, not replaced.
            current = client.list_custom_domains()
            if isinstance(current, Err):
                return current
            outcome = reconcile_custom_domain(
                client=client,
                console=console,
                domain=domain,
                deployed=current.value,
                context=context,
                create_missing=options.create_missing_domains,
                dry_run=options.dry_run,
            )
            if isinstance(outcome, Err):
                return outcome
            domain_outcomes.append(outcome.value)

    provisions: list[ProvisionOutcome] = []
    if options.no_provision:
        console.print("provisioned concurrency: skipped (--no-provision)", Style.DIM)
    elif context.is_snapshot:
        console.print("provisioned concurrency: skipped for snapshot release", Style.DIM)
    else:
        console.header("Provisioned concurrency")
        for service in tpl.services:
            for function in service.functions:
                outcome = reconcile_provision(
                    client=client,
                    console=console,
                    service=service.name,
                    function=function.name,
                    qualifier=context.qualifier,
                    target=options.instances,
                    dry_run=options.dry_run,
                )
                if isinstance(outcome, Err):
                    return outcome
                provisions.append(outcome.value)

    return Ok(
        ReleaseReport(
            context=context,
            aliases=tuple(aliases),
            triggers=tuple(triggers),
            domains=tuple(domain_outcomes),
            provisions=tuple(provisions),
        )
    )
