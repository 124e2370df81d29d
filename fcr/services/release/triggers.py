from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime

from fcr.core.result import Err, Ok, Result
from fcr.output.console import ConsoleProtocol, Style
from fcr.services.release.config import MAX_TRIGGERS
from fcr.services.release.errors import ReleaseError
from fcr.services.release.model import (
    EvictionPolicy,
    ReleaseContext,
    TriggerRecord,
    TriggerSpec,
)
from fcr.services.release.platform import PlatformClient
from fcr.services.release.qualifier import is_snapshot_qualifier
from fcr.template.model import Trigger


@dataclass(frozen=True, slots=True)
class RotationPlan:
    already_exists: bool
    to_delete: tuple[TriggerRecord, ...]


@dataclass(frozen=True, slots=True)
class TriggerOutcome:
    service: str
    function: str
    trigger: str
    created: bool
    deleted: tuple[str, ...]


def effective_trigger_name(name: str, qualifier: str) -> str:
    return f"{name}-{qualifier}"


def eviction_key(
    record: TriggerRecord, policy: EvictionPolicy
) -> tuple[int, datetime, datetime, str]:
    """Sort key for eviction; smallest is deleted first."""
    rank = 0
    if policy == "snapshot-first" and not is_snapshot_qualifier(record.qualifier):
        rank = 1
    return (rank, record.modified, record.created, record.name)


def plan_rotation(
    existing: Sequence[TriggerRecord],
    *,
    trigger_name: str,
    qualifier: str,
    policy: EvictionPolicy,
    max_triggers: int = MAX_TRIGGERS,
) -> RotationPlan:
    """Decide which HTTP triggers go before `trigger_name` is created.

    A trigger already bound to `qualifier` (or already carrying the name)
    satisfies the request. Otherwise enough of the oldest HTTP triggers are
    dropped so that the count after creation is at most `max_triggers`.
    """
    http = [t for t in existing if t.is_http]
    for t in http:
        if t.name == trigger_name or t.qualifier == qualifier:
            return RotationPlan(already_exists=True, to_delete=())

    if len(http) < max_triggers:
        return RotationPlan(already_exists=False, to_delete=())

    overflow = len(http) - (max_triggers - 1)
    ordered = sorted(http, key=lambda t: eviction_key(t, policy))
    return RotationPlan(already_exists=False, to_delete=tuple(ordered[:overflow]))


def build_trigger_spec(trigger: Trigger, context: ReleaseContext) -> TriggerSpec:
    http = trigger.http
    assert http is not None
    return TriggerSpec(
        name=effective_trigger_name(trigger.name, context.qualifier),
        qualifier=context.qualifier,
        auth_type=http.auth_type.lower(),
        methods=http.methods,
        description=context.version,
    )


def ensure_http_trigger(
    *,
    client: PlatformClient,
    console: ConsoleProtocol,
    service: str,
    function: str,
    trigger: Trigger,
    context: ReleaseContext,
    policy: EvictionPolicy,
    dry_run: bool,
) -> Result[TriggerOutcome, ReleaseError]:
    spec = build_trigger_spec(trigger, context)

    listing = client.list_triggers(service, function)
    if isinstance(listing, Err):
        return listing

    plan = plan_rotation(
        listing.value,
        trigger_name=spec.name,
        qualifier=spec.qualifier,
        policy=policy,
    )
    if plan.already_exists:
        console.print(f"trigger {service}/{function}/{spec.name} already exists", Style.DIM)
        return Ok(
            TriggerOutcome(
                service=service, function=function, trigger=spec.name, created=False, deleted=()
            )
        )

    deleted: list[str] = []
    for old in plan.to_delete:
        console.print(
            f"delete trigger {service}/{function}/{old.name} (qualifier={old.qualifier or '-'})",
            Style.DIM,
        )
        if not dry_run:
            removed = client.delete_trigger(service, function, old.name)
            if isinstance(removed, Err):
                return removed
        deleted.append(old.name)
        # TODO: delete the alias and routes left behind by old.qualifier once no
        # other function still serves it.

    methods = ",".join(spec.methods) or "-"
    console.print(
        f"create trigger {service}/{function}/{spec.name} "
        f"(qualifier={spec.qualifier}, auth={spec.auth_type}, methods={methods})",
        Style.DIM,
    )
    if not dry_run:
        created = client.create_trigger(service, function, spec)
        if isinstance(created, Err):
            return created

    return Ok(
        TriggerOutcome(
            service=service,
            function=function,
            trigger=spec.name,
            created=True,
            deleted=tuple(deleted),
        )
    )
