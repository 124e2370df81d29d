from __future__ import annotations

import re
from dataclasses import dataclass

from fcr.core.result import Err, Ok, Result
from fcr.output.console import ConsoleProtocol, Style
from fcr.services.release.errors import ReleaseError
from fcr.services.release.platform import PlatformClient


@dataclass(frozen=True, slots=True)
class DrainFailure:
    """A qualifier whose reserved capacity could not be released."""

    service: str
    function: str
    qualifier: str | None
    message: str


@dataclass(frozen=True, slots=True)
class ProvisionOutcome:
    service: str
    function: str
    qualifier: str
    target: int
    drained: tuple[str, ...]
    failures: tuple[DrainFailure, ...] = ()

    @property
    def degraded(self) -> bool:
        return bool(self.failures)


def provision_qualifier(resource: str, *, service: str, function: str) -> str | None:
    """Extract the qualifier from `<account>#<service>#<qualifier>#<function>`."""
    pattern = rf"^.*#{re.escape(service)}#(.+)#{re.escape(function)}$"
    m = re.match(pattern, resource)
    if m is None:
        return None
    return m.group(1)


def reconcile_provision(
    *,
    client: PlatformClient,
    console: ConsoleProtocol,
    service: str,
    function: str,
    qualifier: str,
    target: int,
    dry_run: bool,
) -> Result[ProvisionOutcome, ReleaseError]:
    """Reserve `target` instances for the qualifier and drain the other qualifiers.

    Setting the new target is fatal on failure; draining is best effort and
    reports what it could not do on the outcome.
    """
    console.print(f"provision {service}/{qualifier}/{function} target={target}", Style.DIM)
    if not dry_run:
        put = client.put_provision_config(service, qualifier, function, target)
        if isinstance(put, Err):
            return put

    listing = client.list_provision_configs(service)
    if isinstance(listing, Err):
        console.warning(f"{service}/{function}: cannot list provision configs to drain")
        failure = DrainFailure(
            service=service, function=function, qualifier=None, message=listing.error.message
        )
        return Ok(
            ProvisionOutcome(
                service=service,
                function=function,
                qualifier=qualifier,
                target=target,
                drained=(),
                failures=(failure,),
            )
        )

    drained: list[str] = []
    failures: list[DrainFailure] = []
    for record in listing.value:
        if record.current == 0 and record.target == 0:
            continue
        other = provision_qualifier(record.resource, service=service, function=function)
        if other is None or other == qualifier or other in drained:
            continue

        console.print(f"drain provision {service}/{other}/{function} target=0", Style.DIM)
        if not dry_run:
            put = client.put_provision_config(service, other, function, 0)
            if isinstance(put, Err):
                console.warning(
                    f"failed to drain {service}/{other}/{function}: {put.error.message}"
                )
                failures.append(
                    DrainFailure(
                        service=service,
                        function=function,
                        qualifier=other,
                        message=put.error.message,
                    )
                )
                continue
        drained.append(other)

    return Ok(
        ProvisionOutcome(
            service=service,
            function=function,
            qualifier=qualifier,
            target=target,
            drained=tuple(drained),
            failures=tuple(failures),
        )
    )
