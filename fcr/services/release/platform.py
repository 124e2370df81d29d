"""Interfaces of the remote systems a release run talks to.

Every call is synchronous and returns a Result; transports live in
`fcr.services.release.fc` and `fcr.services.release.ros`.
"""

from __future__ import annotations

from typing import Protocol

from fcr.core.result import Result
from fcr.services.release.errors import RemoteOperationError
from fcr.services.release.model import (
    AliasRecord,
    DomainRecord,
    ProvisionRecord,
    StackRecord,
    TriggerRecord,
    TriggerSpec,
    VersionRecord,
)
from fcr.template.model import CertConfig


class PlatformClient(Protocol):
    """Function Compute control plane."""

    def list_versions(self, service: str) -> Result[list[VersionRecord], RemoteOperationError]: ...

    def publish_version(
        self, service: str, description: str
    ) -> Result[VersionRecord, RemoteOperationError]: ...

    def list_aliases(self, service: str) -> Result[list[AliasRecord], RemoteOperationError]: ...

    def create_alias(
        self, service: str, name: str, version_id: str, description: str
    ) -> Result[AliasRecord, RemoteOperationError]: ...

    def list_triggers(
        self, service: str, function: str
    ) -> Result[list[TriggerRecord], RemoteOperationError]: ...

    def create_trigger(
        self, service: str, function: str, spec: TriggerSpec
    ) -> Result[TriggerRecord, RemoteOperationError]: ...

    def delete_trigger(
        self, service: str, function: str, name: str
    ) -> Result[None, RemoteOperationError]: ...

    def list_custom_domains(self) -> Result[list[DomainRecord], RemoteOperationError]: ...

    def create_custom_domain(
        self, domain: DomainRecord, cert: CertConfig | None
    ) -> Result[DomainRecord, RemoteOperationError]: ...

    def update_custom_domain(
        self, domain: DomainRecord
    ) -> Result[DomainRecord, RemoteOperationError]: ...

    def list_provision_configs(
        self, service: str
    ) -> Result[list[ProvisionRecord], RemoteOperationError]: ...

    def put_provision_config(
        self, service: str, qualifier: str, function: str, target: int
    ) -> Result[None, RemoteOperationError]: ...


class StackClient(Protocol):
    """Resource orchestration (infra stack) lookups."""

    def list_stacks(self, name: str) -> Result[list[StackRecord], RemoteOperationError]: ...

    def get_resource_attributes(
        self, stack_id: str, logical_id: str
    ) -> Result[dict[str, object], RemoteOperationError]: ...
