from __future__ import annotations

import threading

from fcr.core.result import Err, Ok, Result
from fcr.services.release.config import STACK_SERVICE_NAME_ATTRIBUTE
from fcr.services.release.errors import ReleaseError, ResolutionError
from fcr.services.release.platform import StackClient


class ServiceNameResolver:
    """Maps logical service names from the template to deployed names.

    Without a stack name every name resolves to itself. With one, the stack id
    is looked up once and each logical name is queried at most once; the
    results are kept for the lifetime of the resolver.
    """

    def __init__(self, *, stack_name: str | None, stack_client: StackClient | None) -> None:
        if stack_name and stack_client is None:
            raise ValueError("stack_client is required when stack_name is set")
        self._stack_name = stack_name or None
        self._stack_client = stack_client
        self._lock = threading.Lock()
        self._stack_id: str | None = None
        self._names: dict[str, str] = {}

    @property
    def stack_name(self) -> str | None:
        return self._stack_name

    def resolve(self, logical_name: str) -> Result[str, ReleaseError]:
        if self._stack_name is None:
            return Ok(logical_name)

        cached = self._names.get(logical_name)
        if cached is not None:
            return Ok(cached)

        with self._lock:
            cached = self._names.get(logical_name)
            if cached is not None:
                return Ok(cached)

            physical = self._lookup(logical_name)
            if isinstance(physical, Err):
                return physical
            self._names[logical_name] = physical.value
            return physical

    def _stack_id_locked(self) -> Result[str, ReleaseError]:
        if self._stack_id is not None:
            return Ok(self._stack_id)
        assert self._stack_client is not None and self._stack_name is not None

        listing = self._stack_client.list_stacks(self._stack_name)
        if isinstance(listing, Err):
            return listing

        # ListStacks matches by prefix; only an exact name counts.
        for stack in listing.value:
            if stack.stack_name == self._stack_name:
                self._stack_id = stack.stack_id
                return Ok(stack.stack_id)

        return Err(
            ResolutionError(
                name=self._stack_name,
                reason="stack not found",
                hint="Check --stack-name and --region.",
            )
        )

    def _lookup(self, logical_name: str) -> Result[str, ReleaseError]:
        stack_id = self._stack_id_locked()
        if isinstance(stack_id, Err):
            return stack_id
        assert self._stack_client is not None

        attrs = self._stack_client.get_resource_attributes(stack_id.value, logical_name)
        if isinstance(attrs, Err):
            return attrs

        value = attrs.value.get(STACK_SERVICE_NAME_ATTRIBUTE)
        if not isinstance(value, str) or not value.strip():
            return Err(
                ResolutionError(
                    name=logical_name,
                    reason=f"stack resource has no {STACK_SERVICE_NAME_ATTRIBUTE} attribute",
                    hint=f"stack: {self._stack_name}",
                )
            )
        return Ok(value.strip())
