from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field


def _empty_env() -> dict[str, str]:
    return {}


@dataclass(frozen=True, slots=True)
class HttpTriggerConfig:
    auth_type: str
    methods: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class Trigger:
    name: str
    type: str
    # Only set for HTTP triggers.
    http: HttpTriggerConfig | None = None

    @property
    def is_http(self) -> bool:
        return self.type.upper() == "HTTP" and self.http is not None


@dataclass(frozen=True, slots=True)
class Function:
    name: str
    handler: str | None = None
    runtime: str | None = None
    code_uri: str | None = None
    memory_size: int | None = None
    timeout: int | None = None
    instance_concurrency: int | None = None
    environment: Mapping[str, str] = field(default_factory=_empty_env)
    triggers: tuple[Trigger, ...] = ()

    @property
    def http_triggers(self) -> tuple[Trigger, ...]:
        return tuple(t for t in self.triggers if t.is_http)


@dataclass(frozen=True, slots=True)
class Service:
    """A serverless service; `name` is logical until resolved against the stack."""

    name: str
    description: str | None = None
    role: str | None = None
    internet_access: bool = True
    functions: tuple[Function, ...] = ()


@dataclass(frozen=True, slots=True)
class PathConfig:
    """One route of a custom domain.

    Two routes are the same route when path, service, function and qualifier
    match; methods are carried through but do not take part in equality.
    A route without qualifier follows whatever the platform serves by default.
    """

    path: str
    service_name: str
    function_name: str
    qualifier: str | None = None
    methods: tuple[str, ...] = field(default=(), compare=False)

    def targets(self, other: PathConfig) -> bool:
        """True if both routes send the same path to the same function."""
        return (
            self.path == other.path
            and self.service_name == other.service_name
            and self.function_name == other.function_name
        )


@dataclass(frozen=True, slots=True)
class RouteConfig:
    routes: tuple[PathConfig, ...] = ()


@dataclass(frozen=True, slots=True)
class CertConfig:
    cert_name: str
    certificate: str
    private_key: str


@dataclass(frozen=True, slots=True)
class CustomDomain:
    name: str  # resource name in the template
    domain_name: str
    protocol: str = "HTTP"
    route_config: RouteConfig = field(default_factory=RouteConfig)
    cert_config: CertConfig | None = None


@dataclass(frozen=True, slots=True)
class Template:
    services: tuple[Service, ...] = ()
    custom_domains: tuple[CustomDomain, ...] = ()
    format_version: str | None = None
    transform: str | None = None
