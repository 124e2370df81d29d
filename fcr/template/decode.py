"""Template decoding.

Decoding happens in two stages: the YAML text is loaded into a generic tree
(dicts, lists, scalars), then the tree is validated and converted into the
frozen entity model. Structural problems are reported as `TemplateError`
with a dotted location such as `Resources.api.getUser.Events.http`.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from fcr.core.result import Err, Ok, Result
from fcr.core.structured import (
    StrDict,
    as_str_dict,
    get_bool,
    get_int,
    get_str,
    get_str_list,
    get_table,
)
from fcr.template.model import (
    CertConfig,
    CustomDomain,
    Function,
    HttpTriggerConfig,
    PathConfig,
    RouteConfig,
    Service,
    Template,
    Trigger,
)

SERVICE_TYPE = "Aliyun::Serverless::Service"
FUNCTION_TYPE = "Aliyun::Serverless::Function"
CUSTOM_DOMAIN_TYPE = "Aliyun::Serverless::CustomDomain"

_RESERVED_SERVICE_KEYS = frozenset({"Type", "Properties"})


@dataclass(frozen=True, slots=True)
class TemplateError:
    message: str
    location: str | None = None
    path: Path | None = None
    # Set when the file could not be read at all.
    unreadable: bool = False

    def pretty(self) -> str:
        where = f" at {self.location}" if self.location else ""
        src = f" ({self.path})" if self.path else ""
        return f"{self.message}{where}{src}"


class TemplateLoader(yaml.SafeLoader):
    """SafeLoader that keeps the payload of intrinsic tags (!Ref, !GetAtt, ...)."""


def _intrinsic_constructor(loader: yaml.SafeLoader, tag_suffix: str, node: yaml.Node) -> Any:
    del tag_suffix
    if isinstance(node, yaml.ScalarNode):
        return loader.construct_scalar(node)
    if isinstance(node, yaml.SequenceNode):
        return loader.construct_sequence(node)
    if isinstance(node, yaml.MappingNode):
        return loader.construct_mapping(node)
    return None


yaml.add_multi_constructor("!", _intrinsic_constructor, Loader=TemplateLoader)


class _Invalid(Exception):
    def __init__(self, message: str, location: str) -> None:
        super().__init__(message)
        self.message = message
        self.location = location


def load_template(path: Path) -> Result[Template, TemplateError]:
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return Err(TemplateError(f"template not found: {path}", path=path, unreadable=True))
    except (OSError, UnicodeDecodeError) as e:
        return Err(TemplateError(f"failed to read template: {e}", path=path, unreadable=True))

    result = decode_template(text)
    if isinstance(result, Err):
        return Err(
            TemplateError(result.error.message, location=result.error.location, path=path)
        )
    return result


def decode_template(text: str) -> Result[Template, TemplateError]:
    try:
        tree: object = yaml.load(text, Loader=TemplateLoader)
    except yaml.YAMLError as e:
        return Err(TemplateError(f"invalid YAML: {e}"))
    return convert_tree(tree)


def convert_tree(tree: object) -> Result[Template, TemplateError]:
    """Convert a generic YAML tree into a `Template`."""
    root = as_str_dict(tree)
    if root is None:
        return Err(TemplateError("template root must be a mapping"))

    try:
        return Ok(_convert_template(root))
    except _Invalid as e:
        return Err(TemplateError(e.message, location=e.location))


def _convert_template(root: StrDict) -> Template:
    resources = _table(root, "Resources", "Resources", required=False) or {}

    services: list[Service] = []
    domains: list[CustomDomain] = []
    for name, obj in resources.items():
        loc = f"Resources.{name}"
        res = as_str_dict(obj)
        if res is None:
            raise _Invalid("resource must be a mapping", loc)
        rtype = get_str(res, "Type")
        if rtype == SERVICE_TYPE:
            services.append(_convert_service(name, res, loc))
        elif rtype == CUSTOM_DOMAIN_TYPE:
            domains.append(_convert_domain(name, res, loc))

    return Template(
        services=tuple(services),
        custom_domains=tuple(domains),
        format_version=get_str(root, "ROSTemplateFormatVersion"),
        transform=get_str(root, "Transform"),
    )


def _convert_service(name: str, res: StrDict, loc: str) -> Service:
    props = _table(res, "Properties", loc, required=False) or {}

    functions: list[Function] = []
    # Functions are nested directly under the service, next to Type/Properties.
    for key, obj in res.items():
        if key in _RESERVED_SERVICE_KEYS:
            continue
        child = as_str_dict(obj)
        if child is None or get_str(child, "Type") != FUNCTION_TYPE:
            continue
        functions.append(_convert_function(key, child, f"{loc}.{key}"))

    internet = get_bool(props, "InternetAccess")
    return Service(
        name=name,
        description=get_str(props, "Description"),
        role=get_str(props, "Role"),
        internet_access=True if internet is None else internet,
        functions=tuple(functions),
    )


def _convert_function(name: str, res: StrDict, loc: str) -> Function:
    props = _table(res, "Properties", loc, required=False) or {}
    env_table = _table(props, "EnvironmentVariables", f"{loc}.Properties", required=False) or {}
    environment = {k: str(v) for k, v in env_table.items() if v is not None}

    events = _table(res, "Events", loc, required=False) or {}
    triggers = [
        _convert_trigger(tname, obj, f"{loc}.Events.{tname}") for tname, obj in events.items()
    ]

    return Function(
        name=name,
        handler=get_str(props, "Handler"),
        runtime=get_str(props, "Runtime"),
        code_uri=get_str(props, "CodeUri"),
        memory_size=get_int(props, "MemorySize"),
        timeout=get_int(props, "Timeout"),
        instance_concurrency=get_int(props, "InstanceConcurrency"),
        environment=environment,
        triggers=tuple(triggers),
    )


def _convert_trigger(name: str, obj: object, loc: str) -> Trigger:
    event = as_str_dict(obj)
    if event is None:
        raise _Invalid("event must be a mapping", loc)
    ttype = get_str(event, "Type")
    if ttype is None:
        raise _Invalid("event is missing Type", loc)
    if ttype.upper() != "HTTP":
        return Trigger(name=name, type=ttype)

    props = _table(event, "Properties", loc, required=False) or {}
    methods: list[str] = []
    if "Methods" in props:
        parsed = get_str_list(props, "Methods")
        if parsed is None:
            raise _Invalid("Methods must be a list of strings", f"{loc}.Properties.Methods")
        methods = [m.upper() for m in parsed]

    return Trigger(
        name=name,
        type=ttype,
        http=HttpTriggerConfig(
            auth_type=get_str(props, "AuthType") or "ANONYMOUS",
            methods=tuple(methods),
        ),
    )


def _convert_domain(name: str, res: StrDict, loc: str) -> CustomDomain:
    props = _table(res, "Properties", loc, required=True) or {}
    ploc = f"{loc}.Properties"

    domain_name = get_str(props, "DomainName")
    if domain_name is None:
        raise _Invalid("DomainName is required", ploc)

    route_table = _table(props, "RouteConfig", ploc, required=False) or {}
    routes_map = _table(route_table, "Routes", f"{ploc}.RouteConfig", required=False) or {}
    routes: list[PathConfig] = []
    for path, obj in routes_map.items():
        rloc = f"{ploc}.RouteConfig.Routes.{path}"
        target = as_str_dict(obj)
        if target is None:
            raise _Invalid("route must be a mapping", rloc)
        service_name = get_str(target, "ServiceName")
        function_name = get_str(target, "FunctionName")
        if service_name is None or function_name is None:
            raise _Invalid("route needs ServiceName and FunctionName", rloc)
        routes.append(
            PathConfig(
                path=path,
                service_name=service_name,
                function_name=function_name,
                qualifier=get_str(target, "Qualifier"),
                methods=tuple(m.upper() for m in get_str_list(target, "Methods") or []),
            )
        )

    cert: CertConfig | None = None
    cert_table = _table(props, "CertConfig", ploc, required=False)
    if cert_table:
        cert_name = get_str(cert_table, "CertName")
        certificate = get_str(cert_table, "Certificate")
        private_key = get_str(cert_table, "PrivateKey")
        if cert_name is None or certificate is None or private_key is None:
            raise _Invalid(
                "CertConfig needs CertName, Certificate and PrivateKey", f"{ploc}.CertConfig"
            )
        cert = CertConfig(cert_name=cert_name, certificate=certificate, private_key=private_key)

    return CustomDomain(
        name=name,
        domain_name=domain_name,
        protocol=get_str(props, "Protocol") or "HTTP",
        route_config=RouteConfig(routes=tuple(routes)),
        cert_config=cert,
    )


def _table(parent: StrDict, key: str, loc: str, *, required: bool) -> StrDict | None:
    if key not in parent or parent[key] is None:
        if required:
            raise _Invalid(f"{key} is required", loc)
        return None
    table = get_table(parent, key)
    if table is None:
        raise _Invalid(f"{key} must be a mapping", f"{loc}.{key}" if loc != key else loc)
    return table
