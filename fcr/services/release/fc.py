"""Function Compute control plane over the `fc2` SDK.

The SDK raises on failure and returns raw JSON payloads; this adapter turns
both into typed Results so nothing above it sees an SDK exception.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import fc2
import requests
from fc2.fc_exceptions import FcError

from fcr.core.config import FcConfig
from fcr.core.result import Err, Ok, Result
from fcr.core.structured import StrDict, as_obj_list, as_str_dict, get_int, get_str, get_table
from fcr.services.release.config import FC_PAGE_SIZE
from fcr.services.release.errors import RemoteOperationError
from fcr.services.release.model import (
    AliasRecord,
    DomainRecord,
    ProvisionRecord,
    TriggerRecord,
    TriggerSpec,
    VersionRecord,
    parse_remote_time,
)
from fcr.template.model import CertConfig, PathConfig


def _fc_error(operation: str, error: FcError) -> RemoteOperationError:
    message = getattr(error, "message", None) or str(error)
    code = getattr(error, "err_code", None)
    return RemoteOperationError(
        operation=operation,
        message=str(message),
        code=str(code) if code else None,
    )


def _route_from_payload(obj: StrDict) -> PathConfig | None:
    path = get_str(obj, "path")
    service = get_str(obj, "serviceName")
    function = get_str(obj, "functionName")
    if path is None or service is None or function is None:
        return None
    methods = [m for m in as_obj_list(obj.get("methods")) or [] if isinstance(m, str)]
    return PathConfig(
        path=path,
        service_name=service,
        function_name=function,
        qualifier=get_str(obj, "qualifier"),
        methods=tuple(methods),
    )


def _route_to_payload(route: PathConfig) -> StrDict:
    payload: StrDict = {
        "path": route.path,
        "serviceName": route.service_name,
        "functionName": route.function_name,
    }
    if route.qualifier:
        payload["qualifier"] = route.qualifier
    if route.methods:
        payload["methods"] = list(route.methods)
    return payload


def _domain_from_payload(obj: StrDict) -> DomainRecord | None:
    name = get_str(obj, "domainName")
    if name is None:
        return None
    route_config = get_table(obj, "routeConfig") or {}
    routes: list[PathConfig] = []
    for item in as_obj_list(route_config.get("routes")) or []:
        d = as_str_dict(item)
        route = _route_from_payload(d) if d is not None else None
        if route is not None:
            routes.append(route)
    return DomainRecord(
        domain_name=name,
        protocol=get_str(obj, "protocol") or "HTTP",
        routes=tuple(routes),
    )


def _trigger_from_payload(obj: StrDict) -> TriggerRecord | None:
    name = get_str(obj, "triggerName")
    if name is None:
        return None
    return TriggerRecord(
        name=name,
        trigger_type=get_str(obj, "triggerType") or "",
        qualifier=get_str(obj, "qualifier"),
        created=parse_remote_time(get_str(obj, "createdTime")),
        modified=parse_remote_time(get_str(obj, "lastModifiedTime")),
    )


class FcPlatformClient:
    """`PlatformClient` backed by an `fc2.Client`."""

    def __init__(self, client: Any) -> None:
        self._client = client

    @classmethod
    def from_config(cls, config: FcConfig) -> FcPlatformClient:
        client = fc2.Client(
            endpoint=config.endpoint,
            accessKeyID=config.access_key_id,
            accessKeySecret=config.access_key_secret,
            securityToken=config.security_token or "",
            Timeout=config.timeout,
        )
        return cls(client)

    def _call(
        self, operation: str, fn: Callable[..., Any], **kwargs: Any
    ) -> Result[StrDict, RemoteOperationError]:
        try:
            resp = fn(**kwargs)
        except FcError as e:
            return Err(_fc_error(operation, e))
        except requests.RequestException as e:
            return Err(RemoteOperationError(operation=operation, message=f"transport error: {e}"))
        return Ok(as_str_dict(getattr(resp, "data", None)) or {})

    def _list_all(
        self, operation: str, fn: Callable[..., Any], key: str, **kwargs: Any
    ) -> Result[list[StrDict], RemoteOperationError]:
        items: list[StrDict] = []
        token: str | None = None
        while True:
            page = self._call(operation, fn, limit=FC_PAGE_SIZE, nextToken=token, **kwargs)
            if isinstance(page, Err):
                return page
            for obj in as_obj_list(page.value.get(key)) or []:
                d = as_str_dict(obj)
                if d is not None:
                    items.append(d)
            token = get_str(page.value, "nextToken")
            if token is None:
                return Ok(items)

    # versions / aliases

    def list_versions(self, service: str) -> Result[list[VersionRecord], RemoteOperationError]:
        result = self._list_all(
            "list_versions",
            self._client.list_versions,
            "versions",
            serviceName=service,
        )
        if isinstance(result, Err):
            return result
        out: list[VersionRecord] = []
        for obj in result.value:
            vid = get_str(obj, "versionId")
            if vid is not None:
                out.append(VersionRecord(version_id=vid, description=get_str(obj, "description")))
        return Ok(out)

    def publish_version(
        self, service: str, description: str
    ) -> Result[VersionRecord, RemoteOperationError]:
        result = self._call(
            "publish_version",
            self._client.publish_version,
            serviceName=service,
            description=description,
        )
        if isinstance(result, Err):
            return result
        vid = get_str(result.value, "versionId")
        if vid is None:
            return Err(
                RemoteOperationError(
                    operation="publish_version", message="response has no versionId"
                )
            )
        return Ok(VersionRecord(version_id=vid, description=description))

    def list_aliases(self, service: str) -> Result[list[AliasRecord], RemoteOperationError]:
        result = self._list_all(
            "list_aliases", self._client.list_aliases, "aliases", serviceName=service
        )
        if isinstance(result, Err):
            return result
        out: list[AliasRecord] = []
        for obj in result.value:
            name = get_str(obj, "aliasName")
            vid = get_str(obj, "versionId")
            if name is not None and vid is not None:
                out.append(
                    AliasRecord(name=name, version_id=vid, description=get_str(obj, "description"))
                )
        return Ok(out)

    def create_alias(
        self, service: str, name: str, version_id: str, description: str
    ) -> Result[AliasRecord, RemoteOperationError]:
        result = self._call(
            "create_alias",
            self._client.create_alias,
            serviceName=service,
            aliasName=name,
            versionId=version_id,
            description=description,
        )
        if isinstance(result, Err):
            return result
        return Ok(AliasRecord(name=name, version_id=version_id, description=description))

    # triggers

    def list_triggers(
        self, service: str, function: str
    ) -> Result[list[TriggerRecord], RemoteOperationError]:
        result = self._list_all(
            "list_triggers",
            self._client.list_triggers,
            "triggers",
            serviceName=service,
            functionName=function,
        )
        if isinstance(result, Err):
            return result
        return Ok([t for t in map(_trigger_from_payload, result.value) if t is not None])

    def create_trigger(
        self, service: str, function: str, spec: TriggerSpec
    ) -> Result[TriggerRecord, RemoteOperationError]:
        result = self._call(
            "create_trigger",
            self._client.create_trigger,
            serviceName=service,
            functionName=function,
            triggerName=spec.name,
            triggerType="http",
            triggerConfig={"authType": spec.auth_type, "methods": list(spec.methods)},
            sourceArn=None,
            invocationRole=None,
            qualifier=spec.qualifier,
            description=spec.description,
        )
        if isinstance(result, Err):
            return result
        record = _trigger_from_payload(result.value)
        if record is None:
            now = parse_remote_time(None)
            record = TriggerRecord(
                name=spec.name,
                trigger_type="http",
                qualifier=spec.qualifier,
                created=now,
                modified=now,
            )
        return Ok(record)

    def delete_trigger(
        self, service: str, function: str, name: str
    ) -> Result[None, RemoteOperationError]:
        result = self._call(
            "delete_trigger",
            self._client.delete_trigger,
            serviceName=service,
            functionName=function,
            triggerName=name,
        )
        if isinstance(result, Err):
            return result
        return Ok(None)

    # custom domains

    def list_custom_domains(self) -> Result[list[DomainRecord], RemoteOperationError]:
        result = self._list_all(
            "list_custom_domains", self._client.list_custom_domains, "customDomains"
        )
        if isinstance(result, Err):
            return result
        return Ok([d for d in map(_domain_from_payload, result.value) if d is not None])

    def create_custom_domain(
        self, domain: DomainRecord, cert: CertConfig | None
    ) -> Result[DomainRecord, RemoteOperationError]:
        cert_payload: StrDict | None = None
        if cert is not None:
            cert_payload = {
                "certName": cert.cert_name,
                "certificate": cert.certificate,
                "privateKey": cert.private_key,
            }
        result = self._call(
            "create_custom_domain",
            self._client.create_custom_domain,
            domainName=domain.domain_name,
            protocol=domain.protocol,
            routeConfig={"routes": [_route_to_payload(r) for r in domain.routes]},
            certConfig=cert_payload,
        )
        if isinstance(result, Err):
            return result
        return Ok(domain)

    def update_custom_domain(
        self, domain: DomainRecord
    ) -> Result[DomainRecord, RemoteOperationError]:
        result = self._call(
            "update_custom_domain",
            self._client.update_custom_domain,
            domainName=domain.domain_name,
            protocol=domain.protocol,
            routeConfig={"routes": [_route_to_payload(r) for r in domain.routes]},
        )
        if isinstance(result, Err):
            return result
        return Ok(domain)

    # provisioned concurrency

    def list_provision_configs(
        self, service: str
    ) -> Result[list[ProvisionRecord], RemoteOperationError]:
        result = self._list_all(
            "list_provision_configs",
            self._client.list_provision_configs,
            "provisionConfigs",
            serviceName=service,
            # every alias of the service
            qualifier=None,
        )
        if isinstance(result, Err):
            return result
        out: list[ProvisionRecord] = []
        for obj in result.value:
            resource = get_str(obj, "resource")
            if resource is None:
                continue
            out.append(
                ProvisionRecord(
                    resource=resource,
                    target=get_int(obj, "target") or 0,
                    current=get_int(obj, "current") or 0,
                )
            )
        return Ok(out)

    def put_provision_config(
        self, service: str, qualifier: str, function: str, target: int
    ) -> Result[None, RemoteOperationError]:
        result = self._call(
            "put_provision_config",
            self._client.put_provision_config,
            serviceName=service,
            qualifier=qualifier,
            functionName=function,
            target=target,
        )
        if isinstance(result, Err):
            return result
        return Ok(None)
