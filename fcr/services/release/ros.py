"""Resource orchestration (ROS) stack lookups over `aliyunsdkcore`."""

from __future__ import annotations

import json
from typing import Any

from aliyunsdkcore.acs_exception.exceptions import ClientException, ServerException
from aliyunsdkcore.auth.credentials import StsTokenCredential
from aliyunsdkcore.client import AcsClient
from aliyunsdkcore.request import CommonRequest

from fcr.core.config import FcConfig
from fcr.core.result import Err, Ok, Result
from fcr.core.structured import StrDict, as_obj_list, as_str_dict, get_str
from fcr.services.release.config import ROS_API_VERSION, ROS_DOMAIN, ROS_PAGE_SIZE
from fcr.services.release.errors import RemoteOperationError
from fcr.services.release.model import StackRecord


class RosStackClient:
    """`StackClient` backed by an `AcsClient` issuing generic RPC requests."""

    def __init__(self, client: Any) -> None:
        self._client = client

    @classmethod
    def from_config(cls, config: FcConfig, *, region: str) -> RosStackClient:
        if config.security_token:
            credential = StsTokenCredential(
                config.access_key_id, config.access_key_secret, config.security_token
            )
            return cls(AcsClient(region_id=region, credential=credential))
        return cls(AcsClient(config.access_key_id, config.access_key_secret, region))

    def _invoke(self, action: str, params: dict[str, str]) -> Result[StrDict, RemoteOperationError]:
        operation = f"ros:{action}"
        request = CommonRequest(domain=ROS_DOMAIN, version=ROS_API_VERSION, action_name=action)
        request.set_method("POST")
        request.set_protocol_type("https")
        for key, value in params.items():
            request.add_query_param(key, value)

        try:
            raw = self._client.do_action_with_exception(request)
        except (ClientException, ServerException) as e:
            return Err(
                RemoteOperationError(
                    operation=operation, message=e.get_error_msg(), code=e.get_error_code()
                )
            )

        try:
            text = raw.decode("utf-8") if isinstance(raw, bytes) else str(raw)
            obj: object = json.loads(text)
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            return Err(RemoteOperationError(operation=operation, message=f"invalid JSON: {e}"))

        data = as_str_dict(obj)
        if data is None:
            return Err(RemoteOperationError(operation=operation, message="unexpected payload"))
        return Ok(data)

    def list_stacks(self, name: str) -> Result[list[StackRecord], RemoteOperationError]:
        result = self._invoke(
            "ListStacks", {"StackName.1": name, "PageSize": str(ROS_PAGE_SIZE)}
        )
        if isinstance(result, Err):
            return result
        stacks: list[StackRecord] = []
        for obj in as_obj_list(result.value.get("Stacks")) or []:
            d = as_str_dict(obj)
            if d is None:
                continue
            stack_id = get_str(d, "StackId")
            stack_name = get_str(d, "StackName")
            if stack_id is not None and stack_name is not None:
                stacks.append(StackRecord(stack_id=stack_id, stack_name=stack_name))
        return Ok(stacks)

    def get_resource_attributes(
        self, stack_id: str, logical_id: str
    ) -> Result[dict[str, object], RemoteOperationError]:
        result = self._invoke(
            "GetStackResource",
            {
                "StackId": stack_id,
                "LogicalResourceId": logical_id,
                "ShowResourceAttributes": "true",
            },
        )
        if isinstance(result, Err):
            return result
        attrs: dict[str, object] = {}
        for obj in as_obj_list(result.value.get("ResourceAttributes")) or []:
            d = as_str_dict(obj)
            if d is None:
                continue
            key = get_str(d, "ResourceAttributeKey")
            if key is not None:
                attrs[key] = d.get("ResourceAttributeValue")
        return Ok(attrs)
