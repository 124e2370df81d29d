from __future__ import annotations

import json
from typing import Any

from aliyunsdkcore.acs_exception.exceptions import ClientException

from fcr.core.result import Err, Ok
from fcr.services.release.model import StackRecord
from fcr.services.release.ros import RosStackClient


class StubAcsClient:
    def __init__(self, *responses: dict[str, Any] | Exception) -> None:
        self._responses = list(responses)
        self.requests: list[Any] = []

    def do_action_with_exception(self, request: Any) -> bytes:
        self.requests.append(request)
        response = self._responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return json.dumps(response).encode("utf-8")


def test_list_stacks() -> None:
    acs = StubAcsClient(
        {
            "Stacks": [
                {"StackId": "s-1", "StackName": "prod"},
                {"StackId": "s-2", "StackName": "prod-canary"},
            ]
        }
    )
    result = RosStackClient(acs).list_stacks("prod")
    assert result == Ok(
        [StackRecord(stack_id="s-1", stack_name="prod"), StackRecord("s-2", "prod-canary")]
    )
    request = acs.requests[0]
    assert request.get_action_name() == "ListStacks"
    assert request.get_query_params()["StackName.1"] == "prod"


def test_resource_attributes() -> None:
    acs = StubAcsClient(
        {
            "ResourceAttributes": [
                {"ResourceAttributeKey": "ServiceName", "ResourceAttributeValue": "prod-api-x1"},
                {"ResourceAttributeKey": "ARN", "ResourceAttributeValue": "acs:fc:..."},
            ]
        }
    )
    result = RosStackClient(acs).get_resource_attributes("s-1", "api")
    assert isinstance(result, Ok)
    assert result.value["ServiceName"] == "prod-api-x1"
    params = acs.requests[0].get_query_params()
    assert params["LogicalResourceId"] == "api"
    assert params["ShowResourceAttributes"] == "true"


def test_sdk_errors_become_remote_errors() -> None:
    acs = StubAcsClient(ClientException("SDK.HttpError", "timed out"))
    result = RosStackClient(acs).list_stacks("prod")
    assert isinstance(result, Err)
    assert result.error.operation == "ros:ListStacks"
    assert result.error.code == "SDK.HttpError"
    assert result.error.message == "timed out"
