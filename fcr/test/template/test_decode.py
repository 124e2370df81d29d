"""Tests for fcr.template.decode module."""

from __future__ import annotations

from pathlib import Path

from fcr.core.result import Err, Ok
from fcr.template.decode import convert_tree, decode_template, load_template
from fcr.template.model import PathConfig

TEMPLATE = """\
ROSTemplateFormatVersion: '2015-09-01'
Transform: 'Aliyun::Serverless-2018-04-03'
Resources:
  api:
    Type: 'Aliyun::Serverless::Service'
    Properties:
      Description: 'public api'
      Role: !GetAtt ApiRole.Arn
    getUser:
      Type: 'Aliyun::Serverless::Function'
      Properties:
        Handler: index.handler
        Runtime: python3.9
        CodeUri: ./src
        MemorySize: 256
        Timeout: 30
        EnvironmentVariables:
          STAGE: prod
          RETRIES: 3
      Events:
        http:
          Type: HTTP
          Properties:
            AuthType: ANONYMOUS
            Methods: ['get', 'POST']
        nightly:
          Type: Timer
          Properties:
            CronExpression: '0 0 2 * * *'
  ApiRole:
    Type: 'ALIYUN::RAM::Role'
    Properties:
      RoleName: api-role
  apiDomain:
    Type: 'Aliyun::Serverless::CustomDomain'
    Properties:
      DomainName: Auto
      Protocol: HTTP
      RouteConfig:
        Routes:
          '/user/*':
            ServiceName: api
            FunctionName: getUser
          '/legacy':
            ServiceName: api
            FunctionName: getUser
            Qualifier: v1_0_0
"""


def test_decodes_services_functions_and_triggers() -> None:
    result = decode_template(TEMPLATE)
    assert isinstance(result, Ok)
    tpl = result.value
    assert tpl.format_version == "2015-09-01"
    assert tpl.transform == "Aliyun::Serverless-2018-04-03"

    (service,) = tpl.services
    assert service.name == "api"
    assert service.description == "public api"
    # Intrinsic tags keep their payload instead of failing the load.
    assert service.role == "ApiRole.Arn"

    (fn,) = service.functions
    assert fn.name == "getUser"
    assert fn.memory_size == 256
    assert fn.environment == {"STAGE": "prod", "RETRIES": "3"}
    assert [t.name for t in fn.triggers] == ["http", "nightly"]

    (http,) = fn.http_triggers
    assert http.http is not None
    assert http.http.auth_type == "ANONYMOUS"
    assert http.http.methods == ("GET", "POST")


def test_decodes_custom_domain_routes() -> None:
    result = decode_template(TEMPLATE)
    assert isinstance(result, Ok)
    (domain,) = result.value.custom_domains
    assert domain.name == "apiDomain"
    assert domain.domain_name == "Auto"
    assert domain.route_config.routes == (
        PathConfig(path="/user/*", service_name="api", function_name="getUser"),
        PathConfig(
            path="/legacy", service_name="api", function_name="getUser", qualifier="v1_0_0"
        ),
    )
    assert domain.cert_config is None


def test_http_auth_type_defaults_to_anonymous() -> None:
    tree = {
        "Resources": {
            "svc": {
                "Type": "Aliyun::Serverless::Service",
                "fn": {
                    "Type": "Aliyun::Serverless::Function",
                    "Events": {"web": {"Type": "HTTP"}},
                },
            }
        }
    }
    result = convert_tree(tree)
    assert isinstance(result, Ok)
    trigger = result.value.services[0].functions[0].triggers[0]
    assert trigger.http is not None
    assert trigger.http.auth_type == "ANONYMOUS"
    assert trigger.http.methods == ()


def test_empty_resources() -> None:
    result = decode_template("ROSTemplateFormatVersion: '2015-09-01'\n")
    assert isinstance(result, Ok)
    assert result.value.services == ()
    assert result.value.custom_domains == ()


def test_root_must_be_mapping() -> None:
    result = decode_template("- a\n")
    assert isinstance(result, Err)
    assert "root" in result.error.message


def test_invalid_yaml() -> None:
    result = decode_template("Resources: [\n")
    assert isinstance(result, Err)
    assert "invalid YAML" in result.error.message


def test_methods_must_be_strings() -> None:
    text = TEMPLATE.replace("Methods: ['get', 'POST']", "Methods: GET")
    result = decode_template(text)
    assert isinstance(result, Err)
    assert result.error.location == "Resources.api.getUser.Events.http.Properties.Methods"


def test_route_needs_function_name() -> None:
    tree = {
        "Resources": {
            "d": {
                "Type": "Aliyun::Serverless::CustomDomain",
                "Properties": {
                    "DomainName": "api.example.com",
                    "RouteConfig": {"Routes": {"/": {"ServiceName": "api"}}},
                },
            }
        }
    }
    result = convert_tree(tree)
    assert isinstance(result, Err)
    assert result.error.message == "route needs ServiceName and FunctionName"
    assert result.error.location == "Resources.d.Properties.RouteConfig.Routes./"


def test_domain_name_required() -> None:
    tree = {"Resources": {"d": {"Type": "Aliyun::Serverless::CustomDomain", "Properties": {}}}}
    result = convert_tree(tree)
    assert isinstance(result, Err)
    assert "DomainName" in result.error.message


def test_partial_cert_config_is_rejected() -> None:
    tree = {
        "Resources": {
            "d": {
                "Type": "Aliyun::Serverless::CustomDomain",
                "Properties": {
                    "DomainName": "api.example.com",
                    "Protocol": "HTTP,HTTPS",
                    "CertConfig": {"CertName": "c"},
                },
            }
        }
    }
    result = convert_tree(tree)
    assert isinstance(result, Err)
    assert result.error.location == "Resources.d.Properties.CertConfig"


def test_load_template_reports_path(tmp_path: Path) -> None:
    missing = load_template(tmp_path / "template.yml")
    assert isinstance(missing, Err)
    assert missing.error.unreadable

    path = tmp_path / "bad.yml"
    path.write_text("Resources:\n  x: 1\n", encoding="utf-8")
    bad = load_template(path)
    assert isinstance(bad, Err)
    assert not bad.error.unreadable
    assert bad.error.path == path
    assert str(path) in bad.error.pretty()
