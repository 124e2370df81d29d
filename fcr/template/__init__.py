"""Deployment template entities and decoding."""

from .decode import TemplateError, convert_tree, decode_template, load_template
from .model import (
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

__all__ = [
    "CertConfig",
    "CustomDomain",
    "Function",
    "HttpTriggerConfig",
    "PathConfig",
    "RouteConfig",
    "Service",
    "Template",
    "TemplateError",
    "Trigger",
    "convert_tree",
    "decode_template",
    "load_template",
]
