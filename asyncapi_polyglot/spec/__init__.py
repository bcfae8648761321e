# noqa: D104
"""Immutable Pydantic models for event-driven API documents."""

from asyncapi_polyglot.spec.channels import ChannelOperationSpec, ChannelSpec, ParameterSpec
from asyncapi_polyglot.spec.document import ApiSpec, ComponentsSpec, InfoSpec
from asyncapi_polyglot.spec.loader import load_spec, parse_spec
from asyncapi_polyglot.spec.messages import MessageSpec
from asyncapi_polyglot.spec.operations import OperationSpec, ReplySpec
from asyncapi_polyglot.spec.schemas import (
    InlineSchema,
    MissingSchema,
    PropertySpec,
    SchemaByName,
    SchemaRef,
    SchemaSpec,
)
from asyncapi_polyglot.spec.security import OAuthFlowSpec, OAuthFlowsSpec, SecuritySchemeSpec

__all__ = [
    "load_spec",
    "parse_spec",
    "ApiSpec",
    "ComponentsSpec",
    "InfoSpec",
    "ChannelSpec",
    "ChannelOperationSpec",
    "ParameterSpec",
    "MessageSpec",
    "OperationSpec",
    "ReplySpec",
    "SchemaSpec",
    "PropertySpec",
    "SchemaRef",
    "SchemaByName",
    "InlineSchema",
    "MissingSchema",
    "SecuritySchemeSpec",
    "OAuthFlowsSpec",
    "OAuthFlowSpec",
]
