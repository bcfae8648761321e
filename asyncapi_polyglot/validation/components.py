"""Security scheme checks.

Ensures that:
- Scheme names are unique and types are known
- Each type carries its required fields
- OAuth2 schemes declare at least one flow, each with its required URLs
"""

from __future__ import annotations

from asyncapi_polyglot.errors import ConfigurationError, SpecReferenceError
from asyncapi_polyglot.spec.document import ApiSpec
from asyncapi_polyglot.spec.security import OAuthFlowSpec, SecuritySchemeSpec
from asyncapi_polyglot.spec.types import (
    OAUTH_FLOW_NAMES,
    VALID_API_KEY_LOCATIONS,
    VALID_SECURITY_TYPES,
)
from asyncapi_polyglot.validation.common import find_first_duplicate

# Required URLs per flow, checked in this order
FLOW_REQUIREMENTS: dict[str, tuple[str, ...]] = {
    "implicit": ("authorization_url",),
    "password": ("token_url",),
    "client_credentials": ("token_url",),
    "authorization_code": ("authorization_url", "token_url"),
}


def check_components(spec: ApiSpec) -> None:
    """Run all security scheme checks in order."""
    schemes = spec.components.security_schemes
    name = find_first_duplicate(s.name for s in schemes)
    if name is not None:
        raise SpecReferenceError(
            "duplicate",
            f"components.security_schemes.{name}",
            f"duplicate security scheme name '{name}'; security scheme names must be unique",
        )

    for scheme in schemes:
        if scheme.type not in VALID_SECURITY_TYPES:
            raise ConfigurationError(
                "type",
                _path(scheme),
                f"security scheme '{scheme.name}' has invalid type: {scheme.type}. "
                f"Valid types are: {list(VALID_SECURITY_TYPES)}",
            )
    for scheme in schemes:
        _check_config(scheme)
    for scheme in schemes:
        if scheme.type == "oauth2":
            _check_flows(scheme)


def _path(scheme: SecuritySchemeSpec) -> str:
    return f"components.security_schemes.{scheme.name}"


def _missing(scheme: SecuritySchemeSpec, field: str) -> ConfigurationError:
    return ConfigurationError(
        "missing",
        f"{_path(scheme)}.{field}",
        f"security scheme '{scheme.name}' of type '{scheme.type}' must specify '{field}'",
    )


def _check_config(scheme: SecuritySchemeSpec) -> None:
    if scheme.type == "apiKey":
        if not scheme.name_field:
            raise _missing(scheme, "name_field")
        if not scheme.location:
            raise _missing(scheme, "location")
        if scheme.location not in VALID_API_KEY_LOCATIONS:
            raise ConfigurationError(
                "location",
                f"{_path(scheme)}.location",
                f"security scheme '{scheme.name}' has invalid location: {scheme.location}. "
                f"Must be one of: {', '.join(VALID_API_KEY_LOCATIONS)}",
            )
    elif scheme.type == "http":
        if not scheme.scheme:
            raise _missing(scheme, "scheme")
    elif scheme.type == "oauth2":
        if scheme.flows is None:
            raise _missing(scheme, "flows")
    elif scheme.type == "openIdConnect":
        if not scheme.open_id_connect_url:
            raise _missing(scheme, "open_id_connect_url")


def _check_flows(scheme: SecuritySchemeSpec) -> None:
    declared = scheme.flows.declared() if scheme.flows else []
    if not declared:
        raise ConfigurationError(
            "flows",
            f"{_path(scheme)}.flows",
            f"security scheme '{scheme.name}' must define at least one OAuth flow: "
            f"{list(OAUTH_FLOW_NAMES)}",
        )
    for flow_name, flow in declared:
        _check_flow(scheme, flow_name, flow)


def _check_flow(scheme: SecuritySchemeSpec, flow_name: str, flow: OAuthFlowSpec) -> None:
    for field in FLOW_REQUIREMENTS[flow_name]:
        if not getattr(flow, field):
            raise ConfigurationError(
                "missing",
                f"{_path(scheme)}.flows.{flow_name}.{field}",
                f"{flow_name} OAuth flow of security scheme '{scheme.name}' "
                f"must specify '{field}'",
            )
