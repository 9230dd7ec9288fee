"""JSON-schema definitions for every entity of a configuration file.

Each entity is described by the document keys it accepts. The file forms
(``FService``, ``FPlugin`` and the like) differ from the plain entities:
foreign references are strings, and certificate SNIs are objects with a
``name``. Every call returns a fresh, independent mapping.
"""

from __future__ import annotations

from typing import Any

Schema = dict[str, Any]


def _string() -> Schema:
    return {"type": "string"}


def _integer() -> Schema:
    return {"type": "integer"}


def _number() -> Schema:
    return {"type": "number"}


def _boolean() -> Schema:
    return {"type": "boolean"}


def _array(items: Schema) -> Schema:
    return {"items": items, "type": "array"}


def _strings() -> Schema:
    return _array(_string())


def _integers() -> Schema:
    return _array(_integer())


def _ref(name: str) -> Schema:
    return {"$ref": f"#/definitions/{name}"}


def _refs(name: str) -> Schema:
    return _array(_ref(name))


def _object(
    properties: Schema,
    *,
    required: list[str] | None = None,
    any_of_required: tuple[str, ...] = (),
) -> Schema:
    schema: Schema = {}
    if required:
        schema["required"] = list(required)
    schema["properties"] = properties
    schema["additionalProperties"] = False
    schema["type"] = "object"
    if any_of_required:
        schema["anyOf"] = [{"required": [key]} for key in any_of_required]
    return schema


def _credential(fields: Schema, required: list[str]) -> Schema:
    properties: Schema = {
        "consumer": _ref("Consumer"),
        "created_at": _integer(),
        "id": _string(),
        "tags": _strings(),
    }
    properties.update(fields)
    return _object(properties, required=required)


def _route_properties() -> Schema:
    return {
        "created_at": _integer(),
        "destinations": _refs("CIDRPort"),
        "headers": {
            "patternProperties": {".*": _strings()},
            "type": "object",
        },
        "hosts": _strings(),
        "https_redirect_status_code": _integer(),
        "id": _string(),
        "methods": _strings(),
        "name": _string(),
        "paths": _strings(),
        "preserve_host": _boolean(),
        "protocols": _strings(),
        "regex_priority": _integer(),
        "service": _ref("Service"),
        "snis": _strings(),
        "sources": _refs("CIDRPort"),
        "strip_path": _boolean(),
        "tags": _strings(),
        "updated_at": _integer(),
    }


def _service_properties() -> Schema:
    return {
        "client_certificate": _ref("Certificate"),
        "connect_timeout": _integer(),
        "created_at": _integer(),
        "host": _string(),
        "id": _string(),
        "name": _string(),
        "path": _string(),
        "port": _integer(),
        "protocol": _string(),
        "read_timeout": _integer(),
        "retries": _integer(),
        "tags": _strings(),
        "updated_at": _integer(),
        "write_timeout": _integer(),
    }


def _upstream_properties() -> Schema:
    return {
        "algorithm": _string(),
        "created_at": _integer(),
        "hash_fallback": _string(),
        "hash_fallback_header": _string(),
        "hash_on": _string(),
        "hash_on_cookie": _string(),
        "hash_on_cookie_path": _string(),
        "hash_on_header": _string(),
        "healthchecks": _ref("Healthcheck"),
        "host_header": _string(),
        "id": _string(),
        "name": _string(),
        "slots": _integer(),
        "tags": _strings(),
    }


def _consumer_properties() -> Schema:
    return {
        "created_at": _integer(),
        "custom_id": _string(),
        "id": _string(),
        "tags": _strings(),
        "username": _string(),
    }


def definitions() -> Schema:
    """Return the mapping from definition name to its JSON schema."""
    f_route = _route_properties()
    f_route["plugins"] = _refs("FPlugin")

    f_service = _service_properties()
    # A service in a file names its client certificate by ID.
    f_service["client_certificate"] = _string()
    f_service["plugins"] = _refs("FPlugin")
    f_service["routes"] = _refs("FRoute")

    f_upstream = _upstream_properties()
    f_upstream["targets"] = _refs("FTarget")

    f_consumer = _consumer_properties()
    f_consumer.update(
        {
            "acls": _refs("ACLGroup"),
            "basicauth_credentials": _refs("BasicAuth"),
            "hmacauth_credentials": _refs("HMACAuth"),
            "jwt_secrets": _refs("JWTAuth"),
            "keyauth_credentials": _refs("KeyAuth"),
            "oauth2_credentials": _refs("Oauth2Credential"),
            "plugins": _refs("FPlugin"),
        }
    )

    return {
        "ACLGroup": _credential({"group": _string()}, ["group"]),
        "ActiveHealthcheck": _object(
            {
                "concurrency": _integer(),
                "healthy": _ref("Healthy"),
                "http_path": _string(),
                "https_sni": _string(),
                "https_verify_certificate": _boolean(),
                "timeout": _integer(),
                "type": _string(),
                "unhealthy": _ref("Unhealthy"),
            }
        ),
        "BasicAuth": _credential(
            {"password": _string(), "username": _string()},
            ["username", "password"],
        ),
        "CIDRPort": _object({"ip": _string(), "port": _integer()}),
        "Certificate": _object(
            {
                "cert": _string(),
                "created_at": _integer(),
                "id": _string(),
                "key": _string(),
                "snis": _strings(),
                "tags": _strings(),
            }
        ),
        "Consumer": _object(
            _consumer_properties(), any_of_required=("id", "username")
        ),
        "FCACertificate": _object(
            {
                "cert": _string(),
                "created_at": _integer(),
                "id": _string(),
                "tags": _strings(),
            },
            required=["cert"],
        ),
        "FCertificate": _object(
            {
                "cert": _string(),
                "created_at": _integer(),
                "id": _string(),
                "key": _string(),
                "snis": _array(
                    {"properties": {"name": _string()}, "type": "object"}
                ),
                "tags": _strings(),
            },
            required=["id", "cert", "key"],
        ),
        "FConsumer": _object(f_consumer),
        "FPlugin": _object(
            {
                "config": {"additionalProperties": True, "type": "object"},
                "consumer": _string(),
                "created_at": _integer(),
                "enabled": _boolean(),
                "id": _string(),
                "name": _string(),
                "protocols": _strings(),
                "route": _string(),
                "run_on": _string(),
                "service": _string(),
                "tags": _strings(),
            },
            required=["name"],
        ),
        "FRoute": _object(f_route),
        "FService": _object(f_service),
        "FTarget": _object(
            {
                "created_at": _number(),
                "id": _string(),
                "tags": _strings(),
                "target": _string(),
                "upstream": _ref("Upstream"),
                "weight": _integer(),
            },
            required=["target"],
        ),
        "FUpstream": _object(f_upstream),
        "HMACAuth": _credential(
            {"secret": _string(), "username": _string()},
            ["username", "secret"],
        ),
        "Healthcheck": _object(
            {
                "active": _ref("ActiveHealthcheck"),
                "passive": _ref("PassiveHealthcheck"),
            }
        ),
        "Healthy": _object(
            {
                "http_statuses": _integers(),
                "interval": _integer(),
                "successes": _integer(),
            }
        ),
        "Info": _object({"select_tags": _strings()}),
        "JWTAuth": _credential(
            {
                "algorithm": _string(),
                "key": _string(),
                "rsa_public_key": _string(),
                "secret": _string(),
            },
            ["algorithm", "key", "secret"],
        ),
        "KeyAuth": _credential({"key": _string()}, ["key"]),
        "Oauth2Credential": _credential(
            {
                "client_id": _string(),
                "client_secret": _string(),
                "name": _string(),
                "redirect_uris": _strings(),
            },
            ["name", "client_id", "redirect_uris", "client_secret"],
        ),
        "PassiveHealthcheck": _object(
            {"healthy": _ref("Healthy"), "unhealthy": _ref("Unhealthy")}
        ),
        "Route": _object(_route_properties(), any_of_required=("id", "name")),
        "Service": _object(
            _service_properties(), any_of_required=("id", "name")
        ),
        "Unhealthy": _object(
            {
                "http_failures": _integer(),
                "http_statuses": _integers(),
                "interval": _integer(),
                "tcp_failures": _integer(),
                "timeouts": _integer(),
            }
        ),
        "Upstream": _object(_upstream_properties(), required=["name"]),
    }