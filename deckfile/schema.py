"""The JSON schema that a configuration file must satisfy."""

from __future__ import annotations

from typing import Any

from deckfile.schema_definitions import definitions

DRAFT4 = "http://json-schema.org/draft-04/schema#"


def _list_of(name: str) -> dict[str, Any]:
    return {"items": {"$ref": f"#/definitions/{name}"}, "type": "array"}


def content_schema():
    """Return a fresh copy of the schema for a whole configuration document."""
    return {
        "$schema": DRAFT4,
        "properties": {
            "_format_version": {"type": "string"},
            "_info": {"$ref": "#/definitions/Info"},
            "_workspace": {"type": "string"},
            "ca_certificates": _list_of("FCACertificate"),
            "certificates": _list_of("FCertificate"),
            "consumers": _list_of("FConsumer"),
            "plugins": _list_of("FPlugin"),
            "routes": _list_of("FRoute"),
            "services": _list_of("FService"),
            "upstreams": _list_of("FUpstream"),
        },
        "additionalProperties": False,
        "type": "object",
        "definitions": definitions(),
    }