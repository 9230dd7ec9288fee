"""Rendering a Content as YAML or JSON and writing it out."""

from __future__ import annotations

import json
import os
import sys
from enum import Enum
from typing import Any

import yaml

from deckfile.types import Content, Format

_STR_TAG = "tag:yaml.org,2002:str"

_JSON_ESCAPES = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}


class _Dumper(yaml.SafeDumper):
    """Block-style dumper that never emits anchors or aliases."""

    def ignore_aliases(self, data):
        return True


def _represent_str(dumper: _Dumper, value: str) -> yaml.ScalarNode:
    style = None
    if "\n" in value:
        style = "|"
    elif dumper.resolve(yaml.ScalarNode, value, (True, False)) != _STR_TAG:
        # A plain scalar would read back as something other than a string.
        style = '"'
    return dumper.represent_scalar(_STR_TAG, value, style=style)


_Dumper.add_representer(str, _represent_str)


def _format_name(file_format: Any) -> str:
    if isinstance(file_format, Enum):
        return str(file_format.value)
    return str(file_format)


def _sorted(value: Any) -> Any:
    if isinstance(value, dict):
        return {str(k): _sorted(value[k]) for k in sorted(value, key=str)}
    if isinstance(value, list):
        return [_sorted(item) for item in value]
    return value


def _normalise_plugins(plugins: list) -> None:
    for plugin in plugins:
        if isinstance(plugin.get("config"), dict):
            plugin["config"] = _sorted(plugin["config"])


def _normalise_routes(routes: list) -> None:
    for route in routes:
        if isinstance(route.get("headers"), dict):
            route["headers"] = _sorted(route["headers"])
        _normalise_plugins(route.get("plugins", []))


def _document(content: Content) -> dict:
    """Return the document mapping with free-form maps in sorted key order."""
    doc = content.to_dict()
    for service in doc.get("services", []):
        _normalise_plugins(service.get("plugins", []))
        _normalise_routes(service.get("routes", []))
    _normalise_routes(doc.get("routes", []))
    _normalise_plugins(doc.get("plugins", []))
    for consumer in doc.get("consumers", []):
        _normalise_plugins(consumer.get("plugins", []))
    return doc


def render(content, file_format):
    """Return ``content`` serialised in ``file_format`` (YAML or JSON)."""
    name = _format_name(file_format)
    doc = _document(content)
    if name == Format.YAML.value:
        return yaml.dump(
            doc,
            Dumper=_Dumper,
            sort_keys=False,
            default_flow_style=False,
            allow_unicode=True,
        )
    if name == Format.JSON.value:
        text = json.dumps(doc, indent=2, ensure_ascii=False)
        for char, escape in _JSON_ESCAPES.items():
            text = text.replace(char, escape)
        return text
    raise ValueError(f"unknown file format: {name}")


def write_file(content, filename, file_format):
    """Write ``content`` to ``filename``, or to standard output for ``-``.

    A filename without an extension gets one named after the format.
    """
    text = render(content, file_format)
    try:
        if filename == "-":
            sys.stdout.write(text)
            sys.stdout.flush()
            return
        path = add_ext_to_filename(filename, file_format)
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as handle:
            handle.write(text)
    except OSError as exc:
        raise OSError(f"writing file: {exc}") from exc


def _ext(path: str) -> str:
    base = path.rsplit(os.sep, 1)[-1]
    if os.altsep:
        base = base.rsplit(os.altsep, 1)[-1]
    dot = base.rfind(".")
    return base[dot:] if dot >= 0 else ""


def add_ext_to_filename(filename, file_format):
    """Append ``.<format>`` in lower case when ``filename`` has no extension."""
    if _ext(filename) == "":
        return f"{filename}.{_format_name(file_format).lower()}"
    return filename


def _clear(entity: Any, name: str) -> None:
    if isinstance(entity, dict):
        if name in entity:
            entity[name] = None
    elif hasattr(entity, name):
        setattr(entity, name, None)


def zero_out_timestamps(entity):
    """Clear the creation and update timestamps of ``entity``, where it has them."""
    _clear(entity, "created_at")
    _clear(entity, "updated_at")


def zero_out_id(entity, alt_name, with_id):
    """Clear the ID of ``entity`` unless IDs are kept or it has no other name."""
    if with_id:
        return
    if not alt_name:
        return
    _clear(entity, "id")