"""Schema validation of the raw text of a configuration file."""

from __future__ import annotations

from functools import lru_cache
from typing import Any

import jsonschema
import yaml

from deckfile.schema import content_schema

_TIMESTAMP_TAG = "tag:yaml.org,2002:timestamp"


class _JSONLoader(yaml.SafeLoader):
    """A safe loader that keeps timestamps as plain strings, as JSON would."""


_JSONLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != _TIMESTAMP_TAG]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


class ValidationError(ValueError):
    """The file content is malformed or does not satisfy the schema."""

    def __init__(self, errors):
        self.errors = list(errors)
        super().__init__("\n".join(self.errors))


def _key(key: Any) -> str:
    if isinstance(key, bool):
        return "true" if key else "false"
    return str(key)


def _yaml_to_json(mapping: dict) -> dict:
    return {
        _key(k): _yaml_to_json(v) if isinstance(v, dict) else v
        for k, v in mapping.items()
    }


def ensure_json(mapping):
    """Return a copy of ``mapping`` whose nested mappings have string keys."""
    result: dict[str, Any] = {}
    for k, v in mapping.items():
        if isinstance(v, dict):
            v = _yaml_to_json(v)
        elif isinstance(v, list) and v:
            v = [_yaml_to_json(el) if isinstance(el, dict) else el for el in v]
        result[_key(k)] = v
    return result


@lru_cache(maxsize=1)
def _validator() -> jsonschema.Draft4Validator:
    return jsonschema.Draft4Validator(content_schema())


def _describe(error: jsonschema.ValidationError) -> str:
    path = ".".join(str(part) for part in error.absolute_path) or "(root)"
    return f"{path}: {error.message}"


def validate(content):
    """Check YAML or JSON text (str or bytes) against the content schema.

    Raises ValidationError listing every problem found.
    """
    try:
        document = yaml.load(content, Loader=_JSONLoader)
    except yaml.YAMLError as exc:
        raise ValidationError([f"unmarshaling file content: {exc}"]) from exc
    if document is None:
        document = {}
    if not isinstance(document, dict):
        raise ValidationError(
            [
                "unmarshaling file content: expected a mapping, got "
                f"{type(document).__name__}"
            ]
        )
    document = ensure_json(document)
    errors = sorted(
        _validator().iter_errors(document),
        key=lambda e: [str(part) for part in e.absolute_path],
    )
    if errors:
        raise ValidationError(_describe(e) for e in errors)