"""Entities of a declarative configuration file and their (de)serialisation."""

from __future__ import annotations

import copy
from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, ClassVar


class Format(str, Enum):
    """Serialisation format of a configuration file."""

    JSON = "JSON"
    YAML = "YAML"


def _is_empty(value: Any) -> bool:
    return value is None or (isinstance(value, (list, dict)) and not value)


def _as_mapping(data: Any, kind: str) -> Mapping:
    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise TypeError(f"{kind} must be a mapping, got {type(data).__name__}")
    return data


@dataclass
class _Record:
    """Fields map one-to-one onto document keys; None and empty collections are omitted."""

    _children: ClassVar[dict[str, type]] = {}

    @classmethod
    def from_dict(cls, data):
        """Build an instance from a decoded document mapping."""
        data = _as_mapping(data, cls.__name__)
        kwargs: dict[str, Any] = {}
        for f in fields(cls):
            if f.name not in data:
                continue
            value = data[f.name]
            child = cls._children.get(f.name)
            if child is not None and value is not None:
                value = [child.from_dict(item) for item in value]
            elif isinstance(value, (list, dict)):
                value = copy.deepcopy(value)
            kwargs[f.name] = value
        return cls(**kwargs)

    def to_dict(self):
        """Return the document mapping for this entity."""
        out: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if _is_empty(value):
                continue
            if f.name in self._children:
                value = [item.to_dict() for item in value]
            elif isinstance(value, (list, dict)):
                value = copy.deepcopy(value)
            out[f.name] = value
        return out


_PLUGIN_REFERENCES = ("service", "consumer", "route")


@dataclass
class FPlugin(_Record):
    """A plugin; its service, consumer and route are referenced by ID or name."""

    created_at: int | None = None
    id: str | None = None
    name: str | None = None
    config: dict | None = None
    service: str | None = None
    consumer: str | None = None
    route: str | None = None
    enabled: bool | None = None
    run_on: str | None = None
    protocols: list | None = None
    tags: list | None = None

    @classmethod
    def from_dict(cls, data):
        """Build a plugin; empty references are treated as unset."""
        plugin = super().from_dict(data)
        for ref in _PLUGIN_REFERENCES:
            if getattr(plugin, ref) == "":
                setattr(plugin, ref, None)
        return plugin

    def to_dict(self):
        """Return the document mapping for this plugin."""
        out = super().to_dict()
        for ref in _PLUGIN_REFERENCES:
            if out.get(ref) == "":
                del out[ref]
        return out

    def sort_key(self):
        """Key used to order plugins in a written file."""
        if self.id is not None:
            return self.id
        return "".join(
            part or ""
            for part in (self.name, self.consumer, self.route, self.service)
        )


@dataclass
class FRoute(_Record):
    """A route and the plugins attached to it."""

    _children: ClassVar[dict[str, type]] = {"plugins": FPlugin}

    created_at: int | None = None
    destinations: list | None = None
    headers: dict | None = None
    hosts: list | None = None
    https_redirect_status_code: int | None = None
    id: str | None = None
    methods: list | None = None
    name: str | None = None
    paths: list | None = None
    preserve_host: bool | None = None
    protocols: list | None = None
    regex_priority: int | None = None
    service: dict | None = None
    snis: list | None = None
    sources: list | None = None
    strip_path: bool | None = None
    tags: list | None = None
    updated_at: int | None = None
    plugins: list = field(default_factory=list)

    @classmethod
    def from_dict(cls, data):
        """Build a route and its plugins from a document mapping."""
        return super().from_dict(data)

    def to_dict(self):
        """Return the document mapping for this route."""
        return super().to_dict()

    def sort_key(self):
        """Key used to order routes in a written file."""
        if self.id is not None:
            return self.id
        return self.name if self.name is not None else ""


@dataclass
class FService(_Record):
    """A service with its routes and plugins; the client certificate is an ID."""

    _children: ClassVar[dict[str, type]] = {"routes": FRoute, "plugins": FPlugin}

    client_certificate: str | None = None
    connect_timeout: int | None = None
    created_at: int | None = None
    host: str | None = None
    id: str | None = None
    name: str | None = None
    path: str | None = None
    port: int | None = None
    protocol: str | None = None
    read_timeout: int | None = None
    retries: int | None = None
    updated_at: int | None = None
    write_timeout: int | None = None
    tags: list | None = None
    routes: list = field(default_factory=list)
    plugins: list = field(default_factory=list)

    @classmethod
    def from_dict(cls, data):
        """Build a service with its routes and plugins."""
        service = super().from_dict(data)
        if service.client_certificate == "":
            service.client_certificate = None
        return service

    def to_dict(self):
        """Return the document mapping for this service."""
        out = super().to_dict()
        if out.get("client_certificate") == "":
            del out["client_certificate"]
        return out

    def sort_key(self):
        """Key used to order services in a written file."""
        if self.id is not None:
            return self.id
        return self.name if self.name is not None else ""


@dataclass
class FTarget(_Record):
    """A target of an upstream."""

    created_at: float | None = None
    id: str | None = None
    tags: list | None = None
    target: str | None = None
    upstream: dict | None = None
    weight: int | None = None

    @classmethod
    def from_dict(cls, data):
        """Build a target from a document mapping."""
        return super().from_dict(data)

    def to_dict(self):
        """Return the document mapping for this target."""
        return super().to_dict()

    def sort_key(self):
        """Key used to order targets in a written file."""
        if self.id is not None:
            return self.id
        return self.target if self.target is not None else ""


@dataclass
class FUpstream(_Record):
    """An upstream and its targets."""

    _children: ClassVar[dict[str, type]] = {"targets": FTarget}

    algorithm: str | None = None
    created_at: int | None = None
    hash_fallback: str | None = None
    hash_fallback_header: str | None = None
    hash_on: str | None = None
    hash_on_cookie: str | None = None
    hash_on_cookie_path: str | None = None
    hash_on_header: str | None = None
    healthchecks: dict | None = None
    host_header: str | None = None
    id: str | None = None
    name: str | None = None
    slots: int | None = None
    tags: list | None = None
    targets: list = field(default_factory=list)

    @classmethod
    def from_dict(cls, data):
        """Build an upstream and its targets from a document mapping."""
        return super().from_dict(data)

    def to_dict(self):
        """Return the document mapping for this upstream."""
        return super().to_dict()

    def sort_key(self):
        """Key used to order upstreams in a written file."""
        if self.id is not None:
            return self.id
        return self.name if self.name is not None else ""


@dataclass
class FCertificate(_Record):
    """A certificate; SNIs are held as names and written as ``{"name": ...}``."""

    id: str | None = None
    cert: str | None = None
    key: str | None = None
    created_at: int | None = None
    snis: list | None = None
    tags: list | None = None

    @classmethod
    def from_dict(cls, data):
        """Build a certificate, reading SNIs from ``{"name": ...}`` objects."""
        data = dict(_as_mapping(data, cls.__name__))
        raw_snis = data.pop("snis", None)
        certificate = super().from_dict(data)
        if raw_snis:
            certificate.snis = [sni["name"] for sni in raw_snis]
        return certificate

    def to_dict(self):
        """Return the document mapping for this certificate."""
        out = super().to_dict()
        if "snis" in out:
            out["snis"] = [{"name": name} for name in out["snis"]]
        return out

    def sort_key(self):
        """Key used to order certificates in a written file."""
        if self.id is not None:
            return self.id
        return self.cert if self.cert is not None else ""


@dataclass
class FCACertificate(_Record):
    """A CA certificate."""

    cert: str | None = None
    created_at: int | None = None
    id: str | None = None
    tags: list | None = None

    @classmethod
    def from_dict(cls, data):
        """Build a CA certificate from a document mapping."""
        return super().from_dict(data)

    def to_dict(self):
        """Return the document mapping for this CA certificate."""
        return super().to_dict()

    def sort_key(self):
        """Key used to order CA certificates in a written file."""
        if self.id is not None:
            return self.id
        return self.cert if self.cert is not None else ""


@dataclass
class FConsumer(_Record):
    """A consumer with its plugins and credentials."""

    _children: ClassVar[dict[str, type]] = {"plugins": FPlugin}

    created_at: int | None = None
    custom_id: str | None = None
    id: str | None = None
    tags: list | None = None
    username: str | None = None
    plugins: list = field(default_factory=list)
    keyauth_credentials: list = field(default_factory=list)
    hmacauth_credentials: list = field(default_factory=list)
    jwt_secrets: list = field(default_factory=list)
    basicauth_credentials: list = field(default_factory=list)
    oauth2_credentials: list = field(default_factory=list)
    acls: list = field(default_factory=list)

    @classmethod
    def from_dict(cls, data):
        """Build a consumer with its plugins and credentials."""
        return super().from_dict(data)

    def to_dict(self):
        """Return the document mapping for this consumer."""
        return super().to_dict()

    def sort_key(self):
        """Key used to order consumers in a written file."""
        if self.id is not None:
            return self.id
        return self.username if self.username is not None else ""


@dataclass
class Info(_Record):
    """Metadata of a configuration file."""

    select_tags: list = field(default_factory=list)

    @classmethod
    def from_dict(cls, data):
        """Build file metadata from a document mapping."""
        return super().from_dict(data)

    def to_dict(self):
        """Return the document mapping for the metadata."""
        return super().to_dict()


_CONTENT_LISTS: dict[str, type] = {
    "services": FService,
    "routes": FRoute,
    "consumers": FConsumer,
    "plugins": FPlugin,
    "upstreams": FUpstream,
    "certificates": FCertificate,
    "ca_certificates": FCACertificate,
}


@dataclass
class Content:
    """The whole serialised configuration."""

    format_version: str = ""
    info: Info | None = None
    workspace: str = ""
    services: list = field(default_factory=list)
    routes: list = field(default_factory=list)
    consumers: list = field(default_factory=list)
    plugins: list = field(default_factory=list)
    upstreams: list = field(default_factory=list)
    certificates: list = field(default_factory=list)
    ca_certificates: list = field(default_factory=list)

    @classmethod
    def from_dict(cls, data):
        """Build content from a decoded document mapping."""
        data = _as_mapping(data, "content")
        content = cls(
            format_version=data.get("_format_version") or "",
            workspace=data.get("_workspace") or "",
        )
        if data.get("_info") is not None:
            content.info = Info.from_dict(data["_info"])
        for key, kind in _CONTENT_LISTS.items():
            items = data.get(key) or []
            setattr(content, key, [kind.from_dict(item) for item in items])
        return content

    def to_dict(self):
        """Return the document mapping, omitting empty parts."""
        out: dict[str, Any] = {}
        if self.format_version:
            out["_format_version"] = self.format_version
        if self.info is not None:
            out["_info"] = self.info.to_dict()
        if self.workspace:
            out["_workspace"] = self.workspace
        for key in _CONTENT_LISTS:
            items = getattr(self, key)
            if items:
                out[key] = [item.to_dict() for item in items]
        return out

    def merge(self, other):
        """Merge ``other`` into this content: lists are appended, unset values filled."""
        if not self.format_version:
            self.format_version = other.format_version
        if not self.workspace:
            self.workspace = other.workspace
        if other.info is not None:
            if self.info is None:
                self.info = Info(select_tags=list(other.info.select_tags or []))
            else:
                self.info.select_tags = list(self.info.select_tags or []) + list(
                    other.info.select_tags or []
                )
        for key in _CONTENT_LISTS:
            getattr(self, key).extend(getattr(other, key))