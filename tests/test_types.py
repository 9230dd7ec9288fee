import json

import pytest
import yaml

from deckfile.types import (
    Content,
    FCACertificate,
    FCertificate,
    FConsumer,
    Format,
    FPlugin,
    FRoute,
    FService,
    FTarget,
    FUpstream,
    Info,
)

JSON_STRING = """{
  "name": "rate-limiting",
  "config": {
    "minute": 10
  },
  "service": "foo",
  "route": "bar",
  "consumer": "baz",
  "enabled": true,
  "run_on": "first",
  "protocols": [
    "http"
  ]
}"""

YAML_STRING = """
name: rate-limiting
config:
  minute: 10
service: foo
consumer: baz
route: bar
enabled: true
run_on: first
protocols:
- http
"""


@pytest.mark.parametrize(
    "data",
    [yaml.safe_load(YAML_STRING), json.loads(JSON_STRING)],
    ids=["yaml", "json"],
)
def test_plugin_from_document(data):
    plugin = FPlugin.from_dict(data)
    assert plugin.name == "rate-limiting"
    assert plugin.config == {"minute": 10}
    assert plugin.service == "foo"
    assert plugin.consumer == "baz"
    assert plugin.route == "bar"
    assert plugin.enabled is True
    assert plugin.run_on == "first"
    assert plugin.protocols == ["http"]
    assert plugin.id is None


def test_plugin_empty_references_are_dropped():
    plugin = FPlugin.from_dict({"name": "p", "service": "", "consumer": ""})
    assert plugin.service is None
    assert plugin.consumer is None
    assert plugin.to_dict() == {"name": "p"}


def test_plugin_to_dict_key_order():
    plugin = FPlugin(name="p", id="i", config={"a": 1}, route="r", tags=["t"])
    assert list(plugin.to_dict()) == ["id", "name", "config", "route", "tags"]


def test_plugin_sort_key():
    assert FPlugin(id="abc", name="x").sort_key() == "abc"
    plugin = FPlugin(name="acl", consumer="c", route="r", service="s")
    assert plugin.sort_key() == "aclcrs"


def test_certificate_to_dict():
    certificate = FCertificate(
        key="key",
        cert="cert",
        id="cert-id",
        snis=["0.example.com", "1.example.com"],
        tags=["tag1", "tag2"],
    )
    assert certificate.to_dict() == {
        "id": "cert-id",
        "cert": "cert",
        "key": "key",
        "snis": [{"name": "0.example.com"}, {"name": "1.example.com"}],
        "tags": ["tag1", "tag2"],
    }


def test_certificate_from_dict():
    certificate = FCertificate.from_dict(
        {
            "key": "key",
            "cert": "cert",
            "id": "cert-id",
            "snis": [{"name": "0.example.com"}, {"name": "1.example.com"}],
            "tags": ["tag1", "tag2"],
        }
    )
    assert certificate == FCertificate(
        key="key",
        cert="cert",
        id="cert-id",
        snis=["0.example.com", "1.example.com"],
        tags=["tag1", "tag2"],
    )


def test_service_client_certificate_round_trip():
    doc = {"name": "svc", "client_certificate": "cert-id", "host": "example.com"}
    service = FService.from_dict(doc)
    assert service.client_certificate == "cert-id"
    assert service.to_dict() == doc
    assert FService.from_dict({"client_certificate": ""}).client_certificate is None


def test_service_with_routes_and_plugins():
    service = FService.from_dict(
        {
            "name": "svc",
            "routes": [{"name": "r1", "paths": ["/r1"], "plugins": [{"name": "p"}]}],
            "plugins": [{"name": "q"}],
        }
    )
    assert service.routes[0].name == "r1"
    assert service.routes[0].plugins[0].name == "p"
    assert service.plugins[0].name == "q"
    assert list(service.to_dict()) == ["name", "routes", "plugins"]


def test_sort_keys_fall_back_to_names():
    assert FService(name="s").sort_key() == "s"
    assert FRoute(name="r").sort_key() == "r"
    assert FUpstream(name="u").sort_key() == "u"
    assert FTarget(target="t:80").sort_key() == "t:80"
    assert FCertificate(cert="c").sort_key() == "c"
    assert FCACertificate(cert="ca").sort_key() == "ca"
    assert FConsumer(username="bob").sort_key() == "bob"
    assert FConsumer().sort_key() == ""
    assert FRoute(id="1", name="r").sort_key() == "1"


def test_upstream_targets_round_trip():
    doc = {"name": "up", "slots": 42, "targets": [{"target": "a:80", "weight": 10}]}
    upstream = FUpstream.from_dict(doc)
    assert upstream.targets == [FTarget(target="a:80", weight=10)]
    assert upstream.to_dict() == doc


def test_consumer_credentials_round_trip():
    doc = {
        "username": "foo",
        "keyauth_credentials": [{"key": "placeholder"}],
        "acls": [{"group": "g"}],
    }
    consumer = FConsumer.from_dict(doc)
    assert consumer.acls == [{"group": "g"}]
    assert consumer.to_dict() == doc


def test_content_round_trip_and_order():
    doc = {
        "_format_version": "1.1",
        "_info": {"select_tags": ["tag1"]},
        "_workspace": "foo",
        "services": [{"host": "example.com", "name": "my-service"}],
        "plugins": [{"name": "prometheus"}],
    }
    content = Content.from_dict(doc)
    assert content.info == Info(select_tags=["tag1"])
    assert content.to_dict() == doc
    assert list(content.to_dict()) == list(doc)


def test_empty_content_is_empty_dict():
    assert Content.from_dict(None).to_dict() == {}
    assert Content().to_dict() == {}


def test_content_from_non_mapping_raises():
    with pytest.raises(TypeError):
        Content.from_dict(["not", "a", "mapping"])


def test_content_merge():
    first = Content.from_dict(
        {"services": [{"name": "svc2"}], "consumers": [{"username": "foo"}]}
    )
    second = Content.from_dict(
        {
            "_format_version": "1.1",
            "_info": {"select_tags": ["tag1"]},
            "services": [{"name": "svc1"}],
            "consumers": [{"username": "bar"}],
        }
    )
    first.merge(second)
    assert [s.name for s in first.services] == ["svc2", "svc1"]
    assert [c.username for c in first.consumers] == ["foo", "bar"]
    assert first.format_version == "1.1"
    assert first.info == Info(select_tags=["tag1"])


def test_merge_keeps_existing_values():
    first = Content(format_version="1.0", workspace="a")
    first.merge(Content(format_version="1.1", workspace="b"))
    assert (first.format_version, first.workspace) == ("1.0", "a")


def test_format_values():
    assert Format("JSON") is Format.JSON
    assert Format.YAML.value.lower() == "yaml"
    with pytest.raises(ValueError):
        Format("XML")