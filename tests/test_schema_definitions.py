import jsonschema
import pytest

from deckfile.schema_definitions import definitions


def _validator(name):
    schema = {"$ref": f"#/definitions/{name}", "definitions": definitions()}
    return jsonschema.Draft4Validator(schema)


def _refs(node):
    if isinstance(node, dict):
        for key, value in node.items():
            if key == "$ref":
                yield value
            else:
                yield from _refs(value)
    elif isinstance(node, list):
        for item in node:
            yield from _refs(item)


def test_schema_is_valid_draft4():
    schema = {"type": "object", "definitions": definitions()}
    jsonschema.Draft4Validator.check_schema(schema)
    assert "FService" in schema["definitions"]


def test_every_reference_resolves():
    defs = definitions()
    refs = set(_refs(defs))
    assert refs
    for ref in refs:
        assert ref.startswith("#/definitions/")
        assert ref[len("#/definitions/"):] in defs


def test_calls_return_independent_copies():
    first = definitions()
    first["FPlugin"]["required"].append("id")
    assert definitions()["FPlugin"]["required"] == ["name"]


@pytest.mark.parametrize(
    "name, required",
    [
        ("Upstream", ["name"]),
        ("FTarget", ["target"]),
        ("FCACertificate", ["cert"]),
        ("FPlugin", ["name"]),
        ("FCertificate", ["id", "cert", "key"]),
        ("ACLGroup", ["group"]),
        ("BasicAuth", ["username", "password"]),
        ("HMACAuth", ["username", "secret"]),
        ("JWTAuth", ["algorithm", "key", "secret"]),
        ("KeyAuth", ["key"]),
        ("Oauth2Credential", ["name", "client_id", "redirect_uris", "client_secret"]),
    ],
)
def test_required_fields(name, required):
    assert definitions()[name]["required"] == required


@pytest.mark.parametrize(
    "name, alternatives",
    [
        ("Service", [{"required": ["id"]}, {"required": ["name"]}]),
        ("Route", [{"required": ["id"]}, {"required": ["name"]}]),
        ("Consumer", [{"required": ["id"]}, {"required": ["username"]}]),
    ],
)
def test_any_of_name_or_id(name, alternatives):
    assert definitions()[name]["anyOf"] == alternatives


def test_foreign_references_are_strings():
    defs = definitions()
    for ref in ("consumer", "service", "route"):
        assert defs["FPlugin"]["properties"][ref] == {"type": "string"}
    assert defs["FService"]["properties"]["client_certificate"] == {"type": "string"}
    assert defs["Service"]["properties"]["client_certificate"] == {
        "$ref": "#/definitions/Certificate"
    }


def test_plugin_accepts_string_references():
    validator = _validator("FPlugin")
    doc = {"name": "rate-limiting", "service": "foo", "route": "bar", "consumer": "baz"}
    assert list(validator.iter_errors(doc)) == []


def test_plugin_without_name_is_rejected():
    assert not _validator("FPlugin").is_valid({"config": {"minute": 10}})


def test_plugin_config_allows_any_keys():
    validator = _validator("FPlugin")
    assert validator.is_valid({"name": "x", "config": {"anything": [1, 2]}})
    assert not validator.is_valid({"name": "x", "unknown": 1})


def test_certificate_snis_are_objects():
    validator = _validator("FCertificate")
    base = {"id": "cert-id", "cert": "cert", "key": "key"}
    assert validator.is_valid(dict(base, snis=[{"name": "0.example.com"}]))
    assert not validator.is_valid(dict(base, snis=["0.example.com"]))


def test_service_nested_routes_and_plugins():
    validator = _validator("FService")
    doc = {
        "name": "svc2",
        "host": "2.example.com",
        "routes": [{"name": "r2", "paths": ["/r2"], "plugins": [{"name": "p"}]}],
        "plugins": [{"name": "prometheus"}],
    }
    assert validator.is_valid(doc)
    doc["routes"][0]["plugins"] = [{"enabled": True}]
    assert not validator.is_valid(doc)


def test_route_headers_must_be_string_lists():
    validator = _validator("FRoute")
    assert validator.is_valid({"headers": {"x-a": ["1", "2"]}})
    assert not validator.is_valid({"headers": {"x-a": "1"}})


def test_consumer_credentials_checked():
    validator = _validator("FConsumer")
    assert validator.is_valid(
        {"username": "foo", "keyauth_credentials": [{"key": "foo-key"}]}
    )
    assert not validator.is_valid(
        {"username": "foo", "basicauth_credentials": [{"username": "basic-username"}]}
    )


def test_upstream_healthchecks_nested():
    validator = _validator("FUpstream")
    doc = {
        "name": "foo",
        "healthchecks": {"active": {"healthy": {"http_statuses": [200, 302]}}},
        "targets": [{"target": "bar", "weight": 100}],
    }
    assert validator.is_valid(doc)
    doc["targets"] = [{"weight": 100}]
    assert not validator.is_valid(doc)


def test_every_definition_rejects_unknown_keys():
    for name, schema in definitions().items():
        assert schema["additionalProperties"] is False, name
        assert schema["type"] == "object", name