# deckfile

`deckfile` reads, validates, merges and writes declarative configuration
files for an API gateway. A configuration file describes services, routes,
consumers and their credentials, plugins, upstreams and their targets,
certificates and CA certificates. It can be written in YAML or JSON.

## Modules

- **`deckfile.reader`** reads configuration from disk.
  `get_content_from_file(filename)` accepts three kinds of input:
  - a single file;
  - a directory;
  - `-`, which means standard input.

  A directory is walked recursively and in lexical order. A file is read if
  its path contains `yaml`, `yml` or `json`, in any letter case (see
  `config_files_in_dir`). Each document is validated and decoded with
  `read_content`, and all of them are merged into one `Content`. An empty
  filename, a missing path, an unreadable file or invalid content raises
  `ContentError`.
- **`deckfile.validate`** checks documents. `validate(text)` parses YAML or
  JSON text and checks it against the content schema. It raises
  `ValidationError`, whose `errors` attribute lists every problem found.
  `ensure_json(mapping)` turns the keys of nested mappings into strings.
- **`deckfile.schema`** and **`deckfile.schema_definitions`** hold the
  schema. `content_schema()` returns the draft-04 JSON Schema for a whole
  document. `definitions()` returns the schema of each entity.
- **`deckfile.types`** models the entities of a file:
  - `Content` and `Info`;
  - `FService`, `FRoute`, `FPlugin` and `FConsumer`;
  - `FUpstream` and `FTarget`;
  - `FCertificate` and `FCACertificate`.

  Each entity converts to and from plain dictionaries with `from_dict` and
  `to_dict`. `to_dict` leaves out unset values and empty lists. Every entity
  except `Content` and `Info` has a `sort_key()`. A plugin names its service,
  route and consumer with a plain string. A certificate lists its SNIs as
  `{"name": ...}` objects. `Content.merge(other)` appends the lists from
  `other` and fills in any values that are still unset. `Format` has two
  members, `YAML` and `JSON`.
- **`deckfile.writer`** writes configuration out.
  - `render(content, file_format)` returns `Content` as YAML or JSON text.
    The keys of plugin configurations and route headers are sorted. Any
    other format raises `ValueError`.
  - `write_file(content, filename, file_format)` writes that text to a file
    with mode `0600`, or to standard output when the filename is `-`.
  - `add_ext_to_filename` gives a filename without an extension one that
    matches the format, so `kong` becomes `kong.yaml`.
  - `zero_out_timestamps` clears the creation and update times of an entity.
  - `zero_out_id` clears the ID of an entity.

## Example

```python
from deckfile.reader import get_content_from_file, ContentError
from deckfile.types import Format
from deckfile.writer import render

try:
    content = get_content_from_file("config/")
except ContentError as err:
    raise SystemExit(f"invalid configuration: {err}")

for service in content.services:
    print(service.sort_key())

print(render(content, Format.YAML))
```

Combining two contents:

```python
from deckfile.types import Content

base = Content.from_dict({"services": [{"name": "svc1", "host": "1.example.com"}]})
extra = Content.from_dict({"consumers": [{"username": "foo"}]})
base.merge(extra)
print(base.to_dict())
```

Validating a document on its own:

```python
from deckfile.validate import validate, ValidationError

text = "services:\n- host: test.com\n  name: test service\n"
try:
    validate(text)
except ValidationError as err:
    print(err.errors)
```

## What it does not do

`deckfile` works only with configuration files and `Content` objects. It
does not:

- provide a command-line tool;
- connect to a gateway, or read a gateway's live state and export it;
- assign or match entity IDs, fill in default values, or apply or reset
  configuration;
- print coloured output.