"""Reading configuration files and directories into a single Content."""

from __future__ import annotations

import io
import os
import re
import stat
import sys
from collections.abc import Iterator

import yaml

from deckfile.types import Content
from deckfile.validate import ValidationError, validate

_CONFIG_FILE = re.compile(r"[Yy]([Aa])?[Mm][Ll]|[Jj][Ss][Oo][Nn]")
_TIMESTAMP_TAG = "tag:yaml.org,2002:timestamp"


class ContentError(ValueError):
    """A configuration file could not be found, read, validated or merged."""


class _ContentLoader(yaml.SafeLoader):
    """A safe loader that keeps timestamps as plain strings."""


_ContentLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != _TIMESTAMP_TAG]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


def get_content_from_file(filename):
    """Read ``filename`` into a Content.

    ``-`` reads standard input; a directory is traversed and every YAML or
    JSON file in it is read and merged into one Content.
    """
    if not filename:
        raise ContentError("filename cannot be empty")
    return get_content(filename)


def get_content(file_or_dir):
    """Read and merge the content of a file, a directory tree or stdin."""
    result = Content()
    for reader in get_readers(file_or_dir):
        try:
            content = read_content(reader.read())
        except (ContentError, OSError) as exc:
            raise ContentError(f"reading file: {exc}") from exc
        result.merge(content)
    return result


def get_readers(file_or_dir):
    """Return readable streams for the configuration files behind ``file_or_dir``.

    ``-`` yields standard input itself; a directory yields one stream per
    matching file in it, in lexical order.
    """
    if file_or_dir == "-":
        return [sys.stdin]
    try:
        info = os.stat(file_or_dir)
    except OSError as exc:
        raise ContentError(f"reading state file: {exc}") from exc

    if stat.S_ISDIR(info.st_mode):
        try:
            files = config_files_in_dir(file_or_dir)
        except ContentError as exc:
            raise ContentError(f"getting files from directory: {exc}") from exc
    else:
        files = [file_or_dir]

    readers = []
    for path in files:
        try:
            with open(path, "rb") as handle:
                readers.append(io.BytesIO(handle.read()))
        except OSError as exc:
            raise ContentError(f"opening file: {exc}") from exc
    return readers


def read_content(text):
    """Validate YAML or JSON text (str or bytes) and decode it into a Content."""
    try:
        validate(text)
    except ValidationError as exc:
        raise ContentError(f"validating file content: {exc}") from exc
    try:
        document = yaml.load(text, Loader=_ContentLoader)
    except yaml.YAMLError as exc:
        raise ContentError(str(exc)) from exc
    try:
        return Content.from_dict(document or {})
    except (TypeError, KeyError, ValueError) as exc:
        raise ContentError(str(exc)) from exc


def _walk(path: str) -> Iterator[str]:
    info = os.lstat(path)
    if not stat.S_ISDIR(info.st_mode):
        yield path
        return
    for name in sorted(os.listdir(path)):
        yield from _walk(os.path.join(path, name))


def config_files_in_dir(directory):
    """Return every file under ``directory`` whose path names YAML or JSON.

    Files are listed in lexical order of the traversal.
    """
    try:
        return [path for path in _walk(directory) if _CONFIG_FILE.search(path)]
    except OSError as exc:
        raise ContentError(f"reading state directory: {exc}") from exc