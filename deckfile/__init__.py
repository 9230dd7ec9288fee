"""Read, validate, merge and write declarative gateway configuration files in YAML or JSON."""

__version__ = "0.1.0"