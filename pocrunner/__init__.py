"""Run YAML-defined HTTP proof-of-concept checks against a target and search POC files."""

__version__ = "0.1.0"
__all__ = ["__version__"]