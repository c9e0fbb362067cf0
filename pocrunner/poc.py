"""POC document model and YAML loading."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml


class PocError(Exception):
    """Raised when a POC document cannot be read, parsed or is incomplete."""


@dataclass
class Request:
    """HTTP request that a rule sends."""

    method: str = ""
    path: str = ""
    headers: dict[str, str] = field(default_factory=dict)
    body: str = ""
    cache: bool = False
    follow_redirects: bool = False


@dataclass
class Output:
    """Values a rule extracts from its response."""

    search: str = ""
    filen: str = ""


@dataclass
class Rule:
    """One request together with the expression judging its response."""

    request: Request = field(default_factory=Request)
    expression: str = ""
    output: Output = field(default_factory=Output)


@dataclass
class Fingerprint:
    """Fingerprint information of a fingerprinting POC."""

    id: str = ""
    name: str = ""
    version: str = ""
    cpe: str = ""


@dataclass
class Vulnerability:
    """Vulnerability information of a vulnerability POC."""

    id: str = ""
    level: str = ""
    match: str = ""


@dataclass
class Detail:
    """Descriptive metadata of a POC."""

    author: str = ""
    links: list[str] = field(default_factory=list)
    warning: str = ""
    description: str = ""
    fingerprint: Fingerprint = field(default_factory=Fingerprint)
    vulnerability: Vulnerability = field(default_factory=Vulnerability)


@dataclass
class POC:
    """A proof-of-concept check: named rules and an expression combining them."""

    name: str = ""
    manual: bool = False
    transport: str = ""
    set: dict[str, str] = field(default_factory=dict)
    rules: dict[str, Rule] = field(default_factory=dict)
    expression: str = ""
    detail: Detail = field(default_factory=Detail)


def _as_str(value: Any, where: str) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        raise PocError(f"{where}: expected a scalar, got {type(value).__name__}")
    return str(value)


def _as_bool(value: Any, where: str) -> bool:
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    raise PocError(f"{where}: expected a boolean, got {value!r}")


def _as_mapping(value: Any, where: str) -> dict:
    if value is None:
        return {}
    if isinstance(value, dict):
        return value
    raise PocError(f"{where}: expected a mapping, got {type(value).__name__}")


def _as_str_map(value: Any, where: str) -> dict[str, str]:
    return {
        _as_str(key, where): _as_str(item, f"{where}.{key}")
        for key, item in _as_mapping(value, where).items()
    }


def _as_str_list(value: Any, where: str) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise PocError(f"{where}: expected a list, got {type(value).__name__}")
    return [_as_str(item, where) for item in value]


def _request_from(data: Any, where: str) -> Request:
    mapping = _as_mapping(data, where)
    return Request(
        method=_as_str(mapping.get("method"), f"{where}.method"),
        path=_as_str(mapping.get("path"), f"{where}.path"),
        headers=_as_str_map(mapping.get("headers"), f"{where}.headers"),
        body=_as_str(mapping.get("body"), f"{where}.body"),
        cache=_as_bool(mapping.get("cache"), f"{where}.cache"),
        follow_redirects=_as_bool(
            mapping.get("follow_redirects"), f"{where}.follow_redirects"
        ),
    )


def _output_from(data: Any, where: str) -> Output:
    mapping = _as_mapping(data, where)
    return Output(
        search=_as_str(mapping.get("search"), f"{where}.search"),
        filen=_as_str(mapping.get("filen"), f"{where}.filen"),
    )


def _rule_from(data: Any, where: str) -> Rule:
    mapping = _as_mapping(data, where)
    return Rule(
        request=_request_from(mapping.get("request"), f"{where}.request"),
        expression=_as_str(mapping.get("expression"), f"{where}.expression"),
        output=_output_from(mapping.get("output"), f"{where}.output"),
    )


def _fingerprint_from(data: Any, where: str) -> Fingerprint:
    mapping = _as_mapping(data, where)
    return Fingerprint(
        id=_as_str(mapping.get("id"), f"{where}.id"),
        name=_as_str(mapping.get("name"), f"{where}.name"),
        version=_as_str(mapping.get("version"), f"{where}.version"),
        cpe=_as_str(mapping.get("cpe"), f"{where}.cpe"),
    )


def _vulnerability_from(data: Any, where: str) -> Vulnerability:
    mapping = _as_mapping(data, where)
    return Vulnerability(
        id=_as_str(mapping.get("id"), f"{where}.id"),
        level=_as_str(mapping.get("level"), f"{where}.level"),
        match=_as_str(mapping.get("match"), f"{where}.match"),
    )


def _detail_from(data: Any, where: str) -> Detail:
    mapping = _as_mapping(data, where)
    return Detail(
        author=_as_str(mapping.get("author"), f"{where}.author"),
        links=_as_str_list(mapping.get("links"), f"{where}.links"),
        warning=_as_str(mapping.get("warning"), f"{where}.warning"),
        description=_as_str(mapping.get("description"), f"{where}.description"),
        fingerprint=_fingerprint_from(mapping.get("fingerprint"), f"{where}.fingerprint"),
        vulnerability=_vulnerability_from(
            mapping.get("vulnerability"), f"{where}.vulnerability"
        ),
    )


def parse_poc(data: str | bytes) -> POC:
    """Parse a POC from YAML text, validate it and fill in defaults."""
    try:
        document = next(iter(yaml.safe_load_all(data)), None)
    except yaml.YAMLError as exc:
        raise PocError(f"failed to parse YAML: {exc}") from exc
    if document is None:
        raise PocError("failed to parse YAML: empty document")
    if not isinstance(document, dict):
        raise PocError("failed to parse YAML: top level is not a mapping")

    rules = {
        _as_str(name, "rules"): _rule_from(rule, f"rules.{name}")
        for name, rule in _as_mapping(document.get("rules"), "rules").items()
    }
    poc = POC(
        name=_as_str(document.get("name"), "name"),
        manual=_as_bool(document.get("manual"), "manual"),
        transport=_as_str(document.get("transport"), "transport"),
        set=_as_str_map(document.get("set"), "set"),
        rules=rules,
        expression=_as_str(document.get("expression"), "expression"),
        detail=_detail_from(document.get("detail"), "detail"),
    )

    if not poc.name:
        raise PocError("POC is missing required field: name")
    if not poc.transport:
        poc.transport = "http"
    if not poc.rules:
        raise PocError("POC is missing required field: rules")
    if not poc.expression:
        raise PocError("POC is missing required field: expression")
    return poc


def load_poc(path: str | Path) -> POC:
    """Read and parse the POC file at ``path``."""
    path = Path(path)
    if not path.exists():
        raise PocError(f"POC file does not exist: {path}")
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise PocError(f"cannot open POC file: {exc}") from exc
    return parse_poc(data)