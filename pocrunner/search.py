"""Finding, describing and listing POC files on disk."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from typing import Iterator

from .poc import PocError, load_poc

DEFAULT_POC_DIR = "xray/pocs"
_CHOICE = re.compile(r"[+-]?[0-9]+")


@dataclass
class PocFileInfo:
    """A POC file found on disk."""

    name: str
    path: str
    description: str = ""


def _require_dir(poc_dir: str) -> None:
    if not os.path.exists(poc_dir):
        raise FileNotFoundError(f"POC directory does not exist: {poc_dir}")


def iter_poc_files(poc_dir: str = DEFAULT_POC_DIR) -> Iterator[str]:
    """Yield the paths of ``.yml`` files below ``poc_dir`` in lexical walk order."""
    with os.scandir(poc_dir) as entries:
        ordered = sorted(entries, key=lambda entry: entry.name)
    for entry in ordered:
        if entry.is_dir(follow_symlinks=False):
            yield from iter_poc_files(entry.path)
        elif entry.name.lower().endswith(".yml"):
            yield entry.path


def _content_contains(path: str, needle: str) -> bool:
    try:
        with open(path, "rb") as handle:
            content = handle.read()
    except OSError:
        return False
    return needle in content.decode("utf-8", errors="replace").lower()


def extract_poc_description(path: str) -> str:
    """Describe the POC at ``path`` by its name, description and author."""
    poc = load_poc(path)
    description = poc.name
    if poc.detail.description:
        if description:
            description += " - "
        description += poc.detail.description
    if poc.detail.author and description:
        description += f" (author: {poc.detail.author})"
    return description or "no description"


def search_pocs(keyword: str, poc_dir: str = DEFAULT_POC_DIR) -> list[PocFileInfo]:
    """Return the POC files whose name or content contains ``keyword``."""
    _require_dir(poc_dir)
    needle = keyword.lower()
    results = []
    for path in iter_poc_files(poc_dir):
        name = os.path.basename(path)
        if needle not in name.lower() and not _content_contains(path, needle):
            continue
        try:
            description = extract_poc_description(path)
        except PocError:
            description = ""
        results.append(PocFileInfo(name=name, path=path, description=description))
    return results


def prompt_user_selection(results: list[PocFileInfo]) -> PocFileInfo:
    """Show ``results`` and ask on standard input which one to run."""
    print(f"\nFound {len(results)} matching POCs:\n")
    for number, info in enumerate(results, start=1):
        print(f"[{number}] {info.name}")
        if info.description:
            print(f"    {info.description}")
        print(f"    path: {info.path}\n")

    try:
        line = input("Select a POC to run (enter number): ")
    except EOFError as exc:
        raise ValueError("failed to read user input") from exc

    text = line.strip()
    if not _CHOICE.fullmatch(text):
        raise ValueError(f"invalid selection: {text}")
    choice = int(text)
    if not 1 <= choice <= len(results):
        raise ValueError(f"selection out of range: {choice}")
    return results[choice - 1]


def list_all_pocs(poc_dir: str = DEFAULT_POC_DIR) -> int:
    """Print every POC file below ``poc_dir`` and return how many there are."""
    _require_dir(poc_dir)
    print("All available POC files:")
    count = 0
    for count, path in enumerate(iter_poc_files(poc_dir), start=1):
        print(f"[{count}] {os.path.basename(path)}")
        try:
            print(f"    {extract_poc_description(path)}")
        except PocError:
            pass
        print(f"    path: {path}\n")
    print(f"Found {count} POC files in total.")
    return count