"""Command line entry point: run, search and list POCs."""

from __future__ import annotations

import argparse
import sys
import time

from .executor import PocExecutionError, execute_poc
from .poc import PocError, load_poc
from .search import list_all_pocs, prompt_user_selection, search_pocs

USAGE = """usage: pocrunner <command> [arguments]

Commands:
  run      run a single POC file
  search   search POCs by keyword and run them
  list     list all available POCs

Use 'pocrunner <command> --help' for more information about a command."""

RUN_USAGE = "usage: pocrunner run --poc <poc_file> --target <url> [--debug]"
SEARCH_USAGE = "usage: pocrunner search --keyword <keyword> --target <url> [--all] [--debug]"


def _log(message: str) -> None:
    print(f"{time.strftime('%Y/%m/%d %H:%M:%S')} {message}", file=sys.stderr)


def execute_single_poc(poc_file: str, target_url: str, debug: bool = False) -> bool | None:
    """Load and run one POC file; return its verdict, or None if it could not run."""
    try:
        poc = load_poc(poc_file)
    except PocError as exc:
        _log(f"failed to load POC file {poc_file}: {exc}")
        return None

    print(f"POC name: {poc.name}")
    print(f"Target URL: {target_url}")
    if debug:
        print("debug mode enabled")

    try:
        success = execute_poc(poc, target_url, debug)
    except PocExecutionError as exc:
        _log(f"POC {poc.name} failed: {exc}")
        return None

    if success:
        print(f"[SUCCESS] POC {poc.name} matched, the target may be vulnerable!")
    else:
        print(f"[FAILED] POC {poc.name} finished, no vulnerability found.")
    return success


def _parser(command: str) -> argparse.ArgumentParser:
    return argparse.ArgumentParser(prog=f"pocrunner {command}", allow_abbrev=False)


def _run(args: list[str]) -> int:
    parser = _parser("run")
    parser.add_argument("-poc", "--poc", default="", help="path of the POC YAML file (required)")
    parser.add_argument("-target", "--target", default="", help="target URL (required)")
    parser.add_argument("-debug", "--debug", action="store_true", help="enable debug output")
    options = parser.parse_args(args)
    if not options.poc or not options.target:
        print(RUN_USAGE)
        return 1
    execute_single_poc(options.poc, options.target, options.debug)
    return 0


def _search(args: list[str]) -> int:
    parser = _parser("search")
    parser.add_argument("-keyword", "--keyword", default="", help="keyword to search for (required)")
    parser.add_argument("-target", "--target", default="", help="target URL (required)")
    parser.add_argument("-all", "--all", action="store_true", help="run every POC found")
    parser.add_argument("-debug", "--debug", action="store_true", help="enable debug output")
    options = parser.parse_args(args)
    if not options.keyword or not options.target:
        print(SEARCH_USAGE)
        return 1

    try:
        results = search_pocs(options.keyword)
    except OSError as exc:
        _log(f"POC search failed: {exc}")
        return 1

    if not results:
        print("No matching POC found.")
        return 0

    if options.all:
        print(f"Found {len(results)} matching POCs, running all of them...\n")
        for number, info in enumerate(results, start=1):
            print(f"--- ({number}/{len(results)}) running: {info.name} ---")
            execute_single_poc(info.path, options.target, options.debug)
            print(f"--- {info.name} finished ---\n")
        return 0

    try:
        selected = prompt_user_selection(results)
    except ValueError as exc:
        _log(f"POC selection failed: {exc}")
        return 1
    execute_single_poc(selected.path, options.target, options.debug)
    return 0


def _list(args: list[str]) -> int:
    _parser("list").parse_args(args)
    try:
        list_all_pocs()
    except OSError as exc:
        _log(f"listing POCs failed: {exc}")
        return 1
    return 0


_COMMANDS = {"run": _run, "search": _search, "list": _list}


def main(argv: list[str] | None = None) -> int:
    """Dispatch the sub-command in ``argv`` and return the exit status."""
    args = list(sys.argv[1:] if argv is None else argv)
    if not args or args[0] not in _COMMANDS:
        print(USAGE)
        return 1
    return _COMMANDS[args[0]](args[1:])


if __name__ == "__main__":
    sys.exit(main())