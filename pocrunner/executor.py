"""Sending the requests of a POC and judging the responses."""

from __future__ import annotations

import requests

from .expressions import (
    ExpressionError,
    ResponseView,
    evaluate_expression,
    evaluate_top_level_expression,
)
from .poc import POC, Request

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
)
REQUEST_TIMEOUT = 10.0
MAX_REDIRECTS = 10
_BODY_PREVIEW = 500


class PocExecutionError(Exception):
    """Raised when a POC cannot be run to a verdict."""


def build_request(request: Request, target_url: str) -> requests.PreparedRequest:
    """Build the HTTP request described by ``request`` against ``target_url``."""
    url = target_url + request.path
    try:
        prepared = requests.Request(
            method=request.method or "GET",
            url=url,
            headers=dict(request.headers),
            data=request.body.encode("utf-8") if request.body else None,
        ).prepare()
    except (requests.RequestException, ValueError) as exc:
        raise PocExecutionError(f"invalid request for {url!r}: {exc}") from exc
    if "User-Agent" not in request.headers:
        prepared.headers["User-Agent"] = DEFAULT_USER_AGENT
    return prepared


def response_view(response: requests.Response) -> ResponseView:
    """Collect the parts of ``response`` that expressions can inspect."""
    return ResponseView(
        status=response.status_code,
        headers={name.lower(): value for name, value in response.headers.items()},
        body=response.content.decode("utf-8", errors="replace"),
        content_type=response.headers.get("Content-Type", ""),
    )


def _print_request(prepared: requests.PreparedRequest) -> None:
    print(f"Request method: {prepared.method}")
    print(f"Request URL: {prepared.url}")
    if prepared.headers:
        print("Request headers:")
        for name, value in prepared.headers.items():
            print(f"  {name}: {value}")
    body = prepared.body
    if body:
        text = body.decode("utf-8", errors="replace") if isinstance(body, bytes) else str(body)
        print(f"Request body: {text}")


def _print_response(response: requests.Response, view: ResponseView) -> None:
    print(f"Response status: {response.status_code} {response.reason or ''}".rstrip())
    if response.headers:
        print("Response headers:")
        for name, value in response.headers.items():
            print(f"  {name}: {value}")
    print(f"Response body length: {len(response.content)} bytes")
    if view.body:
        if len(view.body) > _BODY_PREVIEW:
            print(f"Response body preview: {view.body[:_BODY_PREVIEW]}...")
        else:
            print(f"Response body: {view.body}")


def execute_poc(poc: POC, target_url: str, debug: bool = False) -> bool:
    """Run every rule of ``poc`` against ``target_url`` and return the verdict."""
    rule_results: dict[str, bool] = {}
    if debug:
        print("=== running POC rules ===")

    with requests.Session() as session:
        session.max_redirects = MAX_REDIRECTS
        for name, rule in poc.rules.items():
            if debug:
                print(f"\n--- running rule {name} ---")

            try:
                prepared = build_request(rule.request, target_url)
            except PocExecutionError as exc:
                raise PocExecutionError(f"rule '{name}' failed to build request: {exc}") from exc

            if debug:
                _print_request(prepared)
                print("sending request...")

            try:
                response = session.send(
                    prepared,
                    timeout=REQUEST_TIMEOUT,
                    allow_redirects=rule.request.follow_redirects,
                )
            except requests.RequestException as exc:
                if debug:
                    print(f"request failed: {exc}")
                raise PocExecutionError(f"rule '{name}' request failed: {exc}") from exc

            view = response_view(response)
            if debug:
                _print_response(response, view)
                print(f"Evaluating expression: {rule.expression}")

            try:
                result = evaluate_expression(rule.expression, view)
            except ExpressionError as exc:
                if debug:
                    print(f"expression failed: {exc}")
                raise PocExecutionError(f"rule '{name}' expression failed: {exc}") from exc

            if debug:
                print(f"rule {name} result: {'true' if result else 'false'}")
            rule_results[name] = result

    if debug:
        print("\n=== evaluating top-level expression ===")
        print(f"Top-level expression: {poc.expression}")

    try:
        verdict = evaluate_top_level_expression(poc.expression, rule_results)
    except ExpressionError as exc:
        if debug:
            print(f"top-level expression failed: {exc}")
        raise PocExecutionError(f"top-level expression failed: {exc}") from exc

    if debug:
        print(f"Final result: {'true' if verdict else 'false'}")
        print("=== POC finished ===")
    return verdict