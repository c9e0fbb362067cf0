# pocrunner

A command-line tool that runs HTTP proof-of-concept (POC) checks written as
YAML files against a target URL. It can also search and list a local
collection of POC files.

## Installation

```
pip install .
```

To run the tests as well:

```
pip install ".[test]"
pytest
```

## Usage

The tool has three subcommands: `run`, `search` and `list`. Options may be
written with one or two dashes (`-poc` or `--poc`). Running `pocrunner`
without a known subcommand prints a usage summary and exits with status 1.

### Run a single POC

```
pocrunner run --poc path/to/check.yml --target http://localhost:8080 [--debug]
```

Each rule's request is sent to the target URL with the rule's `path`
appended, and the rule's expression is evaluated against the response. The
POC's top-level expression (for example `r0() && r1()`) then combines the
rule results. The tool prints `[SUCCESS]` when the final verdict is true and
`[FAILED]` when it is false. If the file cannot be loaded, a request fails or
an expression cannot be evaluated, an error is logged to standard error.

With `--debug` every request, every response (the body is cut to 500
characters) and every evaluation step is printed.

Requests time out after 10 seconds. Redirects are followed, up to 10 of
them, only when the rule sets `follow_redirects: true`. A browser-like
`User-Agent` header is sent unless the rule sets its own.

### Search and run POCs

```
pocrunner search --keyword tomcat --target http://localhost:8080 [--all] [--debug]
```

This walks the `xray/pocs` directory under the current working directory
for `.yml` files. A file matches when its name or its content contains the
keyword; case does not matter. Without `--all` the matches are shown with
numbers and you type the number of the one to run. With `--all` every match
runs in turn.

### List POCs

```
pocrunner list
```

This prints every `.yml` file under `xray/pocs`, each with a short
description built from its `name`, its `detail.description` and its
`detail.author`, and then the total count.

## POC file format

```yaml
name: poc-example-login-page
transport: http
rules:
  r0:
    request:
      method: GET
      path: /login
      follow_redirects: false
    expression: response.status == 200 && response.body.bcontains(b"Login")
expression: r0()
detail:
  author: someone
  description: Detects an example login page
```

The fields `name`, `rules` and `expression` are required. `transport`
defaults to `http`, and an empty request `method` is sent as `GET`.

### Supported rule expressions

- `true` and `false`
- `response.status == N` and `response.status != N`
- `response.headers["name"] == "value"` (header names are matched without regard to case)
- `"name" in response.headers`
- `response.content_type.contains("text")` (case-insensitive)
- `response.body.bcontains(b"text")`
- `"regex".matches(response.body)`, `"regex".bmatches(response.body)`
- `response.body.matches("regex")`, `response.body.bmatches("regex")`
- expressions joined with `&&` or `||`, without parentheses

Regular expressions match anywhere in the body. `reverse.wait(...)` and
`response.body.bcontains(bytes(...))` always evaluate to false. Any other
expression is an error.

The top-level expression may use `rN()` calls for each rule, the literals
`true` and `false`, and `&&` and `||`.

## What it does not do

- Only HTTP checks are run; `transport` is read but not acted on.
- Reverse-connection checks (`reverse.wait`) are not carried out.
- The `set` variables and each rule's `output` are parsed into the model but
  are not substituted into requests or extracted from responses.
- The expression language is the fixed set of forms listed above, not a
  general expression evaluator.

## Library use

```python
from pocrunner.poc import load_poc
from pocrunner.executor import execute_poc
from pocrunner.search import search_pocs

poc = load_poc("check.yml")
vulnerable = execute_poc(poc, "http://localhost:8080", False)

for info in search_pocs("tomcat", "xray/pocs"):
    print(info.name, info.path, info.description)
```

`load_poc` and `parse_poc` raise `PocError` for missing files, invalid YAML
or missing required fields; `execute_poc` raises `PocExecutionError` when a
rule cannot be run to a verdict. The expression evaluators live in
`pocrunner.expressions` (`evaluate_expression`, `evaluate_top_level_expression`,
`evaluate_boolean_expression`) and raise `ExpressionError`.