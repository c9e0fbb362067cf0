import io
import sys

import pytest
import responses

from pocrunner.cli import execute_single_poc, main

TARGET = "http://target.example.com"

TEMPLATE = """name: {name}
rules:
  r0:
    request:
      method: GET
      path: /
    expression: response.status == 200 && response.body.bcontains(b"admin")
expression: r0()
"""


def _write(path, name):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(TEMPLATE.format(name=name))
    return path


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    pocs = tmp_path / "xray" / "pocs"
    _write(pocs / "a-thinkphp-rce.yml", "poc-yaml-thinkphp-rce")
    _write(pocs / "b-thinkphp-sqli.yml", "poc-yaml-thinkphp-sqli")
    _write(pocs / "c-struts.yml", "poc-yaml-struts")
    return tmp_path


def test_execute_single_poc_success(tmp_path, capsys):
    path = _write(tmp_path / "p.yml", "poc-yaml-demo")
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, TARGET + "/", body="admin panel", status=200)
        assert execute_single_poc(str(path), TARGET, False) is True
    out = capsys.readouterr().out
    assert "poc-yaml-demo" in out
    assert TARGET in out


def test_execute_single_poc_not_vulnerable(tmp_path):
    path = _write(tmp_path / "p.yml", "poc-yaml-demo")
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, TARGET + "/", status=404)
        assert execute_single_poc(str(path), TARGET, False) is False


def test_execute_single_poc_missing_file(tmp_path, capsys):
    missing = str(tmp_path / "missing.yml")
    assert execute_single_poc(missing, TARGET, False) is None
    assert missing in capsys.readouterr().err


def test_execute_single_poc_request_failure(tmp_path, capsys):
    path = _write(tmp_path / "p.yml", "poc-yaml-demo")
    with responses.RequestsMock():
        assert execute_single_poc(str(path), TARGET, False) is None
    assert "poc-yaml-demo" in capsys.readouterr().err


@pytest.mark.parametrize("argv", [[], ["bogus"]])
def test_main_without_valid_command_prints_usage(argv, capsys):
    assert main(argv) == 1
    out = capsys.readouterr().out
    assert "run" in out and "search" in out and "list" in out


def test_main_run_requires_target(tmp_path):
    path = _write(tmp_path / "p.yml", "poc-yaml-demo")
    assert main(["run", "--poc", str(path)]) == 1


def test_main_run_executes(tmp_path, capsys):
    path = _write(tmp_path / "p.yml", "poc-yaml-demo")
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, TARGET + "/", body="admin", status=200)
        assert main(["run", "-poc", str(path), "-target", TARGET]) == 0
        assert len(rsps.calls) == 1
    assert "poc-yaml-demo" in capsys.readouterr().out


def test_main_search_all_runs_every_match(workdir, capsys):
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, TARGET + "/", body="admin", status=200)
        assert main(["search", "--keyword", "thinkphp", "--target", TARGET, "--all"]) == 0
        assert len(rsps.calls) == 2
    out = capsys.readouterr().out
    assert "poc-yaml-thinkphp-rce" in out
    assert "poc-yaml-thinkphp-sqli" in out
    assert "poc-yaml-struts" not in out


def test_main_search_without_match(workdir, capsys):
    with responses.RequestsMock() as rsps:
        assert main(["search", "--keyword", "nomatch", "--target", TARGET, "--all"]) == 0
        assert len(rsps.calls) == 0


def test_main_search_interactive(workdir, monkeypatch, capsys):
    monkeypatch.setattr(sys, "stdin", io.StringIO("2\n"))
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, TARGET + "/", body="admin", status=200)
        assert main(["search", "--keyword", "thinkphp", "--target", TARGET]) == 0
        assert len(rsps.calls) == 1
    assert "POC name: poc-yaml-thinkphp-sqli" in capsys.readouterr().out


def test_main_search_bad_selection(workdir, monkeypatch):
    monkeypatch.setattr(sys, "stdin", io.StringIO("9\n"))
    assert main(["search", "--keyword", "thinkphp", "--target", TARGET]) == 1


def test_main_search_requires_keyword():
    assert main(["search", "--target", TARGET]) == 1


def test_main_search_missing_directory(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert main(["search", "--keyword", "x", "--target", TARGET]) == 1


def test_main_list(workdir, capsys):
    assert main(["list"]) == 0
    out = capsys.readouterr().out
    for name in ("a-thinkphp-rce.yml", "b-thinkphp-sqli.yml", "c-struts.yml"):
        assert name in out


def test_main_list_missing_directory(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert main(["list"]) == 1