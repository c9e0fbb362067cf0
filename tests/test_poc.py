import pytest

from pocrunner.poc import POC, PocError, Rule, load_poc, parse_poc

SAMPLE = """\
name: poc-yaml-sample-login
manual: true
transport: http
set:
  rand: randomInt(1000, 9999)
rules:
  r0:
    request:
      method: POST
      path: /login.gch
      headers:
        Content-Type: application/x-www-form-urlencoded
      body: user=admin
      follow_redirects: false
    expression: response.status == 302
  r1:
    request:
      method: GET
      path: /menu.gch
      cache: true
      follow_redirects: true
    expression: response.body.bcontains(b"menu")
    output:
      search: '"(?P<version>[0-9.]+)".bsubmatch(response.body)'
expression: r0() && r1()
detail:
  author: someone
  links:
    - http://example.com/advisory
  description: sample description
  fingerprint:
    version: '{{version}}'
  vulnerability:
    level: high
"""


def test_parse_full_document():
    poc = parse_poc(SAMPLE)
    assert poc.name == "poc-yaml-sample-login"
    assert poc.manual
    assert poc.transport == "http"
    assert poc.set == {"rand": "randomInt(1000, 9999)"}
    assert list(poc.rules) == ["r0", "r1"]
    assert poc.expression == "r0() && r1()"


def test_parse_rule_requests():
    poc = parse_poc(SAMPLE)
    r0 = poc.rules["r0"]
    assert r0.request.method == "POST"
    assert r0.request.path == "/login.gch"
    assert r0.request.headers == {"Content-Type": "application/x-www-form-urlencoded"}
    assert r0.request.body == "user=admin"
    assert not r0.request.follow_redirects
    assert r0.expression == "response.status == 302"

    r1 = poc.rules["r1"]
    assert r1.request.cache
    assert r1.request.follow_redirects
    assert r1.request.headers == {}
    assert r1.request.body == ""
    assert r1.output.search == '"(?P<version>[0-9.]+)".bsubmatch(response.body)'


def test_parse_detail():
    detail = parse_poc(SAMPLE).detail
    assert detail.author == "someone"
    assert detail.links == ["http://example.com/advisory"]
    assert detail.description == "sample description"
    assert detail.fingerprint.version == "{{version}}"
    assert detail.vulnerability.level == "high"
    assert detail.vulnerability.id == ""


def test_transport_defaults_to_http():
    poc = parse_poc(
        "name: x\nrules:\n  r0:\n    expression: 'true'\nexpression: r0()\n"
    )
    assert poc.transport == "http"
    assert not poc.manual
    assert poc.rules["r0"] == Rule(expression="true")


def test_scalar_values_become_strings():
    poc = parse_poc(
        "name: x\nrules:\n  r0:\n    request:\n      body: 123\n"
        "    expression: 'true'\nexpression: r0()\n"
    )
    assert poc.rules["r0"].request.body == "123"


@pytest.mark.parametrize(
    "text, field_name",
    [
        ("rules:\n  r0:\n    expression: 'true'\nexpression: r0()\n", "name"),
        ("name: x\nexpression: r0()\n", "rules"),
        ("name: x\nrules: {}\nexpression: r0()\n", "rules"),
        ("name: x\nrules:\n  r0:\n    expression: 'true'\n", "expression"),
    ],
)
def test_missing_required_field(text, field_name):
    with pytest.raises(PocError, match=field_name):
        parse_poc(text)


@pytest.mark.parametrize("text", ["", "name: [unclosed\n", "- a\n- b\n"])
def test_unparseable_documents(text):
    with pytest.raises(PocError):
        parse_poc(text)


def test_non_boolean_flag_is_rejected():
    with pytest.raises(PocError, match="manual"):
        parse_poc(
            "name: x\nmanual: maybe\nrules:\n  r0:\n    expression: 'true'\n"
            "expression: r0()\n"
        )


def test_load_poc_round_trip(tmp_path):
    path = tmp_path / "sample.yml"
    path.write_text(SAMPLE, encoding="utf-8")
    loaded = load_poc(path)
    assert isinstance(loaded, POC)
    assert loaded == parse_poc(SAMPLE)


def test_load_poc_missing_file(tmp_path):
    with pytest.raises(PocError, match="does not exist"):
        load_poc(tmp_path / "absent.yml")