"""Tests for the pattern catalog."""

from __future__ import annotations

import re

import pytest

from aisast.scanner.catalog import (
    entries_for,
    language_for_path,
    lookup,
    normalize_language,
    rule_count,
    supported_languages,
)
from aisast.scanner.engine import scan
from aisast.scanner.models import Severity, VulnType
from aisast.scanner.patterns import Pattern, env_name

TRIGGERS = {
    "javascript": [
        ("const data = eval(userInput);", VulnType.CODE_INJECTION),
        ("const fn = new Function(body);", VulnType.CODE_INJECTION),
        ("el.innerHTML = userInput;", VulnType.XSS),
        ("document.write(location.hash);", VulnType.DOM_XSS),
        ('const password = "hunter2";', VulnType.HARDCODED_CREDENTIALS),
        ('const q = "SELECT * FROM users WHERE id = " + userId;', VulnType.SQL_INJECTION),
        ('const h = crypto.createHash("md5");', VulnType.WEAK_HASH),
        ("const token = Math.random();", VulnType.WEAK_RANDOM),
        ('fetch("http://api.example.com/data");', VulnType.INSECURE_HTTP),
    ],
    "typescript": [
        ("const data: unknown = eval(userInput);", VulnType.CODE_INJECTION),
        ("el.innerHTML = html;", VulnType.XSS),
        ('const apiKey = "sk-123456";', VulnType.HARDCODED_CREDENTIALS),
    ],
    "python": [
        ("result = eval(user_input)", VulnType.CODE_INJECTION),
        ("exec(code)", VulnType.CODE_INJECTION),
        ('password = "hunter2"', VulnType.HARDCODED_CREDENTIALS),
        ('query = "SELECT * FROM users WHERE id = " + uid', VulnType.SQL_INJECTION),
        ('cursor.execute(f"SELECT * FROM users WHERE id = {uid}")', VulnType.SQL_INJECTION),
        ('os.system("ls " + path)', VulnType.COMMAND_INJECTION),
        ("subprocess.run(cmd, shell=True)", VulnType.COMMAND_INJECTION),
        ("obj = pickle.loads(data)", VulnType.INSECURE_DESERIALIZATION),
        ("cfg = yaml.load(stream)", VulnType.INSECURE_DESERIALIZATION),
        ("digest = hashlib.md5(data).hexdigest()", VulnType.WEAK_HASH),
    ],
    "java": [
        ("Object r = engine.eval(script);", VulnType.CODE_INJECTION),
        ('String q = "SELECT * FROM users WHERE id = " + id;', VulnType.SQL_INJECTION),
        ("ObjectInputStream in = new ObjectInputStream(stream);", VulnType.INSECURE_DESERIALIZATION),
        ("Runtime.getRuntime().exec(cmd);", VulnType.COMMAND_INJECTION),
        ('String password = "hunter2";', VulnType.HARDCODED_CREDENTIALS),
        ('MessageDigest md = MessageDigest.getInstance("MD5");', VulnType.WEAK_HASH),
    ],
    "generic": [
        ("x = eval(y)", VulnType.CODE_INJECTION),
        ("h = md5(data)", VulnType.WEAK_HASH),
        ("secret = 'abc123'", VulnType.HARDCODED_CREDENTIALS),
        ('password := "hunter2"', VulnType.HARDCODED_CREDENTIALS),
    ],
}


@pytest.mark.parametrize(
    "language,line,vuln_type",
    [(lang, line, vt) for lang, cases in TRIGGERS.items() for line, vt in cases],
)
def test_trigger_yields_matching_type(language, line, vuln_type):
    findings = scan(line, language)
    assert vuln_type.value in {f.type for f in findings}


class TestLanguages:
    def test_aliases(self):
        assert normalize_language("JS") == "javascript"
        assert normalize_language("tsx") == "typescript"
        assert normalize_language("py") == "python"
        assert normalize_language(" Java ") == "java"

    def test_unknown_language_is_generic(self):
        assert normalize_language("cobol") == "generic"
        assert entries_for("cobol") == entries_for("generic")

    def test_supported_languages_exclude_generic(self):
        langs = supported_languages()
        assert "generic" not in langs
        assert {"javascript", "typescript", "python", "java"} <= set(langs)

    def test_language_for_path(self):
        assert language_for_path("src/app.jsx") == "javascript"
        assert language_for_path("main.py") == "python"
        assert language_for_path("Foo.java") == "java"
        assert language_for_path("notes.txt") == "generic"


class TestCatalogEntries:
    def test_entries_are_ordered_and_stable(self):
        first = [p.rule_id for p in entries_for("javascript")]
        second = [p.rule_id for p in entries_for("javascript")]
        assert first == second
        assert first[0] == "javascript:eval"

    def test_rule_ids_are_language_scoped(self):
        for lang in supported_languages() + ["generic"]:
            for pattern in entries_for(lang):
                assert pattern.rule_id.startswith(f"{lang}:")

    def test_lookup(self):
        pattern = lookup("python:yaml-load")
        assert pattern is not None
        assert pattern.type == "Insecure Deserialization"
        assert lookup("nope:missing") is None

    def test_rule_count(self):
        total = sum(len(entries_for(lang)) for lang in supported_languages() + ["generic"])
        assert rule_count() == total

    def test_entries_are_immutable(self):
        pattern = entries_for("python")[0]
        with pytest.raises(AttributeError):
            pattern.severity = Severity.LOW

    def test_unknown_vuln_type_rejected(self):
        with pytest.raises(ValueError):
            Pattern(
                rule_id="x:bad",
                vuln_type="Not A Real Type",
                severity=Severity.LOW,
                message="bad",
                detect=re.compile("x"),
            )

    def test_string_types_are_coerced(self):
        pattern = Pattern(
            rule_id="x:ok",
            vuln_type="SQL Injection",
            severity="high",
            message="ok",
            detect=re.compile("x"),
        )
        assert pattern.vuln_type is VulnType.SQL_INJECTION
        assert pattern.severity is Severity.HIGH


class TestRuleFixes:
    @pytest.mark.parametrize(
        "language,line",
        [
            ("javascript", "const data = eval(userInput);"),
            ("javascript", "el.innerHTML = userInput;"),
            ("javascript", 'const password = "hunter2";'),
            ("javascript", 'const q = "SELECT * FROM users WHERE id = " + userId;'),
            ("javascript", 'const h = crypto.createHash("md5");'),
            ("javascript", 'fetch("http://api.example.com/data");'),
            ("python", "result = eval(user_input)"),
            ("python", 'db_password = "hunter2"'),
            ("python", "query = \"SELECT * FROM users WHERE name = '\" + name + \"'\""),
            ("python", "subprocess.run(cmd, shell=True)"),
            ("python", "obj = pickle.loads(data)"),
            ("python", "cfg = yaml.load(stream)"),
            ("python", "digest = hashlib.md5(data).hexdigest()"),
            ("java", 'String password = "hunter2";'),
            ("java", 'MessageDigest md = MessageDigest.getInstance("MD5");'),
            ("generic", "h = MD5(data)"),
        ],
    )
    def test_fix_removes_own_match(self, language, line):
        findings = [f for f in scan(line, language) if lookup(f.rule_id).has_fix]
        assert findings
        for finding in findings:
            pattern = lookup(finding.rule_id)
            fixed = pattern.apply_fix(line)
            assert fixed != line
            assert not pattern.matches(fixed)

    def test_eval_fix_uses_json_parse(self):
        assert lookup("javascript:eval").apply_fix("eval(userInput)") == "JSON.parse(userInput)"

    def test_python_eval_fix(self):
        assert lookup("python:eval").apply_fix("x = eval(s)") == "x = ast.literal_eval(s)"

    def test_credential_fix_uses_env_name(self):
        fixed = lookup("javascript:hardcoded-credentials").apply_fix('const dbPassword = "x1";')
        assert fixed == "const dbPassword = process.env.DB_PASSWORD;"

    def test_sql_fix_in_assignment_keeps_expression(self):
        line = 'const q = "SELECT * FROM users WHERE id = " + userId;'
        fixed = lookup("javascript:sql-concatenation").apply_fix(line)
        assert fixed == 'const q = "SELECT * FROM users WHERE id = ?";'

    def test_python_sql_fix_in_assignment_stays_a_string(self):
        line = 'query = "SELECT * FROM users WHERE id = " + uid'
        fixed = lookup("python:sql-concatenation").apply_fix(line)
        assert fixed == 'query = "SELECT * FROM users WHERE id = %s"'

    def test_sql_fix_in_call_passes_params(self):
        line = 'db.query("SELECT * FROM users WHERE id = " + userId);'
        fixed = lookup("javascript:sql-concatenation").apply_fix(line)
        assert fixed == 'db.query("SELECT * FROM users WHERE id = ?", [userId]);'

    def test_python_sql_fix_consumes_closing_quote(self):
        line = "cursor.execute(\"SELECT * FROM users WHERE name = '\" + name + \"'\")"
        fixed = lookup("python:sql-concatenation").apply_fix(line)
        assert fixed == 'cursor.execute("SELECT * FROM users WHERE name = %s", (name,))'

    def test_sql_fix_leaves_multi_operand_concat(self):
        line = 'q = "SELECT * FROM t WHERE a = " + a + " AND b = " + b'
        assert lookup("python:sql-concatenation").apply_fix(line) == line

    def test_weak_hash_fix_keeps_case(self):
        pattern = lookup("generic:weak-hash")
        assert pattern.apply_fix("MD5(x)") == "SHA256(x)"
        assert pattern.apply_fix("hashlib.sha1(x)") == "hashlib.sha256(x)"

    def test_entries_without_fix(self):
        assert lookup("javascript:document-write").apply_fix("document.write(x)") is None
        assert not lookup("java:sql-concatenation").has_fix


def test_env_name():
    assert env_name("dbPassword") == "DB_PASSWORD"
    assert env_name("client_secret") == "CLIENT_SECRET"
    assert env_name("apiKey") == "API_KEY"
