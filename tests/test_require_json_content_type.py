"""Tests for require-json-content-type, including its fixes."""
import pytest

from fetchlint.analyzer.fixes import apply_fixes

RULE = 'require-json-content-type'


@pytest.fixture
def content_type_ids(analyze):
    def _run(code):
        return [d.message_id for d in analyze(code, rules=[RULE])]
    return _run


@pytest.fixture
def fixed(analyze):
    """Apply every fix reported for ``code`` and return the new source."""
    def _run(code):
        diagnostics = analyze(code, rules=[RULE])
        return apply_fixes(code, [d.fix for d in diagnostics])
    return _run


class TestValidRequests:

    def test_no_options(self, content_type_ids):
        """Test a call without options."""
        assert content_type_ids("fetch('/api/data')") == []

    def test_empty_options(self, content_type_ids):
        """Test empty options."""
        assert content_type_ids("fetch('/api/data', {})") == []

    def test_no_body(self, content_type_ids):
        """Test options without a body."""
        assert content_type_ids("fetch('/api/data', { method: 'GET' })") == []

    def test_non_json_bodies(self, content_type_ids):
        """Test bodies that are not JSON."""
        assert content_type_ids("fetch('/api/data', { body: 'plain text' })") == []
        assert content_type_ids("fetch('/api/data', { body: formData })") == []

    def test_correct_header(self, content_type_ids):
        """Test a correct content-type header."""
        code = """
        fetch('/api/data', {
          method: 'POST',
          headers: {
            'Content-Type': 'application/json'
          },
          body: JSON.stringify(data)
        })
        """
        assert content_type_ids(code) == []

    def test_header_key_casing(self, content_type_ids):
        """Test header keys in any casing."""
        for key in ("'content-type'", "'CONTENT-TYPE'", '"Content-type"'):
            code = f"fetch('/a', {{ method: 'POST', headers: {{ {key}: 'application/json' }}, body: JSON.stringify(d) }})"
            assert content_type_ids(code) == [], key

    def test_header_with_charset(self, content_type_ids):
        """Test a content type with a charset parameter."""
        code = """
        fetch('/api/data', {
          method: 'POST',
          headers: { 'Content-Type': 'application/json; charset=utf-8' },
          body: JSON.stringify(data)
        })
        """
        assert content_type_ids(code) == []

    def test_other_function(self, content_type_ids):
        """Verify other functions are ignored."""
        assert content_type_ids("request('/api/data', { body: JSON.stringify(data) })") == []


class TestUndecidableRequests:
    """Shapes that cannot be inspected are skipped, never reported."""

    def test_headers_variable(self, content_type_ids):
        """Verify headers held in a variable are skipped."""
        assert content_type_ids("fetch('/a', { headers: h, body: JSON.stringify(d) })") == []

    def test_headers_instance(self, content_type_ids):
        """Verify a Headers instance is skipped."""
        code = "fetch('/a', { headers: new Headers(), body: JSON.stringify(d) })"
        assert content_type_ids(code) == []

    def test_spread_in_options(self, content_type_ids):
        """Verify a spread in options is skipped."""
        assert content_type_ids("fetch('/a', { ...defaults, body: JSON.stringify(d) })") == []

    def test_spread_in_headers(self, content_type_ids):
        """Verify a spread in headers is skipped."""
        code = "fetch('/a', { headers: { ...base }, body: JSON.stringify(d) })"
        assert content_type_ids(code) == []

    def test_dynamic_header_value(self, content_type_ids):
        """Verify a dynamic header value is skipped."""
        code = "fetch('/a', { headers: { 'Content-Type': type }, body: JSON.stringify(d) })"
        assert content_type_ids(code) == []

    def test_options_variable(self, content_type_ids):
        """Verify options held in a variable are skipped."""
        assert content_type_ids("fetch('/a', options)") == []

    def test_computed_header_key(self, analyze):
        """Test that a computed key in headers may be the content type and is skipped."""
        code = "fetch('/a', { method: 'POST', headers: { [CT]: 'application/json' }, body: JSON.stringify(x) })"
        assert analyze(code, rules=[RULE]) == []

    def test_computed_options_key(self, analyze):
        """Test that a computed key in options may be the headers entry and is skipped."""
        code = "fetch('/a', { method: 'POST', [H]: hdrs, body: JSON.stringify(x) })"
        assert analyze(code, rules=[RULE]) == []

    def test_computed_key_beside_static_headers(self, content_type_ids):
        """Test that a computed header key does not hide a wrong static content type."""
        code = "fetch('/a', { headers: { [K]: v, 'Content-Type': 'text/plain' }, body: JSON.stringify(x) })"
        assert content_type_ids(code) == ['incorrectContentType']


class TestMissingContentType:

    def test_no_headers(self, analyze, fixed):
        """Test the fix for options without headers."""
        code = """fetch('/api/data', {
  method: 'POST',
  body: JSON.stringify(data)
})"""
        diagnostics = analyze(code, rules=[RULE])
        assert [d.message_id for d in diagnostics] == ['missingContentType']
        assert diagnostics[0].line == 1
        assert diagnostics[0].column == 20
        assert fixed(code) == """fetch('/api/data', {
  method: 'POST',
  body: JSON.stringify(data), headers: { "Content-Type": "application/json" }
})"""

    def test_empty_headers(self, fixed):
        """Test the fix for an empty headers object."""
        code = "fetch('/a', { method: 'POST', headers: {}, body: JSON.stringify(data) })"
        assert fixed(code) == (
            "fetch('/a', { method: 'POST', headers: { \"Content-Type\": \"application/json\" }, "
            "body: JSON.stringify(data) })"
        )

    def test_headers_without_content_type(self, fixed):
        """Test the fix for headers without a content type."""
        code = """fetch('/api/data', {
  method: 'POST',
  headers: {
    'Authorization': 'Bearer token'
  },
  body: JSON.stringify(data)
})"""
        assert fixed(code) == """fetch('/api/data', {
  method: 'POST',
  headers: {
    'Authorization': 'Bearer token', "Content-Type": "application/json"
  },
  body: JSON.stringify(data)
})"""

    def test_trailing_comma_kept_valid(self, fixed):
        """Test that the fix stays valid after a trailing comma."""
        code = "fetch('/a', {\n  body: JSON.stringify(d),\n})"
        assert fixed(code) == (
            "fetch('/a', {\n  body: JSON.stringify(d), headers: { \"Content-Type\": \"application/json\" },\n})"
        )

    def test_only_body(self, fixed):
        """Test the fix for options with only a body."""
        code = "fetch('/api/data', { body: JSON.stringify(data) })"
        assert fixed(code) == (
            "fetch('/api/data', { body: JSON.stringify(data), "
            "headers: { \"Content-Type\": \"application/json\" } })"
        )

    def test_fix_removes_diagnostic(self, content_type_ids, fixed):
        """Verify applying the fix removes the diagnostic."""
        for code in (
            "fetch('/a', { method: 'POST', body: JSON.stringify(data) })",
            "fetch('/a', { headers: {}, body: JSON.stringify(data) })",
            "fetch('/a', { headers: { Accept: 'text/html' }, body: JSON.stringify(data) })",
        ):
            assert content_type_ids(fixed(code)) == [], code

    def test_fix_is_idempotent(self, analyze, fixed):
        """Verify a fixed source offers no further fix."""
        once = fixed("fetch('/a', { body: JSON.stringify(data) })")
        assert fixed(once) == once
        assert all(d.fix is None for d in analyze(once, rules=[RULE]))


class TestIncorrectContentType:

    def test_text_plain(self, analyze):
        """Test a text/plain content type."""
        code = """fetch('/api/data', {
  method: 'POST',
  headers: {
    'Content-Type': 'text/plain'
  },
  body: JSON.stringify(data)
})"""
        diagnostics = analyze(code, rules=[RULE])
        assert [d.message_id for d in diagnostics] == ['incorrectContentType']
        assert diagnostics[0].fix is None
        assert diagnostics[0].line == 3
        assert diagnostics[0].column == 12

    def test_template_literal_value(self, content_type_ids):
        """Test a content type given as a template literal."""
        code = "fetch('/a', { headers: { 'Content-Type': `text/html` }, body: JSON.stringify(d) })"
        assert content_type_ids(code) == ['incorrectContentType']
