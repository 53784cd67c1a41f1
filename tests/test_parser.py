"""Tests for parsing raw context into a DiagnosticRecord."""

import pytest

from rootcause.context.models import BreadcrumbCategory
from rootcause.context.parser import normalize_category, parse, parse_frame, parse_status_code
from rootcause.errors import ParseError, ParseErrorKind
from tests.samples import (
    DATA_INTEGRITY_CONTEXT,
    DOUBLE_SUBMIT_CONTEXT,
    MISSING_CONFIG_CONTEXT,
    NO_FRAMES_CONTEXT,
)


class TestParse:
    def test_error_line(self):
        record = parse(DOUBLE_SUBMIT_CONTEXT, issue_id="FRONTEND-3K")
        assert record.issue_id == "FRONTEND-3K"
        assert record.error_type == "TypeError"
        assert record.error_message == "Cannot read properties of undefined (reading 'orderId')"

    def test_frames_keep_order_and_in_app_marker(self):
        record = parse(DOUBLE_SUBMIT_CONTEXT)
        assert [f.location for f in record.frames] == [
            "node_modules/react-dom/cjs/react-dom.development.js:3945",
            "src/checkout/CheckoutForm.tsx:88",
            "src/checkout/api.ts:42",
        ]
        assert [f.in_app for f in record.frames] == [False, True, True]
        assert record.frames[-1].function == "submitOrder"

    def test_breadcrumbs(self):
        record = parse(DOUBLE_SUBMIT_CONTEXT)
        assert [b.ordinal for b in record.breadcrumbs] == [100, 115, 240, 310]
        first, _, created, failed = record.breadcrumbs
        assert first.category is BreadcrumbCategory.UI
        assert first.kind == "ui.click"
        assert first.summary == "button#place-order"
        assert created.status_code == 201
        assert failed.status_code == 500
        assert first.status_code is None

    def test_table_tags_skip_header(self):
        record = parse(DOUBLE_SUBMIT_CONTEXT)
        assert record.tags == {"environment": "production", "release": "web@1.4.2"}

    def test_list_tags(self):
        record = parse(DATA_INTEGRITY_CONTEXT)
        assert record.tags == {"schema.client": "v2", "schema.server": "v3"}

    def test_python_traceback_frames(self):
        record = parse(MISSING_CONFIG_CONTEXT)
        assert record.error_type == "KeyError"
        assert record.error_message == "'PAYMENTS_API_KEY'"
        assert [f.location for f in record.frames] == [
            "app/payments/client.py:12",
            "/usr/lib/python3.12/os.py:714",
        ]
        assert record.frames[0].in_app
        assert not record.frames[1].in_app
        assert record.tags == {}

    def test_breadcrumbs_sorted_by_ordinal(self):
        raw = (
            "Error: boom\n"
            "> src/app.ts:1 in main\n"
            "## Breadcrumbs\n"
            "- [30] console: third\n"
            "- [10] console: first\n"
            "- [20] console: second\n"
        )
        record = parse(raw)
        assert [b.summary for b in record.breadcrumbs] == ["first", "second", "third"]

    def test_frames_without_headings(self):
        record = parse("ReferenceError: x is not defined\n    at main (src/index.js:3:9)\n")
        assert record.error_type == "ReferenceError"
        assert record.frames[0].location == "src/index.js:3"
        assert record.frames[0].function == "main"

    def test_missing_error_line_defaults(self):
        record = parse("## Stack Trace\n> src/app.py:10 in run\n")
        assert record.error_type == "UnknownError"
        assert record.error_message == ""


class TestMalformedContext:
    def test_zero_frames_rejected(self):
        with pytest.raises(ParseError) as excinfo:
            parse(NO_FRAMES_CONTEXT, issue_id="123")
        assert excinfo.value.kind is ParseErrorKind.MALFORMED_CONTEXT

    @pytest.mark.parametrize("raw", ["", "   \n\n", "# Issue 1\n\n## Tags\n- env: prod\n"])
    def test_empty_contexts_rejected(self, raw):
        with pytest.raises(ParseError):
            parse(raw)


class TestHelpers:
    @pytest.mark.parametrize(
        "kind,expected",
        [
            ("ui.click", BreadcrumbCategory.UI),
            ("ui.input", BreadcrumbCategory.UI),
            ("fetch", BreadcrumbCategory.HTTP),
            ("xhr", BreadcrumbCategory.HTTP),
            ("navigation", BreadcrumbCategory.NAVIGATION),
            ("app.lifecycle", BreadcrumbCategory.LIFECYCLE),
            ("query", BreadcrumbCategory.CONSOLE),
        ],
    )
    def test_normalize_category(self, kind, expected):
        assert normalize_category(kind) is expected

    @pytest.mark.parametrize(
        "summary,expected",
        [
            ("POST /api/orders [500] duplicate key", 500),
            ("GET /api/items/123 (404)", 404),
            ("GET /health status=200", 200),
            ("PUT /api/cart -> 409", 409),
            ("GET /api/users 503", 503),
            ("POST /api/orders 500 Internal Server Error", 500),
            ("GET /api/cart 503 Service Unavailable", 503),
            ("GET /api/items (120 items)", None),
            ("GET /api/poll [100]", None),
            ("GET /api/items/123", None),
        ],
    )
    def test_status_code(self, summary, expected):
        assert parse_status_code(summary) == expected

    def test_in_app_annotation(self):
        frame = parse_frame("  src/app.py:10 in run [in-app]")
        assert frame is not None
        assert frame.in_app

    def test_not_a_frame(self):
        assert parse_frame("**Level**: error") is None

    def test_star_bullet_is_not_in_app(self):
        frame = parse_frame("* node_modules/lib/index.js:10 in call")
        assert frame is not None
        assert frame.location == "node_modules/lib/index.js:10"
        assert not frame.in_app

    def test_star_bullet_with_annotation(self):
        frame = parse_frame("* src/app.ts:5 in main [in-app]")
        assert frame.in_app
        assert frame.function == "main"

    def test_star_bulleted_stack_picks_marked_origin(self):
        record = parse(
            "Error: boom\n"
            "## Stack Trace\n"
            "* src/app.ts:5 in main (in-app)\n"
            "* node_modules/lib/index.js:10 in call\n"
        )
        assert [f.in_app for f in record.frames] == [True, False]
