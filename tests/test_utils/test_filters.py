"""Tests for lullabot_project.utils.filters module."""

import pytest

from lullabot_project.utils.filters import (
    FilterError,
    apply_filter,
    compile_regex,
    extract_content,
    extract_line_range,
    process_content,
    remove_frontmatter,
    remove_lines,
    should_process_file,
    validate_filter_config,
)

DOC = """---
title: Rules
---
# Rules

Intro line
```
code block
```
Outro line"""


class TestFilterFunctions:
    """Tests for the individual filters."""

    def test_remove_frontmatter(self):
        assert remove_frontmatter(DOC).startswith("# Rules")

    def test_remove_frontmatter_without_block(self):
        assert remove_frontmatter("# Title\n---\n") == "# Title\n---\n"

    def test_extract_content_group(self):
        result = extract_content(DOC, r"```\n(.*?)\n```", "s", 1)
        assert result == "code block"

    def test_extract_content_no_match_keeps_content(self):
        assert extract_content(DOC, "nothing here") == DOC

    def test_extract_line_range(self):
        content = "one\ntwo\nthree\nfour"
        assert extract_line_range(content, 2, 3) == "two\nthree"
        assert extract_line_range(content, 3, 99) == "three\nfour"

    def test_remove_lines(self):
        assert remove_lines("keep\n# drop\nkeep too", "^#") == "keep\nkeep too"

    def test_compile_regex_bad_pattern(self):
        with pytest.raises(FilterError):
            compile_regex("(unclosed")

    def test_apply_unknown_type(self):
        with pytest.raises(FilterError):
            apply_filter("x", {"type": "shout"})


class TestValidateFilterConfig:
    """Tests for validate_filter_config()."""

    def test_valid(self):
        filters = [
            {"type": "frontmatter-removal"},
            {"type": "extract-content", "pattern": "a(b)", "group": 1},
            {"type": "line-range", "start": 1, "end": 5},
            {"type": "remove-lines", "pattern": "^#"},
        ]
        assert validate_filter_config(filters) == []

    def test_not_a_list(self):
        assert validate_filter_config({"type": "line-range"}) == ["Filters must be a list"]

    def test_unknown_type(self):
        errors = validate_filter_config([{"type": "shout"}])
        assert "Invalid filter type 'shout'" in errors[0]

    def test_missing_pattern(self):
        errors = validate_filter_config([{"type": "remove-lines"}])
        assert "Missing required parameter 'pattern'" in errors[0]

    def test_line_range_order(self):
        errors = validate_filter_config([{"type": "line-range", "start": 5, "end": 2}])
        assert "must be less than or equal to end" in errors[0]

    def test_bad_regex(self):
        errors = validate_filter_config([{"type": "remove-lines", "pattern": "(x"}])
        assert errors and errors[0].startswith("Filter 1:")


class TestProcessContent:
    """Tests for process_content()."""

    def test_filters_run_in_order(self):
        outcome = process_content(DOC, [
            {"type": "frontmatter-removal"},
            {"type": "remove-lines", "pattern": "^```"},
            {"type": "line-range", "start": 1, "end": 1},
        ])
        assert outcome.content == "# Rules"
        assert outcome.applied == 3
        assert outcome.warnings == []

    def test_emptying_filter_is_reverted(self):
        outcome = process_content("only line", [{"type": "remove-lines", "pattern": "."}])
        assert outcome.content == "only line"
        assert outcome.applied == 0
        assert "empty content" in outcome.warnings[0]

    def test_failing_filter_is_skipped(self):
        outcome = process_content("text", [
            {"type": "line-range", "start": 1},
            {"type": "remove-lines", "pattern": "nothing"},
        ])
        assert outcome.content == "text"
        assert outcome.applied == 1
        assert "failed" in outcome.warnings[0]


class TestShouldProcessFile:
    """Tests for should_process_file()."""

    def test_text_and_binary(self):
        assert should_process_file("rules/coding.md")
        assert should_process_file("CONFIG.YML")
        assert not should_process_file("logo.png")
