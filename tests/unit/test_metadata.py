"""Unit tests for dromedary.metadata."""

from __future__ import annotations

from dromedary.metadata import merge_metadata, parse_metadata, replace_placeholders, split_source


class TestSplitSource:
    def test_separates_metadata_lines_from_body(self) -> None:
        source = split_source("@@Title=Birthday\nFirst line\n@@Date=2014-03-17\nSecond line")
        assert source.metadata_lines == ["@@Title=Birthday", "@@Date=2014-03-17"]
        assert source.body == "First line\nSecond line"

    def test_marker_must_start_the_line(self) -> None:
        source = split_source("Inline @@Title=X marker")
        assert source.metadata_lines == []
        assert source.body == "Inline @@Title=X marker"

    def test_custom_marker(self) -> None:
        source = split_source("%%Title=Custom\n@@Title=Body", marker="%%")
        assert source.metadata_lines == ["%%Title=Custom"]
        assert source.body == "@@Title=Body"


class TestParseMetadata:
    def test_key_value_pairs(self) -> None:
        metadata = parse_metadata(["@@Title=Birthday", "@@Date=2014-03-17 10:30 PM"])
        assert metadata == {"Title": "Birthday", "Date": "2014-03-17 10:30 PM"}

    def test_only_first_equals_splits(self) -> None:
        metadata = parse_metadata(["@@Link=http://example.com/?a=b&c=d"])
        assert metadata == {"Link": "http://example.com/?a=b&c=d"}

    def test_whitespace_runs_collapse(self) -> None:
        metadata = parse_metadata(["@@Title=Happy    birthday\tto me"])
        assert metadata["Title"] == "Happy birthday to me"

    def test_empty_value_kept(self) -> None:
        assert parse_metadata(["@@Title="]) == {"Title": ""}

    def test_line_without_equals_skipped(self) -> None:
        assert parse_metadata(["@@NoValueHere", "@@", "@@Title=Kept"]) == {"Title": "Kept"}

    def test_only_first_marker_removed(self) -> None:
        metadata = parse_metadata(["@@Greeting=Hello @@Title@@"])
        assert metadata["Greeting"] == "Hello @@Title@@"

    def test_later_duplicate_wins(self) -> None:
        assert parse_metadata(["@@Title=First", "@@Title=Second"]) == {"Title": "Second"}


class TestMergeMetadata:
    def test_document_value_wins(self) -> None:
        merged = merge_metadata({"Title": "Post A"}, {"Title": "Site", "SiteTitle": "Blog"})
        assert merged == {"Title": "Post A", "SiteTitle": "Blog"}

    def test_inputs_not_mutated(self) -> None:
        document = {"Title": "Post A"}
        defaults = {"Title": "Site"}
        merge_metadata(document, defaults)
        assert document == {"Title": "Post A"}
        assert defaults == {"Title": "Site"}


class TestReplacePlaceholders:
    def test_known_keys_replaced(self) -> None:
        html = replace_placeholders({"Title": "Hi"}, "<h1>@@Title@@</h1><p>@@Title@@</p>")
        assert html == "<h1>Hi</h1><p>Hi</p>"

    def test_unknown_keys_left_verbatim(self) -> None:
        assert replace_placeholders({}, "<p>@@Missing@@</p>") == "<p>@@Missing@@</p>"

    def test_substituted_values_not_rescanned(self) -> None:
        result = replace_placeholders({"A": "@@B@@", "B": "x"}, "@@A@@")
        assert result == "@@B@@"

    def test_empty_value_replaces(self) -> None:
        assert replace_placeholders({"title": ""}, "<title>@@title@@Blog</title>") == (
            "<title>Blog</title>"
        )

    def test_keys_with_spaces(self) -> None:
        html = replace_placeholders({"Site Title": "My Blog"}, "<title>@@Site Title@@</title>")
        assert html == "<title>My Blog</title>"

    def test_unknown_token_does_not_hide_following_placeholder(self) -> None:
        assert replace_placeholders({"Title": "X"}, "a@@b@@Title@@") == "a@@bX"

    def test_overlapping_key_names(self) -> None:
        metadata = {"Site": "S", "SiteTitle": "Blog"}
        assert replace_placeholders(metadata, "@@Site@@ @@SiteTitle@@") == "S Blog"

    def test_empty_metadata(self) -> None:
        assert replace_placeholders({}, "@@Title@@") == "@@Title@@"

    def test_custom_marker(self) -> None:
        assert replace_placeholders({"Title": "Hi"}, "%%Title%% @@Title@@", "%%") == (
            "Hi @@Title@@"
        )
