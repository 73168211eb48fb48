"""
Unit tests for script.py
"""

import io
import tempfile
import zipfile
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from pathlib import Path

import pytest

from mysql_backup.script import (
    FOOTER,
    escape_string,
    extract_table_names,
    format_header,
    format_insert,
    format_value,
    read_script,
    split_statements,
    structure_marker,
    value_to_text,
)


class TestEscapeString:
    """Tests for MySQL string-literal escaping."""

    def test_plain_text_unchanged(self):
        assert escape_string("hello world") == "hello world"

    def test_single_quote(self):
        assert escape_string("O'Brien") == "O\\'Brien"

    def test_double_quote(self):
        assert escape_string('say "hi"') == 'say \\"hi\\"'

    def test_backslash(self):
        assert escape_string("C:\\temp") == "C:\\\\temp"

    def test_control_characters(self):
        assert escape_string("a\nb\rc\0d\x1ae") == "a\\nb\\rc\\0d\\Ze"

    def test_semicolon_not_escaped(self):
        assert escape_string("a;b") == "a;b"


class TestFormatValue:
    """Tests for value stringification and quoting."""

    def test_string(self):
        assert format_value("Ann") == "'Ann'"

    def test_integer_is_quoted(self):
        assert format_value(42) == "'42'"

    def test_float_is_quoted(self):
        assert format_value(3.5) == "'3.5'"

    def test_decimal(self):
        assert format_value(Decimal("10.50")) == "'10.50'"

    def test_none_becomes_empty_string(self):
        assert format_value(None) == "''"

    def test_bool(self):
        assert format_value(True) == "'1'"
        assert format_value(False) == "'0'"

    def test_datetime(self):
        assert format_value(datetime(2024, 1, 15, 10, 30, 45)) == "'2024-01-15 10:30:45'"

    def test_datetime_with_microseconds(self):
        value = datetime(2024, 1, 15, 10, 30, 45, 120000)
        assert format_value(value) == "'2024-01-15 10:30:45.120000'"

    def test_date(self):
        assert format_value(date(2024, 1, 15)) == "'2024-01-15'"

    def test_time(self):
        assert format_value(time(8, 5)) == "'08:05:00'"

    def test_timedelta_over_a_day(self):
        assert value_to_text(timedelta(hours=30, minutes=5, seconds=7)) == "30:05:07"

    def test_negative_timedelta(self):
        assert value_to_text(timedelta(hours=-2)) == "-02:00:00"

    def test_bytes_written_as_hex_literal(self):
        assert format_value(b"\x89PNG\xff\xfe\x00") == "X'89504e47fffe00'"

    def test_bytearray_and_empty_bytes(self):
        assert format_value(bytearray(b"\x01\x02")) == "X'0102'"
        assert format_value(b"") == "X''"

    def test_set_joined(self):
        assert format_value({"b", "a"}) == "'a,b'"

    def test_escaping_applied(self):
        assert format_value("it's\n") == "'it\\'s\\n'"


class TestFormatInsert:
    """Tests for INSERT statement generation."""

    def test_multi_row_insert(self):
        statement = format_insert("users", ["id", "name"], [[1, "Ann"], [2, "Bob"]])
        assert statement == (
            "INSERT INTO `users` (`id`, `name`) VALUES\n"
            "('1', 'Ann'),\n"
            "('2', 'Bob');\n\n"
        )

    def test_single_row_insert(self):
        statement = format_insert("users", ["id"], [[7]])
        assert statement == "INSERT INTO `users` (`id`) VALUES\n('7');\n\n"

    def test_identifiers_quoted(self):
        statement = format_insert("order items", ["first name"], [["x"]])
        assert "`order items`" in statement
        assert "`first name`" in statement


class TestFormatHeader:
    """Tests for the script header."""

    def test_header_with_server_version(self):
        header = format_header(
            datetime(2024, 1, 15, 10, 30, 45), "shop", ["users", "orders"], "8.0.36"
        )
        assert header == (
            "-- Generated on: 2024-01-15 10:30:45\n"
            "-- Server version: 8.0.36\n"
            "-- Database: `shop`\n"
            '-- Tables: ["users", "orders"]\n\n'
        )

    def test_header_without_server_version(self):
        header = format_header(datetime(2024, 1, 15), "shop", [])
        assert "Server version" not in header
        assert "-- Tables: []" in header


class TestExtractTableNames:
    """Tests for recovering table names from a script."""

    def test_manifest_preferred(self):
        script = (
            format_header(datetime(2024, 1, 1), "shop", ["users", "orders"])
            + structure_marker("users")
        )
        assert extract_table_names(script) == ["users", "orders"]

    def test_markers_without_manifest(self):
        script = (
            "-- Generated on: 2024-01-01 00:00:00\n\n"
            + structure_marker("users")
            + "CREATE TABLE `users` (`id` int);\n\n"
            + structure_marker("orders")
            + "CREATE TABLE `orders` (`id` int);\n\n"
        )
        assert extract_table_names(script) == ["users", "orders"]

    def test_markers_case_insensitive(self):
        script = "--\n-- Table Structure for Table `legacy`\n--\n\nCREATE TABLE `legacy` (`id` int);\n"
        assert extract_table_names(script) == ["legacy"]

    def test_duplicates_removed(self):
        script = structure_marker("users") + structure_marker("users") + structure_marker("a`b")
        assert extract_table_names(script) == ["users", "a`b"]

    def test_no_tables(self):
        assert extract_table_names("SELECT 1;") == []


class TestSplitStatements:
    """Tests for the statement tokenizer."""

    def test_simple_split(self):
        assert split_statements("SELECT 1; SELECT 2;") == ["SELECT 1", "SELECT 2"]

    def test_blank_fragments_skipped(self):
        assert split_statements(";;\n  ;SELECT 1;\n\n") == ["SELECT 1"]

    def test_trailing_statement_without_terminator(self):
        assert split_statements("SELECT 1; SELECT 2") == ["SELECT 1", "SELECT 2"]

    def test_semicolon_in_single_quotes(self):
        script = "INSERT INTO `t` (`a`) VALUES ('x;y'); SELECT 1;"
        assert split_statements(script) == [
            "INSERT INTO `t` (`a`) VALUES ('x;y')",
            "SELECT 1",
        ]

    def test_semicolon_in_double_quotes(self):
        assert split_statements('SELECT "a;b";') == ['SELECT "a;b"']

    def test_semicolon_in_backticks(self):
        assert split_statements("SELECT `we;ird` FROM t;") == ["SELECT `we;ird` FROM t"]

    def test_escaped_quote_does_not_close_string(self):
        script = "INSERT INTO t VALUES ('it\\'s; fine'); SELECT 2;"
        assert split_statements(script) == [
            "INSERT INTO t VALUES ('it\\'s; fine')",
            "SELECT 2",
        ]

    def test_escaped_backslash_before_quote(self):
        script = "INSERT INTO t VALUES ('C:\\\\'); SELECT 2;"
        assert split_statements(script) == [
            "INSERT INTO t VALUES ('C:\\\\')",
            "SELECT 2",
        ]

    def test_doubled_quote(self):
        script = "INSERT INTO t VALUES ('it''s; ok'); SELECT 2;"
        assert split_statements(script) == [
            "INSERT INTO t VALUES ('it''s; ok')",
            "SELECT 2",
        ]

    def test_line_comments_dropped(self):
        script = (
            "-- Generated on: 2024-01-01; not a statement\n"
            "# hash comment; also ignored\n"
            "SELECT 1; -- trailing; comment\n"
            "-- End of database backup process\n"
        )
        assert split_statements(script) == ["SELECT 1"]

    def test_double_dash_without_space_is_not_comment(self):
        assert split_statements("SELECT 5--1;") == ["SELECT 5--1"]

    def test_block_comment_kept(self):
        script = "/*!40101 SET NAMES utf8mb4 */; SELECT 1;"
        assert split_statements(script) == ["/*!40101 SET NAMES utf8mb4 */", "SELECT 1"]

    def test_semicolon_in_block_comment(self):
        assert split_statements("SELECT /* a; b */ 1;") == ["SELECT /* a; b */ 1"]

    def test_comment_markers_inside_strings(self):
        script = "INSERT INTO t VALUES ('-- not; a comment', '# nor; this');"
        assert split_statements(script) == [
            "INSERT INTO t VALUES ('-- not; a comment', '# nor; this')"
        ]

    def test_unterminated_string_kept(self):
        assert split_statements("SELECT 'abc; def") == ["SELECT 'abc; def"]

    def test_escaped_values_round_trip(self):
        """Values with quotes, backslashes, newlines and semicolons survive."""
        nasty = "O'Brien \\ said;\n\"hi\"; -- bye"
        statement = format_insert("notes", ["id", "body"], [[1, nasty], [2, ";"]])
        script = "SET foreign_key_checks=0;\n\n" + statement + FOOTER

        statements = split_statements(script)

        assert statements == [
            "SET foreign_key_checks=0",
            statement.strip().rstrip(";"),
        ]


class TestReadScript:
    """Tests for reading scripts from disk."""

    def test_read_plain_script(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "backup.sql"
            path.write_text("SELECT 'é';", encoding="utf-8")
            assert read_script(path) == "SELECT 'é';"

    def test_read_zip_archive(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "backup.sql.zip"
            with zipfile.ZipFile(path, "w") as archive:
                archive.writestr("backup.sql", "SELECT 1;")
            assert read_script(path) == "SELECT 1;"

    def test_plain_script_holding_zip_bytes(self):
        """A .sql script is read as text even if a row contains a zip file."""
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w") as archive:
            archive.writestr("doc.xml", "<doc/>")
        blob = buffer.getvalue().decode("latin-1")
        text = f"INSERT INTO `files` (`body`) VALUES\n('{escape_string(blob)}');\n"

        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "backup_shop-2024-01-15_103045.sql"
            path.write_text(text, encoding="utf-8")
            assert read_script(path) == text

    def test_zip_with_several_scripts_rejected(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "backup.zip"
            with zipfile.ZipFile(path, "w") as archive:
                archive.writestr("a.sql", "SELECT 1;")
                archive.writestr("b.sql", "SELECT 2;")
            with pytest.raises(ValueError, match="exactly one"):
                read_script(path)

    def test_missing_file(self):
        with pytest.raises(FileNotFoundError):
            read_script(Path("/nonexistent/backup.sql"))
