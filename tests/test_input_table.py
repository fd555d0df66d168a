# File: tests/test_input_table.py
"""Разбор таблицы компаний и вспомогательные функции utils."""
import pytest

from mail_scout.input_table import parse_targets, read_targets
from mail_scout.models import CrawlTarget
from mail_scout.utils import get_hostname, remove_duplicates, sanitize_name

TABLE = """
# Target companies

| Company Name | Website URL |
|--------------|-------------|
| Acme | https://acme.io |
| Globex Corp. | http://globex.com/ |
| Acme | https://acme.io |
| No Scheme Ltd | www.noscheme.com |
| Too | Many | Columns |
|  | https://nameless.io |
Not a table row
| Initech |   https://initech.com/contact   |
"""


def test_parse_targets():
    assert parse_targets(TABLE.splitlines()) == [
        CrawlTarget("Acme", "https://acme.io"),
        CrawlTarget("Globex Corp.", "http://globex.com/"),
        CrawlTarget("Initech", "https://initech.com/contact"),
    ]


def test_header_is_case_insensitive():
    lines = ["| COMPANY NAME | website url |", "| Acme | https://acme.io |"]
    assert parse_targets(lines) == [CrawlTarget("Acme", "https://acme.io")]


def test_read_targets(tmp_path):
    path = tmp_path / "companydetails.txt"
    path.write_text(TABLE, encoding="utf-8")
    assert [t.site_name for t in read_targets(path)] == ["Acme", "Globex Corp.", "Initech"]


def test_read_targets_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_targets(tmp_path / "nope.txt")


@pytest.mark.parametrize(
    "url, host",
    [
        ("https://Acme.IO/contact", "acme.io"),
        ("http://acme.io:8080/", "acme.io"),
        ("  https://acme.io  ", "acme.io"),
        ("ftp://acme.io/", None),
        ("acme.io", None),
        ("http://", None),
        ("http://[::1", None),
    ],
)
def test_get_hostname(url, host):
    assert get_hostname(url) == host


def test_target_hostname():
    assert CrawlTarget("Acme", "https://www.acme.io/").hostname == "www.acme.io"


@pytest.mark.parametrize(
    "name, expected",
    [
        ("Acme", "Acme"),
        ("Globex Corp.", "Globex_Corp_"),
        ("A  B\tC", "A_B_C"),
        ("Café-Bar_1", "Caf_-Bar_1"),
        ("x" * 150, "x" * 100),
    ],
)
def test_sanitize_name(name, expected):
    assert sanitize_name(name) == expected


def test_remove_duplicates_keeps_first_occurrence():
    assert remove_duplicates(["b", "a", "b", "c", "a"]) == ["b", "a", "c"]
