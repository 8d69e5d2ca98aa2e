import pytest

from app.domains.documents.comparison import compare_texts, strip_html


def test_strip_html():
    assert strip_html("<p>Hello&nbsp;<b>world</b></p>") == "Hello world"


def test_strip_html_decodes_quotes():
    assert strip_html("<p>&quot;Party&quot; means the Client&#39;s affiliate</p>") == "\"Party\" means the Client's affiliate"

    result = compare_texts(strip_html("the &quot;Party&quot;"), strip_html("the \"Party\""))
    assert result["additions"] == 0
    assert result["deletions"] == 0


def test_word_diff_counts():
    result = compare_texts("the quick brown fox", "the slow brown fox jumps")
    assert result["additions"] == 2
    assert result["deletions"] == 1
    assert result["unchanged"] == 3
    assert "".join(p["value"] for p in result["parts"] if not p["removed"]) == "the slow brown fox jumps"


def test_line_diff():
    result = compare_texts("a\nb\nc\n", "a\nc\nd\n", mode="lines")
    assert result["mode"] == "lines"
    assert result["deletions"] == 1
    assert result["additions"] == 1
    assert result["unchanged"] == 2


def test_identical_texts():
    result = compare_texts("same text", "same text")
    assert result["additions"] == 0
    assert result["deletions"] == 0


def test_unknown_mode():
    with pytest.raises(ValueError):
        compare_texts("a", "b", mode="chars")
