from app.domains.documents.changes import classify, diff_fields
from app.domains.documents.entities import ChangeType, DocumentStatus


BASE = {
    "title": "NDA",
    "content": "v1",
    "status": DocumentStatus.DRAFT,
    "document_type": "Contract",
    "jurisdiction": "General",
}


def test_no_previous_state_is_created():
    result = classify(None, BASE)
    assert result.change_type == ChangeType.CREATED
    assert result.summary == "Created document"


def test_content_only():
    result = classify(BASE, {"content": "v2"})
    assert result.change_type == ChangeType.CONTENT
    assert result.changed_fields == ["content"]
    assert result.summary == "Updated content"


def test_status_only():
    result = classify(BASE, {"status": DocumentStatus.FINAL})
    assert result.change_type == ChangeType.STATUS
    assert result.changed_fields == ["status"]


def test_status_string_and_enum_compare_equal():
    result = classify(BASE, {"status": "DRAFT", "title": "NDA"})
    assert result.changed_fields == []
    assert result.summary == "No changes"


def test_content_and_status_is_mixed():
    result = classify(BASE, {"status": "FINAL", "content": "v2"})
    assert result.change_type == ChangeType.MIXED
    assert result.changed_fields == ["content", "status"]


def test_content_dominates_metadata():
    result = classify(BASE, {"title": "Mutual NDA", "content": "v2"})
    assert result.change_type == ChangeType.CONTENT
    assert result.summary == "Updated title, content"


def test_metadata_only():
    result = classify(BASE, {"jurisdiction": "Kenya", "document_type": "Agreement"})
    assert result.change_type == ChangeType.METADATA
    assert result.changed_fields == ["document_type", "jurisdiction"]


def test_status_with_metadata_is_metadata():
    result = classify(BASE, {"status": "ARCHIVED", "title": "Old NDA"})
    assert result.change_type == ChangeType.METADATA


def test_untracked_fields_are_ignored():
    assert diff_fields(BASE, {"owner": "someone", "content": "v1"}) == []


def test_classify_is_deterministic():
    new = {"title": "Mutual NDA", "content": "v3", "status": "FINAL"}
    assert classify(BASE, new) == classify(BASE, new)
    assert classify(dict(BASE), dict(new)) == classify(BASE, new)
