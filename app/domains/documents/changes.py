from enum import Enum
from typing import Any, List, Mapping, NamedTuple, Optional

from app.domains.documents.entities import ChangeType, TRACKED_FIELDS


class ChangeSummary(NamedTuple):
    change_type: ChangeType
    changed_fields: List[str]
    summary: str


def _normalize(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    return value


def diff_fields(previous: Mapping[str, Any], new: Mapping[str, Any]) -> List[str]:
    """Отслеживаемые поля, значения которых различаются"""
    changed = []
    for field in TRACKED_FIELDS:
        if field not in new:
            continue
        if _normalize(previous.get(field)) != _normalize(new[field]):
            changed.append(field)
    return changed


def describe(changed_fields: List[str]) -> str:
    if not changed_fields:
        return "No changes"
    return "Updated " + ", ".join(changed_fields)


def classify(previous: Optional[Mapping[str, Any]], new: Mapping[str, Any]) -> ChangeSummary:
    """Классификация перехода между двумя состояниями документа.

    Функция чистая: одинаковые аргументы всегда дают одинаковый результат.
    Поля, отсутствующие в ``new``, считаются неизменёнными.
    """
    if previous is None:
        fields = [f for f in TRACKED_FIELDS if f in new]
        return ChangeSummary(ChangeType.CREATED, fields, "Created document")

    changed = diff_fields(previous, new)
    content_changed = "content" in changed
    status_changed = "status" in changed

    # Изменение содержимого доминирует над остальными
    if content_changed and status_changed:
        change_type = ChangeType.MIXED
    elif content_changed:
        change_type = ChangeType.CONTENT
    elif status_changed and len(changed) == 1:
        change_type = ChangeType.STATUS
    else:
        change_type = ChangeType.METADATA

    return ChangeSummary(change_type, changed, describe(changed))
