import difflib
import re
from typing import Any, Dict, List

_TAG_RE = re.compile(r"<[^>]*>")
_TOKEN_RE = re.compile(r"\S+|\s+")


def strip_html(html: str) -> str:
    """Удаление HTML-разметки перед сравнением текста"""
    text = _TAG_RE.sub(" ", html or "")
    text = text.replace("&nbsp;", " ").replace("&amp;", "&").replace("&lt;", "<").replace("&gt;", ">")
    text = text.replace("&quot;", "\"").replace("&#39;", "'")
    return re.sub(r"[ \t]+", " ", text).strip()


def _tokenize(text: str, mode: str) -> List[str]:
    if mode == "lines":
        return text.splitlines(keepends=True)
    return _TOKEN_RE.findall(text)


def _count(tokens: List[str], mode: str) -> int:
    if mode == "lines":
        return len(tokens)
    return sum(1 for token in tokens if token.strip())


def compare_texts(old: str, new: str, mode: str = "words") -> Dict[str, Any]:
    """Сравнение двух текстов по словам или по строкам"""
    if mode not in ("words", "lines"):
        raise ValueError(f"Unsupported compare mode: {mode}")

    old_tokens = _tokenize(old, mode)
    new_tokens = _tokenize(new, mode)
    matcher = difflib.SequenceMatcher(a=old_tokens, b=new_tokens, autojunk=False)

    parts: List[Dict[str, Any]] = []
    stats = {"additions": 0, "deletions": 0, "unchanged": 0}

    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag == "equal":
            chunk = old_tokens[i1:i2]
            parts.append({"value": "".join(chunk), "added": False, "removed": False})
            stats["unchanged"] += _count(chunk, mode)
            continue
        if i2 > i1:
            chunk = old_tokens[i1:i2]
            parts.append({"value": "".join(chunk), "added": False, "removed": True})
            stats["deletions"] += _count(chunk, mode)
        if j2 > j1:
            chunk = new_tokens[j1:j2]
            parts.append({"value": "".join(chunk), "added": True, "removed": False})
            stats["additions"] += _count(chunk, mode)

    return {"mode": mode, "parts": parts, **stats}
