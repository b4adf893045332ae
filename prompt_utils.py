# Prompt template helpers: placeholder extraction, rendering and parsing of
# tagged AI output. Placeholders use the [[name]] convention.

from __future__ import annotations

import json
import re
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, Field

_PLACEHOLDER_RE = re.compile(r"\[\[([^\]]+)\]\]")

# Aliases filled from the source passage when the caller does not give them
PASSAGE_ALIASES = ("sentence", "input", "korean")

CIRCLED_NUMBERS = "①②③④⑤⑥⑦⑧⑨⑩"


def extract_variables(template: str) -> List[str]:
    """
    Return the distinct placeholder names in `template`, first occurrence first.

    extract_variables("Hello [[name]], age [[age]], again [[name]]") -> ["name", "age"]
    """
    if not template:
        return []
    return list(dict.fromkeys(_PLACEHOLDER_RE.findall(template)))


def has_placeholder(template: str, name: str) -> bool:
    # case-insensitive, whitespace allowed inside the brackets: [[ Passage ]]
    if not template:
        return False
    pattern = r"\[\[\s*" + re.escape(name.strip()) + r"\s*\]\]"
    return re.search(pattern, template, flags=re.IGNORECASE) is not None


class RenderResult(BaseModel):
    text: str
    used: List[str] = Field(default_factory=list)
    missing: List[str] = Field(default_factory=list)


def _with_aliases(values: Mapping[str, Any]) -> Dict[str, Any]:
    out = dict(values)
    if "passage" in out:
        for alias in PASSAGE_ALIASES:
            out.setdefault(alias, out["passage"])
    return out


def render_template(template: str, values: Mapping[str, Any]) -> RenderResult:
    """
    Substitute [[name]] placeholders with values.

    Names are looked up as written, then with surrounding whitespace removed.
    Placeholders without a value stay in the text verbatim and are listed in
    `missing`; `used` lists the names that were substituted.
    """
    lookup = _with_aliases(values)
    used: Dict[str, None] = {}
    missing: Dict[str, None] = {}

    def _sub(m: "re.Match[str]") -> str:
        raw = m.group(1)
        for key in (raw, raw.strip()):
            if key in lookup and lookup[key] is not None:
                used[raw] = None
                return str(lookup[key])
        missing[raw] = None
        return m.group(0)

    text = _PLACEHOLDER_RE.sub(_sub, template or "")
    return RenderResult(text=text, used=list(used), missing=list(missing))


# ---------- Tagged result parsing ----------

_TAG_RE = re.compile(r"\[\[(\w+)\]\]([\s\S]*?)\[\[/\1\]\]")


class ParseResult(BaseModel):
    success: bool
    data: Dict[str, Any] = Field(default_factory=dict)
    warnings: List[str] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)
    raw_tags: List[str] = Field(default_factory=list)


def parse_tagged_result(
    text: str,
    allowed_tags: Optional[Iterable[str]] = None,
    allow_empty: bool = False,
    array_tags: Iterable[str] = (),
    json_tags: Iterable[str] = (),
) -> ParseResult:
    """
    Parse `[[tag]]content[[/tag]]` blocks out of an AI response.

    - allowed_tags: restrict to these names (None accepts any tag)
    - allow_empty: keep tags whose content is blank
    - array_tags: split content into non-empty lines
    - json_tags: json-decode content; on failure keep the raw string and record an error
    """
    allowed = set(allowed_tags) if allowed_tags is not None else None
    array_set = set(array_tags)
    json_set = set(json_tags)

    data: Dict[str, Any] = {}
    warnings: List[str] = []
    errors: List[str] = []
    raw_tags: List[str] = []

    matched = 0
    for m in _TAG_RE.finditer(text or ""):
        matched += 1
        tag, content = m.group(1), m.group(2).strip()
        raw_tags.append(tag)

        if allowed is not None and tag not in allowed:
            warnings.append(f"unknown tag: [[{tag}]]")
            continue
        if not content and not allow_empty:
            warnings.append(f"empty tag ignored: [[{tag}]]")
            continue

        if tag in array_set:
            data[tag] = [ln.strip() for ln in content.splitlines() if ln.strip()]
        elif tag in json_set:
            try:
                data[tag] = json.loads(content)
            except json.JSONDecodeError:
                errors.append(f"invalid JSON in [[{tag}]]: {content[:50]}...")
                data[tag] = content
        else:
            data[tag] = content

    if matched == 0:
        warnings.append("no tags found; check the response format")

    return ParseResult(
        success=not errors, data=data, warnings=warnings, errors=errors, raw_tags=raw_tags
    )


_CHOICE_PATTERNS = (
    re.compile(r"[①②③④⑤⑥⑦⑧⑨⑩]\s*(.+)"),
    re.compile(r"\(\d+\)\s*(.+)"),
    re.compile(r"\d+\.\s*(.+)"),
    re.compile(r"[A-E]\.\s*(.+)", re.IGNORECASE),
)


def parse_choices(content: str) -> List[str]:
    for pattern in _CHOICE_PATTERNS:
        choices = [m.group(1).strip() for m in pattern.finditer(content)]
        choices = [c for c in choices if c]
        if choices:
            return choices
    # no markers: one choice per line
    return [ln.strip() for ln in content.splitlines() if ln.strip()]


def parse_answer(content: str) -> Union[int, str]:
    s = content.strip()
    if len(s) == 1 and s in CIRCLED_NUMBERS:
        return CIRCLED_NUMBERS.index(s) + 1
    if re.fullmatch(r"[0-9]+", s):
        return int(s)
    return s


QUESTION_TAGS = ("instruction", "body", "choices", "answer", "explanation")


def question_fields_from_output(text: str) -> Tuple[Dict[str, Any], ParseResult]:
    """
    Map tagged model output onto generated_questions columns.

    Only the question tags are read; anything else is reported as a warning.
    `choices` becomes a list and a numeric or circled answer is stored as digits.
    """
    res = parse_tagged_result(text, allowed_tags=QUESTION_TAGS)
    fields: Dict[str, Any] = {}
    for tag in QUESTION_TAGS:
        if tag not in res.data:
            continue
        value = res.data[tag]
        if tag == "choices":
            value = parse_choices(value)
        elif tag == "answer":
            value = str(parse_answer(value))
        fields[tag] = value
    return fields, res
