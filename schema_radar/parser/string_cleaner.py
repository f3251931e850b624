"""Best-effort repair of near-JSON text before parsing."""
from __future__ import annotations

import re

_HTML_COMMENT = re.compile(r"<!--.*?-->", re.DOTALL)
_BARE_KEY = re.compile(r"([{,]\s*)([A-Za-z_][A-Za-z0-9_]*)(\s*:)")
_TRAILING_COMMA = re.compile(r",(\s*[}\]])")
_TRAILING_COMMA_AT_END = re.compile(r",\s*$")


def clean_json_like_string(raw: str | None) -> str:
    """Repair common JSON-LD authoring mistakes.

    Steps run in a fixed order: strip HTML comments, quote bare object keys,
    drop trailing commas before ``}``/``]``, drop one trailing comma at the
    end of the text. The result is more likely to parse as strict JSON but
    is not guaranteed to; callers must still handle parse failures.
    Key quoting is not string-aware: ", word:" inside a string value is
    rewritten as well, which breaks otherwise valid JSON.
    """
    content = str(raw or "").strip()
    if not content:
        return ""

    content = _HTML_COMMENT.sub("", content)
    content = _BARE_KEY.sub(r'\1"\2"\3', content)
    content = _TRAILING_COMMA.sub(r"\1", content)
    content = _TRAILING_COMMA_AT_END.sub("", content)

    return content
