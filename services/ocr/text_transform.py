# services/ocr/text_transform.py

import re

# List markers found at the start of an OCR line
DECIMAL_LIST_PATTERN = re.compile(r"^\d+(?:\.\d+)+(?:\.|\))?$")  # 6.1, 6.1.2.
NUMERIC_LIST_PATTERN = re.compile(r"^\d+(?:\.|\))?$")  # 1, 1., 1)
ROMAN_LIST_PATTERN = re.compile(r"^[ivxlcdm]+(?:\.|\))$", re.IGNORECASE)  # iv.
ALPHA_LIST_PATTERN = re.compile(r"^[a-zA-Z](?:\.|\))$")  # a), B.

_TABLE_BREAK = "|table|"
_PARAGRAPH_BREAK = "|newLine|"


def _format_marker(marker: str) -> str:
    if marker == "-":
        return "- -"
    if (
        DECIMAL_LIST_PATTERN.match(marker)
        or ROMAN_LIST_PATTERN.match(marker)
        or ALPHA_LIST_PATTERN.match(marker)
    ):
        return f"- - **{marker}**"
    if NUMERIC_LIST_PATTERN.match(marker):
        return f"- **{marker}**"
    return marker


def transform_text(text: str) -> str:
    """Rewrite list markers in OCR markdown into nested markdown bullets.

    The first word of every line is inspected: a bare "-" becomes "- -",
    decimal, roman and alphabetic markers become second-level bold bullets,
    plain numeric markers become first-level bold bullets. Single line breaks
    are then widened to paragraph breaks, except between markdown table rows.
    """
    out = ""
    for chunk in text.split("\n\n"):
        for line in chunk.split("\n"):
            words = line.split(" ")
            words[0] = _format_marker(words[0])
            out += " ".join(words) + "\n"
        out += "\n\n"

    return (
        out.replace("|\n|", _TABLE_BREAK)
        .replace("\n\n", _PARAGRAPH_BREAK)
        .replace("\n", "\n\n")
        .replace(_PARAGRAPH_BREAK, "\n\n")
        .replace(_TABLE_BREAK, "|\n|")
    )
