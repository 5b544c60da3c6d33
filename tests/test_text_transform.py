# tests/test_text_transform.py
from services.ocr.text_transform import transform_text


def first_line(text):
    return transform_text(text).split("\n")[0]


def test_numeric_marker_becomes_bold_bullet():
    assert first_line("1. Definitions") == "- **1.** Definitions"
    assert first_line("2) Scope") == "- **2)** Scope"


def test_nested_markers_become_second_level_bullets():
    assert first_line("6.1 Applicability") == "- - **6.1** Applicability"
    assert first_line("6.1.2. Exemptions") == "- - **6.1.2.** Exemptions"
    assert first_line("a) brokers") == "- - **a)** brokers"
    assert first_line("iv. depositories") == "- - **iv.** depositories"


def test_dash_bullet_is_nested():
    assert first_line("- item") == "- - item"


def test_plain_text_untouched():
    assert first_line("The Board hereby directs") == "The Board hereby directs"


def test_single_breaks_widen_to_paragraphs():
    out = transform_text("1. First\n2. Second")
    assert out.startswith("- **1.** First\n\n- **2.** Second\n\n")


def test_table_rows_stay_adjacent():
    out = transform_text("| a | b |\n| 1 | 2 |")
    assert out.startswith("| a | b |\n| 1 | 2 |")
