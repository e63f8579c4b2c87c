"""
Tests for comment markup rendering and sanitization.
"""

from app.domains.comments.formatting import format_comment_body, plain_text
from app.domains.documents.entities import build_storage_key, is_pdf_content_type, sanitize_filename


def test_bold_markup():
    assert format_comment_body("**hello**") == "<strong>hello</strong>"


def test_italic_markup():
    assert format_comment_body("*one* and _two_") == "<em>one</em> and <em>two</em>"


def test_bullet_list():
    assert format_comment_body("- a\n- **b**") == "<ul><li>a</li><li><strong>b</strong></li></ul>"


def test_line_breaks_between_plain_lines():
    assert format_comment_body("first\nsecond") == "first<br>second"


def test_plain_text_is_escaped():
    assert format_comment_body("1 < 2 & 3") == "1 &lt; 2 &amp; 3"


def test_allowed_html_is_kept():
    assert format_comment_body("<b>bold</b> <i>it</i>") == "<b>bold</b> <i>it</i>"


def test_attributes_and_disallowed_tags_removed():
    body = format_comment_body('<p style="color:red">hi <img src=x onerror=alert(1)></p>')

    assert body == "<p>hi </p>"


def test_plain_text_of_markup():
    assert plain_text("<ul><li><strong>x</strong></li></ul>") == "x"
    assert plain_text("<p></p>") == ""


def test_storage_key_format():
    assert build_storage_key("report.pdf", 1700000000000) == "1700000000000-report.pdf"


def test_sanitize_filename_replaces_unsafe_characters():
    assert sanitize_filename("../etc/passwd ü.pdf") == ".._etc_passwd__.pdf"


def test_pdf_content_type_detection():
    assert is_pdf_content_type("application/pdf")
    assert is_pdf_content_type("application/x-PDF")
    assert not is_pdf_content_type("text/plain")
    assert not is_pdf_content_type(None)
