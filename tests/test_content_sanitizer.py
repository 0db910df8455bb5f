from __future__ import annotations

from markupsafe import Markup

from content_sanitizer import sanitize_location_content, trusted_html


def test_keeps_editor_formatting() -> None:
    html = '<h1>Clue</h1><ol><li><strong>Look</strong> <em>up</em></li></ol><p class="ql-align-center"><u>here</u></p>'

    assert sanitize_location_content(html) == html


def test_strips_scripts_and_event_handlers() -> None:
    cleaned = sanitize_location_content('<p onmouseover="evil()">Hi</p><script>document.cookie</script>')

    assert "<script" not in cleaned
    assert "onmouseover" not in cleaned
    assert cleaned.startswith("<p>Hi</p>")


def test_drops_javascript_links() -> None:
    cleaned = sanitize_location_content('<a href="javascript:alert(1)">tap</a>')

    assert "javascript" not in cleaned
    assert "tap" in cleaned


def test_links_open_in_new_tab() -> None:
    cleaned = sanitize_location_content('<p>See <a href="https://example.org">map</a></p>')

    assert 'href="https://example.org"' in cleaned
    assert 'target="_blank"' in cleaned
    assert 'rel="nofollow noopener noreferrer"' in cleaned


def test_keeps_only_allowed_styles() -> None:
    cleaned = sanitize_location_content('<span style="color: red; position: fixed">alert</span>')

    assert "color: red" in cleaned
    assert "position" not in cleaned


def test_empty_content() -> None:
    assert sanitize_location_content(None) == ""
    assert sanitize_location_content("") == ""


def test_trusted_html_marks_content_safe() -> None:
    value = trusted_html("<p>ok</p>")

    assert isinstance(value, Markup)
    assert str(value) == "<p>ok</p>"
    assert trusted_html(None) == Markup("")
