"""Ограниченный форматированный текст комментариев.

Поддерживается жирный, курсив и маркированные списки. На вход принимается
разметка в стиле markdown (**жирный**, *курсив* или _курсив_, строки
"- пункт") либо эквивалентные HTML-теги. Результат всегда проходит через
белый список nh3, поэтому любая другая разметка вырезается.
"""
import html
import re

import nh3

ALLOWED_TAGS = {"strong", "b", "em", "i", "ul", "ol", "li", "p", "br"}

_HTML_TAG = re.compile(r"</?(strong|b|em|i|ul|ol|li|p|br)\b[^>]*>", re.IGNORECASE)
_BOLD = re.compile(r"\*\*(?=\S)(.+?)(?<=\S)\*\*")
_ITALIC_STAR = re.compile(r"(?<![*\w])\*(?=\S)(.+?)(?<=\S)\*(?![*\w])")
_ITALIC_UNDERSCORE = re.compile(r"(?<!\w)_(?=\S)(.+?)(?<=\S)_(?!\w)")
_BULLET = re.compile(r"^\s*[-*]\s+(.*)$")


def _inline(text: str) -> str:
    text = _BOLD.sub(r"<strong>\1</strong>", text)
    text = _ITALIC_STAR.sub(r"<em>\1</em>", text)
    return _ITALIC_UNDERSCORE.sub(r"<em>\1</em>", text)


def render_markup(text: str) -> str:
    """Преобразование markdown-подобной разметки в HTML"""
    lines = []
    in_list = False

    for line in text.splitlines():
        bullet = _BULLET.match(line)
        if bullet:
            if not in_list:
                lines.append("<ul>")
                in_list = True
            lines.append(f"<li>{_inline(html.escape(bullet.group(1), quote=False))}</li>")
            continue

        if in_list:
            lines.append("</ul>")
            in_list = False
        lines.append(_inline(html.escape(line, quote=False)))

    if in_list:
        lines.append("</ul>")

    # Переводы строк между обычными строками сохраняются как <br>
    out = []
    for i, chunk in enumerate(lines):
        out.append(chunk)
        nxt = lines[i + 1] if i + 1 < len(lines) else None
        if nxt is not None and not _is_block(chunk) and not _is_block(nxt):
            out.append("<br>")
    return "".join(out)


def _is_block(chunk: str) -> bool:
    return chunk.startswith(("<ul>", "</ul>", "<li>"))


def sanitize_html(value: str) -> str:
    """Оставляет только разрешенные теги без атрибутов"""
    return nh3.clean(value, tags=ALLOWED_TAGS, attributes={}).strip()


def format_comment_body(raw: str) -> str:
    """Подготовка текста комментария к сохранению.

    Если во входе уже есть разрешенные HTML-теги, он считается HTML и только
    очищается; иначе разметка сначала преобразуется в HTML.
    """
    raw = raw.strip()
    if _HTML_TAG.search(raw):
        return sanitize_html(raw)
    return sanitize_html(render_markup(raw))


def plain_text(body: str) -> str:
    """Текст без тегов (для проверки на пустоту)"""
    return nh3.clean(body, tags=set()).strip()
