"""Conversion of message bodies into HTML that is safe to embed.

HTML bodies get their ``cid:`` references pointed at the attachment
endpoint and are then sanitized. Plain text bodies are escaped, quote
markers (``>``) become nested ``<blockquote>`` elements, bare URLs and
email addresses become links, and the result goes through the same
sanitizer.

Sanitizing is done by nh3 (Python bindings for the ammonia crate); each
call is independent and builds no shared state.
"""

import html
import re
from collections.abc import Iterable
from typing import TYPE_CHECKING
from urllib.parse import quote

import nh3

if TYPE_CHECKING:
    from .models import Attachment

ATTACHMENT_URL = "/attachment"

# Removed from the output, text content is kept (except for
# CLEAN_CONTENT_TAGS, which lose their content too)
FORBIDDEN_TAGS = frozenset(
    {"font", "center", "marquee", "h1", "h2", "h3", "h4", "h5", "h6"}
)
CLEAN_CONTENT_TAGS = frozenset({"script", "style"})

# Mail clients love to force their own fonts and colours on the reader
FORBIDDEN_CSS_PROPERTIES = frozenset({"font-family", "font", "font-size", "color"})

STANDARD_CSS_PROPERTIES = frozenset(
    {
        "background-color",
        "border",
        "border-bottom",
        "border-collapse",
        "border-color",
        "border-left",
        "border-radius",
        "border-right",
        "border-spacing",
        "border-style",
        "border-top",
        "border-width",
        "clear",
        "color",
        "display",
        "float",
        "font",
        "font-family",
        "font-size",
        "font-style",
        "font-variant",
        "font-weight",
        "height",
        "letter-spacing",
        "line-height",
        "list-style-type",
        "margin",
        "margin-bottom",
        "margin-left",
        "margin-right",
        "margin-top",
        "max-width",
        "min-width",
        "padding",
        "padding-bottom",
        "padding-left",
        "padding-right",
        "padding-top",
        "text-align",
        "text-decoration",
        "text-indent",
        "text-transform",
        "vertical-align",
        "white-space",
        "width",
        "word-spacing",
    }
)
ALLOWED_CSS_PROPERTIES = STANDARD_CSS_PROPERTIES - FORBIDDEN_CSS_PROPERTIES

ALLOWED_TAGS = frozenset(nh3.ALLOWED_TAGS) - FORBIDDEN_TAGS - CLEAN_CONTENT_TAGS
GENERIC_ATTRIBUTES = frozenset({"lang", "title", "dir", "style"})

_CID_ATTRIBUTE_RE = re.compile(r"\b(src|href)=([\"'])cid:([^\"']+)\2", re.IGNORECASE)
_QUOTE_PREFIX_RE = re.compile(r"^((?:[ \t]*>)+)(.*)$", re.DOTALL)
_LINE_SPLIT_RE = re.compile(r"\r\n|\r|\n")
_LINK_RE = re.compile(
    r"(?P<url>\b(?:https?|ftp)://[^\s<>\"']+|\bwww\.[^\s<>\"']+)"
    r"|(?P<email>\b[\w.%+-]+@[\w-]+(?:\.[\w-]+)*\.[A-Za-z]{2,}\b)",
    re.IGNORECASE,
)
_URL_TRAILING_PUNCTUATION = ".,;:!?"
_URL_CLOSING_BRACKETS = {")": "(", "]": "[", "}": "{"}


def normalize_content_id(content_id: str) -> str:
    """Normalize a content-id for matching: trim, drop <>, lower-case."""
    return content_id.strip().strip("<>").lower()


class BodyConverter:
    """Turns notmuch message bodies into sanitized HTML.

    Example:
        converter = BodyConverter()
        body = converter.convert_html(raw_html, message.id, attachments)
        body = converter.convert_text("> quoted\\nreply")
    """

    def convert_html(
        self, body: str, message_id: str, attachments: Iterable["Attachment"]
    ) -> str:
        """Rewrite cid: references in an HTML body, then sanitize it."""
        rewritten = self.rewrite_cid_sources(body, message_id, attachments)
        return self.sanitize_html(rewritten)

    def convert_text(self, text: str) -> str:
        """Convert a plain text body to sanitized HTML.

        Returns an empty string for blank input.
        """
        return self.sanitize_html(self.text_to_html(text))

    def rewrite_cid_sources(
        self, body: str, message_id: str, attachments: Iterable["Attachment"]
    ) -> str:
        """Point ``src``/``href`` attributes with a ``cid:`` URL at the
        attachment endpoint.

        Only attachments with both a content-id and a part index can be
        referenced. Unknown content-ids are left as they are.
        """
        if message_id == "":
            return body

        cid_to_part = {}
        for attachment in attachments:
            if attachment.content_id is None or attachment.part is None:
                continue
            cid = normalize_content_id(attachment.content_id)
            if cid:
                cid_to_part[cid] = attachment.part

        if not cid_to_part:
            return body

        def replace(match: re.Match) -> str:
            attribute, quote_char, token = match.groups()
            part = cid_to_part.get(normalize_content_id(token))
            if part is None:
                return match.group(0)
            url = f"{ATTACHMENT_URL}?id={quote(message_id, safe='')}&part={part}"
            return f"{attribute}={quote_char}{url}{quote_char}"

        return _CID_ATTRIBUTE_RE.sub(replace, body)

    def text_to_html(self, text: str) -> str:
        """Convert plain text to (unsanitized) HTML.

        Lines are joined with ``<br>``; runs of leading ``>`` markers open
        and close nested blockquotes as the depth changes from line to line.
        """
        text = text.strip()
        if text == "":
            return ""

        lines = _LINE_SPLIT_RE.split(text)
        depth = 0
        buffer = []

        for index, line in enumerate(lines):
            line_depth, content = parse_quote_prefix(line)

            if line_depth < depth:
                buffer.append("</blockquote>" * (depth - line_depth))
            elif line_depth > depth:
                buffer.append("<blockquote>" * (line_depth - depth))
            depth = line_depth

            buffer.append(linkify(content))
            if index != len(lines) - 1:
                buffer.append("<br>\n")

        buffer.append("</blockquote>" * depth)
        return "".join(buffer)

    def sanitize_html(self, body: str) -> str:
        """Strip everything that isn't on the allow-lists."""
        if body == "":
            return ""

        attributes = {
            tag: set(attrs)
            for tag, attrs in nh3.ALLOWED_ATTRIBUTES.items()
            if tag in ALLOWED_TAGS
        }
        attributes["*"] = set(GENERIC_ATTRIBUTES)

        return nh3.clean(
            body,
            tags=set(ALLOWED_TAGS),
            clean_content_tags=set(CLEAN_CONTENT_TAGS),
            attributes=attributes,
            link_rel=None,
            strip_comments=True,
            filter_style_properties=set(ALLOWED_CSS_PROPERTIES),
        )


def parse_quote_prefix(line: str) -> tuple[int, str]:
    """Quote depth of a line and the line without its markers.

    ``"> > text"`` and ``">>text"`` both have depth 2. One space after the
    markers is dropped, further indentation is kept.
    """
    match = _QUOTE_PREFIX_RE.match(line)
    if not match:
        return 0, line

    markers, content = match.groups()
    return markers.count(">"), content.removeprefix(" ")


def linkify(text: str) -> str:
    """HTML-escape a line of text and turn URLs and email addresses into links."""
    pieces = []
    position = 0

    for match in _LINK_RE.finditer(text):
        pieces.append(html.escape(text[position : match.start()]))
        position = match.end()

        if match.group("email"):
            address = match.group("email")
            pieces.append(_anchor(f"mailto:{address}", address))
            continue

        url, trailing = _split_trailing_punctuation(match.group("url"))
        if url.endswith("://") or url.lower() == "www":
            pieces.append(html.escape(match.group("url")))
            continue

        href = url if "://" in url else f"http://{url}"
        pieces.append(_anchor(href, url))
        pieces.append(html.escape(trailing))

    pieces.append(html.escape(text[position:]))
    return "".join(pieces)


def _anchor(href: str, label: str) -> str:
    return f'<a href="{html.escape(href)}">{html.escape(label)}</a>'


def _split_trailing_punctuation(url: str) -> tuple[str, str]:
    """Separate sentence punctuation (and unbalanced closing brackets) from a URL."""
    end = len(url)
    while end:
        char = url[end - 1]
        opening = _URL_CLOSING_BRACKETS.get(char)
        if char in _URL_TRAILING_PUNCTUATION:
            end -= 1
        elif opening and url.count(opening, 0, end) < url.count(char, 0, end):
            end -= 1
        else:
            break
    return url[:end], url[end:]
