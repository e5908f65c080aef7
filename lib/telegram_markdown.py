"""
Telegram message formatting utilities.

This module turns markdown produced by an LLM into text that Telegram will
accept under one of its parse modes:

- MarkdownV2: every reserved character is backslash-escaped
- HTML: a constrained markdown subset is converted to Telegram's HTML subset
- plain: markdown markers are stripped

For Telegram formatting options, see https://core.telegram.org/bots/api#formatting-options
"""

import html
import re
from enum import StrEnum
from typing import Callable, Dict, List, Optional, Tuple

# Characters that must be escaped in different contexts
ESCAPE_CHARS_GENERAL = r"_*[]()~`>#+-=|{}.!"
ESCAPE_CHARS_PRE_CODE = r"`\\"
ESCAPE_CHARS_LINK_URL = r")\\"

TRUNCATION_MARKER = "…"
BULLET = "•"

_TOKEN_RE = re.compile(r"\x00(\d+)\x00")

# Telegram HTML subset which is kept as is on (re)conversion when its content is escaped
_HTML_BLOCK_RE = re.compile(
    r"<pre>(?P<pre>.*?)</pre>|<code(?: class=\"[^\"<>]*\")?>(?P<code>.*?)</code>"
    r"|<a href=\"(?P<href>[^\"<>]*)\">(?P<link>.*?)</a>",
    re.DOTALL,
)
_HTML_TAG_RE = re.compile(
    r"</?(?:b|strong|i|em|u|ins|s|strike|del|tg-spoiler|blockquote)>|<span class=\"tg-spoiler\">|</span>"
)
_HTML_ENTITY_RE = re.compile(r"&(?:amp|lt|gt|quot|#\d+|#x[0-9a-fA-F]+);")
_HTML_ANY_TAG_RE = re.compile(r"<(/?)([a-zA-Z][\w-]*)(?:\s[^<>]*)?>")
_BARE_AMPERSAND_RE = re.compile(r"&(?!(?:amp|lt|gt|quot|#\d+|#x[0-9a-fA-F]+);)")


class FormattingMode(StrEnum):
    """Markup dialect the delivery endpoint will parse"""

    MARKDOWN_V2 = "markdown-v2"
    HTML = "html"
    PLAIN = "plain"


def escapeMarkdownV2(text: str, context: str = "general") -> str:
    """
    Escape special characters for Telegram MarkdownV2 format.

    Args:
        text: Text to escape
        context: Context for escaping ('general', 'pre_code', 'link_url')

    Returns:
        Escaped text suitable for the specified context
    """
    if context == "pre_code":
        charsToEscape = ESCAPE_CHARS_PRE_CODE
    elif context == "link_url":
        charsToEscape = ESCAPE_CHARS_LINK_URL
    else:  # general
        charsToEscape = ESCAPE_CHARS_GENERAL + "\\"

    # Escape backslashes first to avoid double-escaping
    if "\\" in charsToEscape:
        text = text.replace("\\", "\\\\")
        charsToEscape = charsToEscape.replace("\\", "")

    for char in charsToEscape:
        text = text.replace(char, f"\\{char}")

    return text


def escapeHtml(text: str) -> str:
    """Escape the three HTML metacharacters Telegram cares about"""
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


class _Protector:
    """Replaces fragments with opaque tokens and puts them back afterwards"""

    def __init__(self) -> None:
        self.elements: List[str] = []

    def protect(self, value: str) -> str:
        self.elements.append(value)
        return f"\x00{len(self.elements) - 1}\x00"

    def sub(self, pattern: "re.Pattern[str]", text: str, render: Callable[[re.Match[str]], str]) -> str:
        return pattern.sub(lambda m: self.protect(render(m)), text)

    def restore(self, text: str) -> str:
        # Tokens may be nested (e.g. a tag token inside a header), so loop until stable
        for _ in range(10):
            restored = _TOKEN_RE.sub(lambda m: self.elements[int(m.group(1))], text)
            if restored == text:
                break
            text = restored
        return text


def _isEscapedHtmlText(text: str) -> bool:
    """No raw tag characters and every & starts an entity"""
    return "<" not in text and ">" not in text and _BARE_AMPERSAND_RE.search(text) is None


def _protectHtmlBlock(protector: _Protector, match: re.Match[str]) -> str:
    inner = match.group("pre") or match.group("code") or match.group("link") or ""
    href = match.group("href") or ""
    if _isEscapedHtmlText(inner) and _isEscapedHtmlText(href):
        return protector.protect(match.group(0))
    return match.group(0)


def _protectBalancedTags(protector: _Protector, text: str) -> str:
    """Protect inline tags which form properly nested open/close pairs, the rest stays literal"""
    stack: List[Tuple[str, re.Match[str]]] = []
    paired: List[re.Match[str]] = []
    for match in _HTML_TAG_RE.finditer(text):
        tagMatch = _HTML_ANY_TAG_RE.fullmatch(match.group(0))
        if tagMatch is None:
            continue
        name = tagMatch.group(2)
        if not tagMatch.group(1):
            stack.append((name, match))
            continue
        for idx in range(len(stack) - 1, -1, -1):
            if stack[idx][0] == name:
                paired.extend((stack[idx][1], match))
                # Tags opened inside the pair and never closed stay unpaired
                del stack[idx:]
                break

    parts: List[str] = []
    position = 0
    for match in sorted(paired, key=lambda m: m.start()):
        parts.append(text[position : match.start()])
        parts.append(protector.protect(match.group(0)))
        position = match.end()
    parts.append(text[position:])
    return "".join(parts)


def convertMarkdownToHtml(markdownText: str) -> str:
    """
    Convert LLM markdown to Telegram HTML.

    Supported: headers, bold, italic, list bullets, links, inline code and
    fenced code blocks. Everything else is kept as literal (escaped) text.
    Telegram HTML which is already present is preserved when it is valid
    (balanced tags, escaped content), so converting an already converted
    text yields the same text. Any other markup is escaped.

    Args:
        markdownText: Markdown text

    Returns:
        Text suitable for parse_mode=HTML
    """
    text = markdownText.replace("\x00", "")
    protector = _Protector()

    # Step 1: Keep valid Telegram HTML and entities untouched
    text = _HTML_BLOCK_RE.sub(lambda m: _protectHtmlBlock(protector, m), text)
    text = _protectBalancedTags(protector, text)
    text = protector.sub(_HTML_ENTITY_RE, text, lambda m: m.group(0))

    # Step 2: Code and links, their content is never formatted
    text = protector.sub(
        re.compile(r"```[\w+-]*[ \t]*\n(.*?)\n?```", re.DOTALL),
        text,
        lambda m: f"<pre>{escapeHtml(m.group(1))}</pre>",
    )
    text = protector.sub(
        re.compile(r"`([^`\n]+?)`"),
        text,
        lambda m: f"<code>{escapeHtml(m.group(1))}</code>",
    )
    text = protector.sub(
        re.compile(r"\[([^\]\n]+?)\]\(([^)\s]+?)\)"),
        text,
        lambda m: f'<a href="{html.escape(m.group(2), quote=True)}">{escapeHtml(m.group(1))}</a>',
    )

    tag: Callable[[str], str] = protector.protect

    # Step 3: Line level elements
    def convertHeader(match: re.Match[str]) -> str:
        return f"{tag('<b>')}{match.group(1).strip().rstrip('#').strip()}{tag('</b>')}"

    text = re.sub(r"^[ \t]*#{1,6}[ \t]+(\S.*?)[ \t]*$", convertHeader, text, flags=re.MULTILINE)
    text = re.sub(r"^([ \t]*)[-*+][ \t]+", rf"\g<1>{BULLET} ", text, flags=re.MULTILINE)

    # Step 4: Inline emphasis
    text = re.sub(r"\*\*(?=\S)(.+?)(?<=\S)\*\*", lambda m: f"{tag('<b>')}{m.group(1)}{tag('</b>')}", text)
    text = re.sub(r"(?<!\w)__(?=\S)(.+?)(?<=\S)__(?!\w)", lambda m: f"{tag('<b>')}{m.group(1)}{tag('</b>')}", text)
    text = re.sub(r"\*(?=[^\s*])([^*\n]+?)(?<=\S)\*", lambda m: f"{tag('<i>')}{m.group(1)}{tag('</i>')}", text)
    text = re.sub(
        r"(?<!\w)_(?=[^\s_])([^_\n]+?)(?<=\S)_(?!\w)", lambda m: f"{tag('<i>')}{m.group(1)}{tag('</i>')}", text
    )

    # Step 5: Escape remaining literal text, tokens are digits wrapped in NULs
    text = escapeHtml(text)

    return protector.restore(text)


def convertMarkdownToV2(markdownText: str) -> str:
    """
    Make arbitrary text safe for MarkdownV2 by escaping every reserved character.

    No markdown is interpreted: the model output is shown literally.
    """
    return escapeMarkdownV2(markdownText.replace("\x00", ""), "general")


def stripMarkdown(markdownText: str) -> str:
    """
    Remove markdown markers, keeping the readable text.

    Args:
        markdownText: Markdown text

    Returns:
        Plain text
    """
    text = markdownText.replace("\x00", "")
    text = re.sub(r"```[\w+-]*[ \t]*\n(.*?)\n?```", r"\1", text, flags=re.DOTALL)
    text = re.sub(r"`([^`\n]+?)`", r"\1", text)
    text = re.sub(r"\[([^\]\n]+?)\]\(([^)\s]+?)\)", r"\1 (\2)", text)
    text = re.sub(r"^[ \t]*#{1,6}[ \t]+(\S.*?)[ \t#]*$", r"\1", text, flags=re.MULTILINE)
    text = re.sub(r"^([ \t]*)[-*+][ \t]+", rf"\g<1>{BULLET} ", text, flags=re.MULTILINE)
    text = re.sub(r"\*\*(?=\S)(.+?)(?<=\S)\*\*", r"\1", text)
    text = re.sub(r"(?<!\w)__(?=\S)(.+?)(?<=\S)__(?!\w)", r"\1", text)
    text = re.sub(r"\*(?=[^\s*])([^*\n]+?)(?<=\S)\*", r"\1", text)
    text = re.sub(r"(?<!\w)_(?=[^\s_])([^_\n]+?)(?<=\S)_(?!\w)", r"\1", text)
    return text


def stripFormatting(text: str, mode: FormattingMode) -> str:
    """
    Turn already formatted text back into plain text.

    Used when Telegram refuses to parse a formatted message and it has to be
    resent without a parse mode.
    """
    match mode:
        case FormattingMode.MARKDOWN_V2:
            result: List[str] = []
            i = 0
            while i < len(text):
                char = text[i]
                if char == "\\" and i + 1 < len(text):
                    result.append(text[i + 1])
                    i += 2
                    continue
                if char not in "*_~|`":
                    result.append(char)
                i += 1
            return "".join(result)
        case FormattingMode.HTML:
            return html.unescape(_HTML_ANY_TAG_RE.sub("", text))
        case _:
            return text


def _truncatePlain(text: str, maxLength: int) -> str:
    return text[: maxLength - len(TRUNCATION_MARKER)] + TRUNCATION_MARKER


def _truncateMarkdownV2(text: str, maxLength: int) -> str:
    cut = text[: maxLength - len(TRUNCATION_MARKER)]
    # Do not leave a dangling escape character
    trailing = len(cut) - len(cut.rstrip("\\"))
    if trailing % 2 == 1:
        cut = cut[:-1]
    return cut + TRUNCATION_MARKER


def _truncateHtml(text: str, maxLength: int) -> str:
    tokenRe = re.compile(r"<[^<>]*>|&[#\w]+;|.", re.DOTALL)
    openTags: List[str] = []
    parts: List[str] = []
    length = 0

    for match in tokenRe.finditer(text):
        token = match.group(0)
        closing = "".join(f"</{name}>" for name in reversed(openTags))
        tagMatch = _HTML_ANY_TAG_RE.fullmatch(token)
        if tagMatch is not None and tagMatch.group(1):
            # Closing tags only shrink the required tail
            extra = 0
        else:
            extra = len(token)
            if tagMatch is not None:
                extra += len(tagMatch.group(2)) + 3

        if length + extra + len(closing) + len(TRUNCATION_MARKER) > maxLength:
            break

        parts.append(token)
        length += len(token)
        if tagMatch is not None:
            name = tagMatch.group(2)
            if tagMatch.group(1):
                if name in openTags:
                    idx = len(openTags) - 1 - openTags[::-1].index(name)
                    del openTags[idx]
            else:
                openTags.append(name)

    closing = "".join(f"</{name}>" for name in reversed(openTags))
    return "".join(parts) + TRUNCATION_MARKER + closing


def truncateFormatted(text: str, mode: FormattingMode, maxLength: int) -> str:
    """
    Truncate formatted text to maxLength characters with a trailing ellipsis.

    Escape sequences, HTML tags and entities are never cut in half and open
    HTML tags are closed.
    """
    if len(text) <= maxLength:
        return text

    match mode:
        case FormattingMode.MARKDOWN_V2:
            return _truncateMarkdownV2(text, maxLength)
        case FormattingMode.HTML:
            return _truncateHtml(text, maxLength)
        case _:
            return _truncatePlain(text, maxLength)


_CONVERTERS: Dict[FormattingMode, Callable[[str], str]] = {
    FormattingMode.MARKDOWN_V2: convertMarkdownToV2,
    FormattingMode.HTML: convertMarkdownToHtml,
    FormattingMode.PLAIN: stripMarkdown,
}


def formatHeader(header: str, mode: FormattingMode) -> str:
    """Render a bold header line for the given mode"""
    match mode:
        case FormattingMode.MARKDOWN_V2:
            return f"*{escapeMarkdownV2(header)}*"
        case FormattingMode.HTML:
            return f"<b>{escapeHtml(header)}</b>"
        case _:
            return header


def sanitizeResponse(
    text: str,
    mode: FormattingMode,
    header: Optional[str] = None,
    maxLength: int = 4096,
) -> str:
    """
    Make model output safe to send under the given formatting mode.

    Pure and deterministic: the same text and mode always give the same result.

    Args:
        text: Raw model output (markdown)
        mode: Target formatting mode
        header: Optional header put above the text
        maxLength: Maximum message length, longer results are truncated

    Returns:
        Sanitized text, at most maxLength characters long
    """
    body = _CONVERTERS[mode](text.strip())
    if header:
        body = f"{formatHeader(header, mode)}\n\n{body}"

    return truncateFormatted(body, mode, maxLength)
