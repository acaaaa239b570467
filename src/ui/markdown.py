"""Minimal markdown to HTML conversion for assistant messages."""

import re

_HEADING_CLASSES = {
    1: "text-2xl font-bold my-2",
    2: "text-xl font-bold my-2",
    3: "text-lg font-bold my-1",
}


def _render_code_block(match: re.Match[str]) -> str:
    language, code = match.group(1), match.group(2).rstrip("\n")
    lang_class = f' class="language-{language}"' if language else ""
    return (
        '<pre class="bg-gray-800 text-gray-100 rounded-lg p-3 my-2 overflow-x-auto text-xs">'
        f"<code{lang_class}>{code}</code></pre>"
    )


def _render_lists(text: str, pattern: str, tag: str, classes: str) -> str:
    lines = text.split("\n")
    in_list = False
    result = []
    for line in lines:
        stripped = line.strip()
        if re.match(pattern, stripped):
            if not in_list:
                result.append(f'<{tag} class="{classes}">')
                in_list = True
            item = re.sub(pattern, "", stripped)
            result.append(f"<li>{item}</li>")
        else:
            if in_list:
                result.append(f"</{tag}>")
                in_list = False
            result.append(line)
    if in_list:
        result.append(f"</{tag}>")
    return "\n".join(result)


def _render_link(match: re.Match[str]) -> str:
    label, url = match.group(1), match.group(2).strip()
    # Only web links become anchors; javascript:, data: and the like stay text
    if not re.match(r"https?://", url, flags=re.IGNORECASE):
        return label
    href = url.replace('"', "&quot;")
    return (
        f'<a href="{href}" class="text-blue-600 underline" target="_blank"'
        f' rel="noopener noreferrer">{label}</a>'
    )


def markdown_to_html(text: str) -> str:
    """Convert markdown to HTML for chat display.

    Supports: code blocks, inline code, headings (h1-h3), bold, italic,
    links, lists.
    """
    # Escape HTML entities first
    text = text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")

    # Code blocks (```lang\ncode```)
    text = re.sub(r"```(\w*)\n?([\s\S]*?)```", _render_code_block, text)

    # Inline code (`code`)
    text = re.sub(
        r"`([^`]+)`",
        r'<code class="bg-gray-200 text-pink-600 px-1.5 py-0.5 rounded text-xs">\1</code>',
        text,
    )

    # Headings (# to ###)
    def heading(match: re.Match[str]) -> str:
        level = len(match.group(1))
        return f'<h{level} class="{_HEADING_CLASSES[level]}">{match.group(2)}</h{level}>'

    text = re.sub(r"^(#{1,3})\s+(.+)$", heading, text, flags=re.MULTILINE)

    # Bold (**text** or __text__)
    text = re.sub(r"\*\*(.+?)\*\*", r"<strong>\1</strong>", text)
    text = re.sub(r"__(.+?)__", r"<strong>\1</strong>", text)

    # Italic (*text* or _text_)
    text = re.sub(r"\*([^*\n]+)\*", r"<em>\1</em>", text)
    text = re.sub(r"\b_([^_\n]+)_\b", r"<em>\1</em>", text)

    # Links [text](url)
    text = re.sub(r"\[([^\]]+)\]\(([^)]+)\)", _render_link, text)

    text = _render_lists(text, r"^[-*]\s+", "ul", "list-disc list-inside my-2 space-y-1")
    text = _render_lists(text, r"^\d+\.\s+", "ol", "list-decimal list-inside my-2 space-y-1")

    # Line breaks (preserve newlines as <br>)
    return text.replace("\n", "<br>")
