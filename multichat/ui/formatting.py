"""Lightweight markdown rendering for chat bubbles.

Assistant replies are rendered as HTML on every chunk, so the converter is
a handful of regex passes rather than a full markdown parser. User text is
only escaped.
"""

import html
import re

_CODE_BLOCK = re.compile(r"```(\w*)\n?([\s\S]*?)```")
_INLINE_CODE = re.compile(r"`([^`]+)`")
_BOLD = re.compile(r"\*\*(.+?)\*\*|__(.+?)__")
# Single line only, so "* item" bullets are not taken for emphasis
_ITALIC = re.compile(r"\*(?!\s)([^*\n]+)\*|\b_([^_\n]+)_\b")
_LINK = re.compile(r"\[([^\]]+)\]\(([^)]+)\)")
_BULLET_ITEM = re.compile(r"^[-*]\s+")
_NUMBERED_ITEM = re.compile(r"^\d+\.\s+")

_CODE_BLOCK_HTML = (
    r'<pre class="bg-gray-800 text-gray-100 rounded-lg p-3 my-2 '
    r'overflow-x-auto text-xs"><code>\2</code></pre>'
)
_INLINE_CODE_HTML = (
    r'<code class="bg-gray-200 text-pink-600 px-1.5 py-0.5 rounded text-xs">\1</code>'
)
_LINK_CLASSES = "text-blue-600 underline"
_SAFE_URL = re.compile(r"^(?:https?://|mailto:)", re.IGNORECASE)


def _first_group(match: re.Match[str]) -> str:
    return next(group for group in match.groups() if group is not None)


def _render_link(match: re.Match[str]) -> str:
    """Render a link, or only its label when the URL scheme is not allowed."""
    label, url = match.group(1), match.group(2).strip()
    if not _SAFE_URL.match(url):
        return label
    return f'<a href="{url}" class="{_LINK_CLASSES}" target="_blank" rel="noopener">{label}</a>'


def _wrap_lists(text: str, item: re.Pattern[str], tag: str, classes: str) -> str:
    """Wrap runs of consecutive list lines in ``<tag>`` with ``<li>`` items."""
    result: list[str] = []
    in_list = False
    for line in text.split("\n"):
        stripped = line.strip()
        if item.match(stripped):
            if not in_list:
                result.append(f'<{tag} class="{classes}">')
                in_list = True
            result.append(f"<li>{item.sub('', stripped)}</li>")
            continue
        if in_list:
            result.append(f"</{tag}>")
            in_list = False
        result.append(line)
    if in_list:
        result.append(f"</{tag}>")
    return "\n".join(result)


def markdown_to_html(text: str) -> str:
    """Convert markdown to HTML for chat display.

    Supports: bold, italic, inline code, code blocks, links, lists.
    Input is HTML-escaped first, quotes included, and links are emitted only
    for http, https and mailto URLs, so model output cannot inject markup.
    """
    text = html.escape(text)

    text = _CODE_BLOCK.sub(_CODE_BLOCK_HTML, text)
    text = _INLINE_CODE.sub(_INLINE_CODE_HTML, text)
    text = _BOLD.sub(lambda m: f"<strong>{_first_group(m)}</strong>", text)
    text = _ITALIC.sub(lambda m: f"<em>{_first_group(m)}</em>", text)
    text = _LINK.sub(_render_link, text)

    text = _wrap_lists(text, _BULLET_ITEM, "ul", "list-disc list-inside my-2 space-y-1")
    text = _wrap_lists(text, _NUMBERED_ITEM, "ol", "list-decimal list-inside my-2 space-y-1")

    return text.replace("\n", "<br>")


def plain_to_html(text: str) -> str:
    """Escape user text and keep its line breaks."""
    return html.escape(text).replace("\n", "<br>")
