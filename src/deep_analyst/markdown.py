"""
Small Markdown to HTML formatter for generated reports.

This is a fixed sequence of regex substitutions, not a Markdown parser: it
knows headings (``#`` to ``###``), ``**bold**``, ``*``/``-`` list items and
pipe-delimited table rows. Everything else is treated as paragraph text.
The source text is not escaped.
"""

import re
from typing import List

_H1 = re.compile(r"^# (.*)$", re.M)
_H2 = re.compile(r"^## (.*)$", re.M)
_H3 = re.compile(r"^### (.*)$", re.M)
_BOLD = re.compile(r"\*\*(.*?)\*\*")
_LIST_ITEM = re.compile(r"^[*-] (.*)$", re.M)
_TABLE_ROW = re.compile(r"^[ \t]*\|(.+)\|[ \t]*(?:\n|$)", re.M)
_SEPARATOR_CELL = re.compile(r"^\s*:?-+:?\s*$")

_LIST_RUN = re.compile(r"^<li\b[^\n]*</li>(?:\n<li\b[^\n]*</li>)*$", re.M)
_ROW_RUN = re.compile(r"^<tr\b[^\n]*</tr>(?:\n<tr\b[^\n]*</tr>)*$", re.M)
_BLANK_LINE = re.compile(r"\n[ \t]*\n")
_BLOCK_LINE = re.compile(r"^<(?:h[1-3]|ul|div)\b")

H1_TAG = '<h1 class="text-3xl font-bold mt-8 mb-4">'
H2_TAG = '<h2 class="text-2xl font-bold mt-8 mb-4 border-b pb-2 text-indigo-900">'
H3_TAG = '<h3 class="text-xl font-bold mt-6 mb-3 text-slate-800">'
LI_TAG = '<li class="ml-4 list-disc mb-1">'
TR_TAG = '<tr class="border-b border-slate-100">'
TD_TAG = '<td class="p-3 border-r border-slate-100">'
UL_TAG = '<ul class="mb-6 space-y-1">'
TABLE_OPEN = (
    '<div class="overflow-x-auto mb-8">'
    '<table class="w-full border-collapse border border-slate-200 bg-white rounded-lg shadow-sm">'
)
TABLE_CLOSE = "</table></div>"
P_TAG = '<p class="mb-4 leading-relaxed text-slate-700">'


def _table_row(match: re.Match) -> str:
    cells = [c.strip() for c in match.group(1).split("|") if c.strip()]
    newline = "\n" if match.group(0).endswith("\n") else ""
    # |---|:--:| alignment rows and rows without cells produce nothing
    if not cells or all(_SEPARATOR_CELL.match(c) for c in cells):
        return ""
    tds = "".join(f"{TD_TAG}{c}</td>" for c in cells)
    return f"{TR_TAG}{tds}</tr>{newline}"


def _paragraphs(html: str) -> str:
    out: List[str] = []
    for block in _BLANK_LINE.split(html):
        pending: List[str] = []
        for line in block.strip("\n").split("\n"):
            if _BLOCK_LINE.match(line):
                if pending:
                    out.append(P_TAG + "<br />".join(pending) + "</p>")
                    pending = []
                out.append(line)
            elif line.strip():
                pending.append(line)
        if pending:
            out.append(P_TAG + "<br />".join(pending) + "</p>")
    return "".join(out)


def format_markdown(text: str) -> str:
    """Render report Markdown to an HTML fragment."""
    if not text:
        return ""

    html = text.replace("\r\n", "\n")
    html = _H1.sub(lambda m: f"{H1_TAG}{m.group(1)}</h1>", html)
    html = _H2.sub(lambda m: f"{H2_TAG}{m.group(1)}</h2>", html)
    html = _H3.sub(lambda m: f"{H3_TAG}{m.group(1)}</h3>", html)
    html = _BOLD.sub(r"<strong>\1</strong>", html)
    html = _LIST_ITEM.sub(lambda m: f"{LI_TAG}{m.group(1)}</li>", html)
    html = _TABLE_ROW.sub(_table_row, html)

    html = _LIST_RUN.sub(lambda m: UL_TAG + m.group(0).replace("\n", "") + "</ul>", html)
    if "</td>" in html:
        html = _ROW_RUN.sub(lambda m: TABLE_OPEN + m.group(0).replace("\n", "") + TABLE_CLOSE, html)

    return _paragraphs(html)
