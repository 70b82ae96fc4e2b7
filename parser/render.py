from __future__ import annotations

from typing import Iterable, List

from lexer.token import Token
from parser.tree import Nonterminal, ParseNode

_INDENT = "  "

# 先替换 '&'，避免重复转义；换行写成字符引用，保证每个叶子只占一行
_ESCAPES = (
    ("&", "&amp;"),
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
    ("\r", "&#13;"),
    ("\n", "&#10;"),
)


def escape(text: str) -> str:
    for raw, entity in _ESCAPES:
        text = text.replace(raw, entity)
    return text


def format_leaf(token: Token) -> str:
    return f"<{token.kind}> {escape(token.text)} </{token.kind}>"


def render(node: ParseNode) -> str:
    """把语法树输出为带缩进的标签文本，每个节点一行。"""
    lines: List[str] = []
    _render_into(node, 0, lines)
    return "".join(line + "\n" for line in lines)


def _render_into(node: ParseNode, depth: int, lines: List[str]) -> None:
    pad = _INDENT * depth
    if isinstance(node, Nonterminal):
        lines.append(f"{pad}<{node.rule}>")
        for child in node.children:
            _render_into(child, depth + 1, lines)
        lines.append(f"{pad}</{node.rule}>")
    else:
        lines.append(pad + format_leaf(node.token))


def render_tokens(tokens: Iterable[Token]) -> str:
    """不缩进的 token 列表，外面包一层 <tokens> ... </tokens>。"""
    out = ["<tokens>\n"]
    out.extend(format_leaf(t) + "\n" for t in tokens)
    out.append("</tokens>\n")
    return "".join(out)
