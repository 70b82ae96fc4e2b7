from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, List, Tuple, Union

from lexer.token import Token


@dataclass(frozen=True)
class Terminal:
    token: Token

    @property
    def kind(self) -> str:
        return self.token.kind

    @property
    def text(self) -> str:
        return self.token.text


@dataclass(frozen=True)
class Nonterminal:
    rule: str
    children: Tuple["ParseNode", ...] = ()

    def child_rules(self) -> List[str]:
        return [c.rule for c in self.children if isinstance(c, Nonterminal)]

    def leaves(self) -> List[Terminal]:
        # 只取直接的终结符子节点
        return [c for c in self.children if isinstance(c, Terminal)]

    def find_all(self, rule: str) -> List["Nonterminal"]:
        """本节点及其下所有标记为 ``rule`` 的非终结符，按出现顺序。"""
        out: List[Nonterminal] = []
        stack: List[Nonterminal] = [self]
        while stack:
            node = stack.pop()
            if node.rule == rule:
                out.append(node)
            stack.extend(c for c in reversed(node.children) if isinstance(c, Nonterminal))
        return out


ParseNode = Union[Terminal, Nonterminal]


def iter_terminals(node: ParseNode) -> Iterator[Token]:
    # 深度优先，从左到右
    stack: List[ParseNode] = [node]
    while stack:
        n = stack.pop()
        if isinstance(n, Terminal):
            yield n.token
        else:
            stack.extend(reversed(n.children))
