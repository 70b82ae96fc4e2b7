from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional

from lexer.token import Token


@dataclass
class ParseError(Exception):
    message: str
    line: int
    column: int
    # 出错时正在分析的文法规则
    rule: str

    def __str__(self) -> str:
        return f"语法错误 @ 行{self.line},列{self.column} <{self.rule}>: {self.message}"


def _expected_text(expected: Iterable[str]) -> str:
    exp = sorted(set(expected))
    if not exp:
        return ""
    return f"，期望: {', '.join(exp)}"


@dataclass
class UnexpectedToken(ParseError):
    token: Optional[Token] = None
    expected: Iterable[str] = field(default_factory=tuple)

    def __str__(self) -> str:
        got = f"{self.token.kind} '{self.token.text}'" if self.token is not None else "?"
        return f"{super().__str__()}（得到: {got}{_expected_text(self.expected)}）"


@dataclass
class UnexpectedEndOfInput(ParseError):
    expected: Iterable[str] = field(default_factory=tuple)

    def __str__(self) -> str:
        return f"{super().__str__()}（得到: 输入结束{_expected_text(self.expected)}）"


@dataclass
class NestingTooDeep(ParseError):
    limit: int = 0

    def __str__(self) -> str:
        return f"{super().__str__()}（嵌套上限 {self.limit}）"
