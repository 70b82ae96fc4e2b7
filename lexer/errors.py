from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass
class LexicalError(Exception):
    message: str
    offset: int
    line: int
    column: int

    def __str__(self) -> str:
        return f"词法错误 @ 行{self.line},列{self.column}（偏移 {self.offset}）: {self.message}"


@dataclass
class TokenKindError(Exception):
    # 期望的 token 类别，多个时用 " or " 连接
    expected: str
    token: Any

    def __str__(self) -> str:
        return f"token 类别不匹配: 期望 {self.expected}，得到 {self.token}"


@dataclass
class StreamExhaustedError(Exception):
    index: int

    def __str__(self) -> str:
        return f"没有当前 token: 游标 {self.index} 已越过 token 流末尾"
