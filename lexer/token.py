from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from lexer.errors import TokenKindError

# token 类别同时也是输出树中叶子节点的标签名
KEYWORD = "keyword"
SYMBOL = "symbol"
IDENTIFIER = "identifier"
INT_CONST = "integerConstant"
STRING_CONST = "stringConstant"
LINE_COMMENT = "lineComment"
BLOCK_COMMENT = "blockComment"

KEYWORDS = frozenset(
    {
        "class", "constructor", "function", "method", "field", "static", "var",
        "int", "char", "boolean", "void", "true", "false", "null", "this",
        "let", "do", "if", "else", "while", "return",
    }
)

SYMBOLS = frozenset("{}()[].,;+-*/&|<>=~")

COMMENT_KINDS = frozenset({LINE_COMMENT, BLOCK_COMMENT})

# 语言允许的最大整数常量（15 位）
MAX_INT_CONST = 32767


@dataclass(frozen=True)
class Token:
    kind: str
    value: Union[str, int]
    offset: int
    line: int
    column: int
    # 词法分析器记录的结束位置（不含）；手工构造的 token 可以省略
    end_offset: Optional[int] = None
    end_line: Optional[int] = None
    end_column: Optional[int] = None

    def __str__(self) -> str:
        return f"<{self.kind}, '{self.text}'> at {self.line}:{self.column}"

    @property
    def text(self) -> str:
        return str(self.value)

    def is_keyword(self, *words: str) -> bool:
        return self.kind == KEYWORD and (not words or self.value in words)

    def is_symbol(self, *chars: str) -> bool:
        return self.kind == SYMBOL and (not chars or self.value in chars)

    def is_comment(self) -> bool:
        return self.kind in COMMENT_KINDS

    def _require(self, *kinds: str) -> None:
        if self.kind not in kinds:
            raise TokenKindError(expected=" or ".join(kinds), token=self)

    def keyword(self) -> str:
        self._require(KEYWORD)
        return self.value

    def symbol(self) -> str:
        self._require(SYMBOL)
        return self.value

    def identifier(self) -> str:
        self._require(IDENTIFIER)
        return self.value

    def int_value(self) -> int:
        self._require(INT_CONST)
        return self.value

    def string_value(self) -> str:
        self._require(STRING_CONST)
        return self.value

    def comment_text(self) -> str:
        self._require(LINE_COMMENT, BLOCK_COMMENT)
        return self.value
