from __future__ import annotations

from typing import Iterable, Optional, Tuple, Union

from lexer.errors import StreamExhaustedError
from lexer.token import Token


class TokenStream:
    """有序 token 序列 + 单个只进不退的游标。

    游标初始位于第一个 token 之前：第一次 ``advance()`` 落在 token 0 上，
    之后每次前进一个。第一次 advance 之前读取当前 token 同样得到 token 0。
    """

    def __init__(self, tokens: Iterable[Token]):
        self._tokens: Tuple[Token, ...] = tuple(tokens)
        # 当前 token 的索引
        self._i = 0
        self._primed = False

    def __len__(self) -> int:
        return len(self._tokens)

    @property
    def primed(self) -> bool:
        return self._primed

    def tokens(self) -> Tuple[Token, ...]:
        return self._tokens

    def index(self) -> int:
        return self._i

    def has_more_tokens(self) -> bool:
        return self._i < len(self._tokens)

    def advance(self) -> None:
        if not self._primed:
            self._primed = True
            return
        if self._i < len(self._tokens):
            self._i += 1

    def current(self) -> Token:
        if not self.has_more_tokens():
            raise StreamExhaustedError(index=self._i)
        return self._tokens[self._i]

    # 看当前之后第 k 个 token，不移动游标；越界返回 None
    def peek(self, k: int = 0) -> Optional[Token]:
        idx = self._i + k
        if idx < 0 or idx >= len(self._tokens):
            return None
        return self._tokens[idx]

    def end_position(self) -> Tuple[int, int, int]:
        """最后一个 token 之后的位置 (offset, line, column)。"""
        if not self._tokens:
            return 0, 1, 1
        last = self._tokens[-1]
        if last.end_offset is not None:
            return last.end_offset, last.end_line, last.end_column
        # 手工构造、没有结束位置的 token：按字面文本长度估算
        width = max(1, len(last.text))
        return last.offset + width, last.line, last.column + width

    # ---------------- 按类别读取 ----------------
    def token_kind(self) -> str:
        return self.current().kind

    def keyword(self) -> str:
        return self.current().keyword()

    def symbol(self) -> str:
        return self.current().symbol()

    def identifier(self) -> str:
        return self.current().identifier()

    def int_value(self) -> int:
        return self.current().int_value()

    def string_value(self) -> str:
        return self.current().string_value()

    def comment_text(self) -> str:
        return self.current().comment_text()

    def value(self) -> Union[str, int]:
        return self.current().value
