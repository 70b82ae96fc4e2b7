from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import List, Optional, Tuple

from lexer.errors import LexicalError
from lexer.stream import TokenStream
from lexer.token import (
    BLOCK_COMMENT,
    IDENTIFIER,
    INT_CONST,
    KEYWORD,
    KEYWORDS,
    LINE_COMMENT,
    MAX_INT_CONST,
    STRING_CONST,
    SYMBOL,
    SYMBOLS,
    Token,
)

log = logging.getLogger(__name__)

_DIGITS = frozenset("0123456789")

# 扫描结果：token（不产生 token 时为 None）以及它之后的偏移量
_Scan = Tuple[Optional[Token], int]


@dataclass
class JackLexer:
    keep_comments: bool = False

    def analyze(self, source_code: str) -> List[Token]:
        tokens: List[Token] = []
        position = 0
        line = 1
        column = 1

        while position < len(source_code):
            current_char = source_code[position]

            if current_char == "/":
                token, end = self._process_slash(source_code, position, line, column)
            elif current_char.isalpha() or current_char == "_":
                token, end = self._process_word(source_code, position, line, column)
            elif current_char in SYMBOLS:
                token, end = Token(SYMBOL, current_char, position, line, column), position + 1
            elif current_char in _DIGITS:
                token, end = self._process_integer(source_code, position, line, column)
            elif current_char == '"':
                token, end = self._process_string_literal(source_code, position, line, column)
            else:
                # 空白和无法识别的字符只起分隔作用
                token, end = None, position + 1

            line, column = self._calculate_new_position(source_code[position:end], line, column)
            if token is not None and (self.keep_comments or not token.is_comment()):
                tokens.append(replace(token, end_offset=end, end_line=line, end_column=column))
            position = end

        log.debug("词法分析完成：%d 个字符，%d 个 token", len(source_code), len(tokens))
        return tokens

    @staticmethod
    def _calculate_new_position(text: str, current_line: int, current_column: int) -> Tuple[int, int]:
        line = current_line
        column = current_column
        for c in text:
            if c == "\n":
                line += 1
                column = 1
            else:
                column += 1
        return line, column

    @staticmethod
    def _process_slash(source_code: str, position: int, line: int, column: int) -> _Scan:
        nxt = source_code[position + 1] if position + 1 < len(source_code) else ""
        if nxt == "/":
            end = source_code.find("\n", position + 2)
            if end < 0:
                end = len(source_code)
            return Token(LINE_COMMENT, source_code[position + 2:end], position, line, column), end
        if nxt == "*":
            close = source_code.find("*/", position + 2)
            if close < 0:
                raise LexicalError("块注释未闭合", position, line, column)
            return Token(BLOCK_COMMENT, source_code[position + 2:close], position, line, column), close + 2
        return Token(SYMBOL, "/", position, line, column), position + 1

    @staticmethod
    def _process_word(source_code: str, position: int, line: int, column: int) -> _Scan:
        end = position + 1
        while end < len(source_code):
            c = source_code[end]
            if c.isspace() or c in SYMBOLS or c == '"':
                break
            end += 1
        word = source_code[position:end]
        kind = KEYWORD if word in KEYWORDS else IDENTIFIER
        return Token(kind, word, position, line, column), end

    @staticmethod
    def _process_integer(source_code: str, position: int, line: int, column: int) -> _Scan:
        end = position + 1
        while end < len(source_code) and source_code[end] in _DIGITS:
            end += 1
        digits = source_code[position:end].lstrip("0") or "0"
        # 先按位数判断，超长数字串不做 int 转换
        if len(digits) > len(str(MAX_INT_CONST)) or int(digits) > MAX_INT_CONST:
            shown = digits if len(digits) <= 20 else f"{digits[:20]}...（共 {len(digits)} 位）"
            raise LexicalError(
                f"整数常量 {shown} 超出范围（最大 {MAX_INT_CONST}）", position, line, column
            )
        value = int(digits)
        return Token(INT_CONST, value, position, line, column), end

    @staticmethod
    def _process_string_literal(source_code: str, position: int, line: int, column: int) -> _Scan:
        close = source_code.find('"', position + 1)
        if close < 0:
            raise LexicalError("字符串常量未闭合", position, line, column)
        return Token(STRING_CONST, source_code[position + 1:close], position, line, column), close + 1


def tokenize(source: str, keep_comments: bool = False) -> TokenStream:
    return TokenStream(JackLexer(keep_comments=keep_comments).analyze(source))
