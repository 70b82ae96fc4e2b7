from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from lexer.jack_lexer import tokenize
from lexer.stream import TokenStream
from lexer.token import IDENTIFIER, INT_CONST, STRING_CONST, Token
from parser.errors import NestingTooDeep, ParseError, UnexpectedEndOfInput, UnexpectedToken
from parser.tree import Nonterminal, ParseNode, Terminal

log = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 256

_CLASS_VAR_KINDS = ("static", "field")
_SUBROUTINE_KINDS = ("constructor", "function", "method")
_PRIMITIVE_TYPES = ("int", "char", "boolean")
_KEYWORD_CONSTANTS = ("true", "false", "null", "this")
_UNARY_OPS = ("-", "~")

# 语句关键字 -> 对应的分析方法
_STATEMENTS = {
    "let": "parse_let_statement",
    "if": "parse_if_statement",
    "while": "parse_while_statement",
    "do": "parse_do_statement",
    "return": "parse_return_statement",
}

_TERM_START = (
    INT_CONST,
    STRING_CONST,
    IDENTIFIER,
    *(f"'{k}'" for k in _KEYWORD_CONSTANTS),
    "'('",
    *(f"'{op}'" for op in _UNARY_OPS),
)


class RDParser:
    """递归下降分析器：每条文法规则对应一个 ``parse_<rule>`` 方法。

    每个方法恰好消费本规则的 token，返回构造出的 ``Nonterminal``，
    并把它挂到调用它的规则下面。token 之间遇到的注释 token
    作为当时正在分析的规则的子节点。
    """

    def __init__(self, stream: TokenStream, max_depth: int = DEFAULT_MAX_DEPTH):
        self.s = stream
        self.max_depth = max_depth
        self.parse_trace: List[str] = []
        self._indent = 0
        # 每个尚未结束的规则一个列表，收集已分析出的子节点
        self._frames: List[List[ParseNode]] = []
        self._rules: List[str] = []
        if not self.s.primed:
            self.s.advance()

    # ---------------- trace / 建树辅助 ----------------
    def _log(self, msg: str) -> None:
        line = "  " * self._indent + msg
        self.parse_trace.append(line)
        if log.isEnabledFor(logging.DEBUG):
            log.debug(line)

    def _enter(self, rule: str) -> None:
        if len(self._rules) >= self.max_depth:
            line, column = self._position()
            raise NestingTooDeep(
                message="规则嵌套过深",
                line=line,
                column=column,
                rule=rule,
                limit=self.max_depth,
            )
        self._log(f"enter <{rule}>")
        self._indent += 1
        self._rules.append(rule)
        self._frames.append([])

    def _leave(self) -> Nonterminal:
        rule = self._rules.pop()
        node = Nonterminal(rule, tuple(self._frames.pop()))
        if self._frames:
            self._frames[-1].append(node)
        self._indent = max(0, self._indent - 1)
        self._log(f"leave <{rule}>")
        return node

    # ---------------- token 辅助 ----------------
    def _position(self):
        if self.s.has_more_tokens():
            tok = self.s.current()
            return tok.line, tok.column
        _, line, column = self.s.end_position()
        return line, column

    def _peek(self) -> Optional[Token]:
        while self.s.has_more_tokens() and self.s.current().is_comment():
            self._take()
        if not self.s.has_more_tokens():
            return None
        return self.s.current()

    def _take(self) -> Token:
        tok = self.s.current()
        self._frames[-1].append(Terminal(tok))
        self._log(f"match {tok.kind} ({tok.text})")
        self.s.advance()
        return tok

    def _unexpected(self, expected: Iterable[str]) -> ParseError:
        tok = self._peek()
        rule = self._rules[-1] if self._rules else "?"
        if tok is None:
            _, line, column = self.s.end_position()
            return UnexpectedEndOfInput(
                message="规则尚未完整，输入已结束",
                line=line,
                column=column,
                rule=rule,
                expected=tuple(expected),
            )
        return UnexpectedToken(
            message="终结符不匹配",
            line=tok.line,
            column=tok.column,
            rule=rule,
            token=tok,
            expected=tuple(expected),
        )

    def _at_keyword(self, *words: str) -> bool:
        tok = self._peek()
        return tok is not None and tok.is_keyword(*words)

    def _at_symbol(self, *chars: str) -> bool:
        tok = self._peek()
        return tok is not None and tok.is_symbol(*chars)

    def _match_symbol(self, ch: str) -> Optional[Token]:
        if self._at_symbol(ch):
            return self._take()
        return None

    def _expect_keyword(self, *words: str) -> Token:
        if not self._at_keyword(*words):
            raise self._unexpected(f"'{w}'" for w in words)
        return self._take()

    def _expect_symbol(self, ch: str, also: Iterable[str] = ()) -> Token:
        if not self._at_symbol(ch):
            raise self._unexpected([f"'{ch}'", *also])
        return self._take()

    def _expect_identifier(self) -> Token:
        tok = self._peek()
        if tok is None or tok.kind != IDENTIFIER:
            raise self._unexpected([IDENTIFIER])
        return self._take()

    def _type(self, allow_void: bool = False) -> Token:
        words = _PRIMITIVE_TYPES + (("void",) if allow_void else ())
        tok = self._peek()
        if tok is not None and (tok.kind == IDENTIFIER or tok.is_keyword(*words)):
            return self._take()
        raise self._unexpected([*(f"'{w}'" for w in words), IDENTIFIER])

    # ---------------- 程序结构 ----------------
    def parse_class(self) -> Nonterminal:
        self._enter("class")
        self._expect_keyword("class")
        self._expect_identifier()
        self._expect_symbol("{")
        while self._at_keyword(*_CLASS_VAR_KINDS):
            self.parse_class_var_dec()
        while self._at_keyword(*_SUBROUTINE_KINDS):
            self.parse_subroutine_dec()
        self._expect_symbol("}", also=(f"'{k}'" for k in _SUBROUTINE_KINDS))
        if self._peek() is not None:
            raise self._unexpected(["EOF"])
        return self._leave()

    def parse_class_var_dec(self) -> Nonterminal:
        self._enter("classVarDec")
        self._expect_keyword(*_CLASS_VAR_KINDS)
        self._type()
        self._expect_identifier()
        while self._match_symbol(","):
            self._expect_identifier()
        self._expect_symbol(";", also=["','"])
        return self._leave()

    def parse_subroutine_dec(self) -> Nonterminal:
        self._enter("subroutineDec")
        self._expect_keyword(*_SUBROUTINE_KINDS)
        self._type(allow_void=True)
        self._expect_identifier()
        self._expect_symbol("(")
        self.parse_parameter_list()
        self._expect_symbol(")", also=["','"])
        self.parse_subroutine_body()
        return self._leave()

    def parse_parameter_list(self) -> Nonterminal:
        self._enter("parameterList")
        if self._peek() is not None and not self._at_symbol(")"):
            self._type()
            self._expect_identifier()
            while self._match_symbol(","):
                self._type()
                self._expect_identifier()
        return self._leave()

    def parse_subroutine_body(self) -> Nonterminal:
        self._enter("subroutineBody")
        self._expect_symbol("{")
        while self._at_keyword("var"):
            self.parse_var_dec()
        self.parse_statements()
        self._expect_symbol("}", also=(f"'{k}'" for k in _STATEMENTS))
        return self._leave()

    def parse_var_dec(self) -> Nonterminal:
        self._enter("varDec")
        self._expect_keyword("var")
        self._type()
        self._expect_identifier()
        while self._match_symbol(","):
            self._expect_identifier()
        self._expect_symbol(";", also=["','"])
        return self._leave()

    # ---------------- 语句 ----------------
    def parse_statements(self) -> Nonterminal:
        self._enter("statements")
        while True:
            tok = self._peek()
            if tok is None or not tok.is_keyword(*_STATEMENTS):
                break
            getattr(self, _STATEMENTS[tok.value])()
        return self._leave()

    def parse_let_statement(self) -> Nonterminal:
        # 不支持下标赋值（let a[i] = ...）
        self._enter("letStatement")
        self._expect_keyword("let")
        self._expect_identifier()
        self._expect_symbol("=")
        self.parse_expression()
        self._expect_symbol(";")
        return self._leave()

    def parse_if_statement(self) -> Nonterminal:
        self._enter("ifStatement")
        self._condition_and_block("if")
        return self._leave()

    def parse_while_statement(self) -> Nonterminal:
        self._enter("whileStatement")
        self._condition_and_block("while")
        return self._leave()

    def _condition_and_block(self, keyword: str) -> None:
        self._expect_keyword(keyword)
        self._expect_symbol("(")
        self.parse_expression()
        self._expect_symbol(")")
        # 语句块只接受空的 { }
        self._expect_symbol("{")
        self._expect_symbol("}")

    def parse_do_statement(self) -> Nonterminal:
        self._enter("doStatement")
        self._expect_keyword("do")
        self._expect_identifier()
        qualified = self._match_symbol(".") is not None
        if qualified:
            self._expect_identifier()
        self._expect_symbol("(", also=() if qualified else ["'.'"])
        self.parse_expression_list()
        self._expect_symbol(")", also=["','"])
        self._expect_symbol(";")
        return self._leave()

    def parse_return_statement(self) -> Nonterminal:
        self._enter("returnStatement")
        self._expect_keyword("return")
        if not self._at_symbol(";"):
            self.parse_expression()
        self._expect_symbol(";")
        return self._leave()

    # ---------------- 表达式 ----------------
    def parse_expression(self) -> Nonterminal:
        # 表达式只有一个 term，不含二元运算符
        self._enter("expression")
        self.parse_term()
        return self._leave()

    def parse_term(self) -> Nonterminal:
        self._enter("term")
        tok = self._peek()
        if tok is None:
            raise self._unexpected(_TERM_START)
        if tok.kind in (INT_CONST, STRING_CONST) or tok.is_keyword(*_KEYWORD_CONSTANTS):
            self._take()
        elif tok.kind == IDENTIFIER:
            self._take()
            if self._match_symbol("["):
                self.parse_expression()
                self._expect_symbol("]")
        elif tok.is_symbol("("):
            self._take()
            self.parse_expression()
            self._expect_symbol(")")
        elif tok.is_symbol(*_UNARY_OPS):
            self._take()
            self.parse_term()
        else:
            raise self._unexpected(_TERM_START)
        return self._leave()

    def parse_expression_list(self) -> Nonterminal:
        self._enter("expressionList")
        if self._peek() is not None and not self._at_symbol(")"):
            self.parse_expression()
            while self._match_symbol(","):
                self.parse_expression()
        return self._leave()


def parse_class(stream: TokenStream, max_depth: int = DEFAULT_MAX_DEPTH) -> Nonterminal:
    return RDParser(stream, max_depth=max_depth).parse_class()


def parse(source: str, keep_comments: bool = False, max_depth: int = DEFAULT_MAX_DEPTH) -> Nonterminal:
    """对 ``source`` 做词法分析，并作为单个 class 进行语法分析。"""
    return parse_class(tokenize(source, keep_comments=keep_comments), max_depth=max_depth)
