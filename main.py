from __future__ import annotations

import argparse
import logging
import sys
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from lexer.errors import LexicalError, TokenKindError
from lexer.jack_lexer import JackLexer
from lexer.stream import TokenStream
from parser.errors import ParseError
from parser.rd_parser import DEFAULT_MAX_DEPTH, RDParser
from parser.render import render, render_tokens

log = logging.getLogger("jack_syntax")

EXIT_OK = 0
EXIT_SYNTAX_ERROR = 1
EXIT_IO_ERROR = 2

_BOMS = (
    (b"\x00\x00\xFE\xFF", "utf-32-be"),
    (b"\xFF\xFE\x00\x00", "utf-32-le"),
    (b"\xEF\xBB\xBF", "utf-8-sig"),
    (b"\xFE\xFF", "utf-16-be"),
    (b"\xFF\xFE", "utf-16-le"),
)


def detect_file_encoding(data: bytes) -> Optional[str]:
    # 长的 BOM 放前面：utf-32-le 的 BOM 以 utf-16-le 的 BOM 开头
    for bom, encoding in _BOMS:
        if data.startswith(bom):
            return encoding
    return None


def read_source_file(path: Path) -> str:
    data = path.read_bytes()
    encoding = detect_file_encoding(data)
    log.info("读取 %s（编码: %s，%d 字节）", path, encoding or "UTF-8 (默认)", len(data))
    text = data.decode(encoding or "utf-8")
    if encoding in ("utf-16-be", "utf-16-le", "utf-32-be", "utf-32-le"):
        text = text.lstrip("\ufeff")
    return text


def get_output_file_path(source_file: Path, tokens_only: bool = False) -> Path:
    suffix = "T.xml" if tokens_only else ".xml"
    return source_file.with_name(f"{source_file.stem}{suffix}")


def get_parser_log_file_path(source_file: Path) -> Path:
    return source_file.with_name(f"{source_file.stem}_parser_log.txt")


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="jack-syntax",
        description="对 Jack 类做词法与语法分析，把语法树输出为标签文本。",
    )
    parser.add_argument("source", help=".jack 源文件路径。")
    parser.add_argument("-o", "--output", help="输出路径（默认: 源文件同目录下的 <文件名>.xml）。")
    parser.add_argument(
        "--keep-comments",
        action="store_true",
        help="保留行注释和块注释，作为 token 输出。",
    )
    parser.add_argument(
        "--tokens",
        action="store_true",
        help="输出 token 列表，而不是语法树。",
    )
    parser.add_argument(
        "--trace",
        action="store_true",
        help="同时把递归下降解析日志写入 <文件名>_parser_log.txt。",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=DEFAULT_MAX_DEPTH,
        help=f"文法规则最大嵌套层数（默认: {DEFAULT_MAX_DEPTH}）。",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="输出调试日志。")
    return parser


@dataclass(frozen=True)
class AnalysisResult:
    output: str
    parse_trace: List[str] = field(default_factory=list)


def analyze(source_code: str, keep_comments: bool = False, tokens_only: bool = False,
            max_depth: int = DEFAULT_MAX_DEPTH) -> AnalysisResult:
    lexer = JackLexer(keep_comments=keep_comments)
    start = time.time()
    tokens = lexer.analyze(source_code)
    log.info("词法分析完成：%d 个 token，耗时 %dms", len(tokens), int((time.time() - start) * 1000))

    if tokens_only:
        return AnalysisResult(output=render_tokens(tokens))

    parser = RDParser(TokenStream(tokens), max_depth=max_depth)
    start = time.time()
    tree = parser.parse_class()
    log.info("语法分析完成，耗时 %dms", int((time.time() - start) * 1000))
    return AnalysisResult(output=render(tree), parse_trace=parser.parse_trace)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    source_file = Path(args.source).expanduser()
    if not source_file.is_file():
        log.error("源文件不存在: %s", source_file.resolve())
        return EXIT_IO_ERROR

    try:
        source_code = read_source_file(source_file)
    except (OSError, UnicodeDecodeError) as e:
        log.error("读取文件错误 %s: %s", source_file, e)
        return EXIT_IO_ERROR

    try:
        result = analyze(
            source_code,
            keep_comments=args.keep_comments,
            tokens_only=args.tokens,
            max_depth=args.max_depth,
        )
    except (LexicalError, ParseError, TokenKindError) as e:
        print(f"{source_file}: {e}", file=sys.stderr)
        return EXIT_SYNTAX_ERROR

    output_path = Path(args.output) if args.output else get_output_file_path(source_file, args.tokens)
    try:
        output_path.write_text(result.output, encoding="utf-8")
        log.info("结果已保存到: %s", output_path.resolve())
        if args.trace:
            trace_path = get_parser_log_file_path(source_file)
            trace_path.write_text("\n".join(result.parse_trace) + "\n", encoding="utf-8")
            log.info("递归下降日志已保存到: %s", trace_path.resolve())
    except OSError as e:
        log.error("保存输出文件错误: %s", e)
        return EXIT_IO_ERROR

    return EXIT_OK


def run() -> None:
    raise SystemExit(main(sys.argv[1:]))


if __name__ == "__main__":
    run()
