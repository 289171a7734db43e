# utils.py
import logging
import re
import sys
import unicodedata

HEX_DIGITS = re.compile(r"[0-9a-f]+")

# sample 对部分 Rust 符号只做了一半的还原，残留的转义序列
RUST_ESCAPES = {
    "SP": "@",
    "BP": "*",
    "RF": "&",
    "LT": "<",
    "GT": ">",
    "LP": "(",
    "RP": ")",
    "C": ",",
}

def setup_logging(level: int = logging.INFO):
    """配置全局日志记录器"""
    # 创建根日志记录器
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    # 避免重复添加处理器
    if root_logger.hasHandlers():
        return

    # 日志写到 stderr，stdout 留给折叠栈输出
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.DEBUG)

    # 定义日志格式
    formatter = logging.Formatter(
        '[%(asctime)s]-%(levelname)s- %(message)s',
        datefmt='%H:%M:%S'
    )
    console_handler.setFormatter(formatter)

    root_logger.addHandler(console_handler)

def _unescape_rust(escape: str) -> str | None:
    """还原单个 "$...$" 转义，无法识别时返回 None。"""
    if escape in RUST_ESCAPES:
        return RUST_ESCAPES[escape]
    digits = escape[1:]
    if not escape.startswith("u") or not HEX_DIGITS.fullmatch(digits):
        return None
    try:
        char = chr(int(digits, 16))
    except (ValueError, OverflowError):
        return None
    # 控制字符会破坏一行一条的输出，代理码点无法编码
    if unicodedata.category(char) in ("Cc", "Cs"):
        return None
    return char

def fix_partially_demangled_rust_symbol(symbol: str) -> str:
    """
    修正 sample 输出中只还原了一半的 Rust 符号，例如
    "_$LT$alloc..vec..Vec$LT$T$GT$$GT$::drop" -> "<alloc::vec::Vec<T>>::drop"。
    这不是通用的符号还原器；遇到无法识别的转义时停止处理，剩余部分原样保留。
    """
    if "$" not in symbol and ".." not in symbol:
        return symbol

    rest = symbol
    if rest.startswith("_$"):
        rest = rest[1:]

    parts = []
    while rest:
        if rest.startswith(".."):
            parts.append("::")
            rest = rest[2:]
        elif rest.startswith("$"):
            end = rest.find("$", 1)
            if end == -1:
                break
            unescaped = _unescape_rust(rest[1:end])
            if unescaped is None:
                break
            parts.append(unescaped)
            rest = rest[end + 1:]
        else:
            stop = len(rest)
            for marker in ("$", ".."):
                idx = rest.find(marker)
                if idx != -1:
                    stop = min(stop, idx)
            parts.append(rest[:stop])
            rest = rest[stop:]
    parts.append(rest)
    return "".join(parts)
