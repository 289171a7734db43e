"""
Copyright (c) 2026, Chen Jie, Joungtao, Xuzheng Jiang
All rights reserved.
This source code is licensed under the BSD-2-Clause license found in the
LICENSE file in the root directory of this source tree.
"""

# parser_core.py
import io
import os
import sys
import logging
from typing import Iterable, Iterator, TextIO

import zstandard as zstd

from Collapser.common_types import CallStack, FoldedStack, Options, fold_stack, make_frame
from Collapser.occurrences import Occurrences
from Collapser.utils import fix_partially_demangled_rust_symbol

logger = logging.getLogger(__name__)

# 等待/空闲线程的叶子符号，以这些符号结尾的调用路径不输出，
# 这样图中只剩下真正在运行的线程
IGNORE_SYMBOLS = (
    "__psynch_cvwait",
    "__select",
    "__semwait_signal",
    "__ulock_wait",
    "__wait4",
    "__workq_kernreturn",
    "kevent",
    "mach_msg_trap",
    "read",
    "semaphore_wait_trap",
)

START_LINE = "Call graph:" # 调用图从这一行之后开始
END_LINE = "Total number in stack" # 调用图之后的段落以这一行开头
LINE_PREFIX = "    " # 调用图中每一行都以 4 个空格开头
INDENT_CHARS = frozenset(" +|:!")
MODULE_MARKER = "(in "
DYLIB_SUFFIX = ".dylib"
ZSTD_SUFFIX = ".zst"


def open_sample_file(path: str | os.PathLike) -> TextIO:
    """
    以文本流的方式打开 sample 输出文件。
    以 .zst 结尾的文件通过 zstd 流式解压，不会一次性读入内存。
    """
    if os.fspath(path).endswith(ZSTD_SUFFIX):
        dctx = zstd.ZstdDecompressor()
        reader = dctx.stream_reader(open(path, "rb"), closefd=True)
        return io.TextIOWrapper(reader, encoding="utf-8", errors="replace")
    return open(path, "r", encoding="utf-8", errors="replace")


def line_parts(line: str, no_modules: bool = False) -> tuple[str, str, str] | None:
    """
    从去掉缩进后的调用图行中提取 (样本数, 函数名, 模块名)。
    Args:
        line (str): 形如 "4282 _pthread_wqthread  (in libsystem_pthread.dylib) + 1 [0x1]" 的文本。
        no_modules (bool): 为 True 时不提取模块名。
    Returns:
        tuple | None: 无法拆分出样本数和剩余部分时返回 None；模块名提取失败时为空字符串。
    """
    fields = line.split(None, 1)
    if len(fields) < 2:
        return None
    samples, rest = fields

    open_idx = rest.find("(")
    func = (rest if open_idx == -1 else rest[:open_idx]).rstrip()

    module = ""
    if not no_modules:
        # 模块显示为 "(in libfoo.dylib)" 或 "(in AppKit)"
        start = rest.rfind(MODULE_MARKER)
        if start != -1:
            close = rest.find(")", start)
            if close != -1:
                module = rest[start + len(MODULE_MARKER):close]
        # ".dylib" 后缀没有区分意义，去掉
        if module.endswith(DYLIB_SUFFIX):
            module = module[:-len(DYLIB_SUFFIX)]

    return samples, func, module


def _indent_length(text: str) -> int | None:
    """返回开头缩进字符的个数；整行都是缩进字符时返回 None。"""
    for idx, char in enumerate(text):
        if char not in INDENT_CHARS:
            return idx
    return None


class SampleFolder:
    """
    macOS `sample` 输出的调用栈折叠器。
    用显式的栈跟踪调用图的缩进深度，每遇到一个叶子节点就输出一条折叠栈。
    同一个实例可以依次处理多份输入，但不能被多个调用者同时使用。
    """

    def __init__(self, options: Options | None = None):
        self.opt = options or Options()
        self.current_samples = 0 # 当前栈顶栈帧的样本数
        self.stack: CallStack = [] # 目前为止栈上的函数

    def reset(self):
        """清空调用栈和样本数，为下一份输入做准备。"""
        self.current_samples = 0
        self.stack.clear()

    def is_applicable(self, text: str) -> bool | None:
        """
        检查一段输入前缀中是否有调用图的开始行和结束行。
        Returns:
            bool | None: 先出现开始行再出现结束行时返回 True；
            没有开始行就出现结束行时返回 False；前缀读完仍没有结束行时返回 None。
        """
        found_start = False
        for line in text.split("\n"):
            if line.startswith(START_LINE):
                found_start = True
            elif line.startswith(END_LINE):
                return found_start
        return None

    def collapse(self, reader: Iterable[str], writer: TextIO):
        """读取整份 sample 输出，将折叠后的调用栈写入 writer，然后重置状态。"""
        occurrences = Occurrences()
        try:
            for stack in self.iter_stacks(reader):
                occurrences.insert_stack(stack)
            logger.debug(f"调用图解析完成，共 {len(occurrences)} 条不同的调用路径。")
            occurrences.write_and_clear(writer)
        finally:
            # 读取失败时也要丢弃残留的调用栈，避免混入下一次输入
            self.reset()

    def collapse_file(self, path: str | os.PathLike | None, writer: TextIO):
        """折叠指定文件；path 为 None 或 "-" 时读取标准输入。"""
        if path is None or path == "-":
            logger.info("从标准输入读取 sample 输出...")
            self.collapse(sys.stdin, writer)
            return
        logger.info(f"读取 sample 输出: {path}")
        with open_sample_file(path) as reader:
            self.collapse(reader, writer)

    def iter_stacks(self, reader: Iterable[str]) -> Iterator[FoldedStack]:
        """
        逐行扫描输入，只处理 START_LINE 与 END_LINE 之间的调用图，
        每完成一条未被忽略的调用路径就产出一个 FoldedStack。
        """
        lines = iter(reader)

        # 跳过文件头
        for line in lines:
            if line.startswith(START_LINE):
                break
        else:
            logger.warning("文件在调用图开始之前就结束了")
            return

        for line in lines:
            line = line.rstrip()
            if not line:
                continue
            if line.startswith(LINE_PREFIX):
                completed = self.on_line(line)
            elif line.startswith(END_LINE):
                completed = self.write_stack()
                if completed is not None:
                    yield completed
                return
            else:
                logger.error(f"调用栈行没有以 4 个空格开头:\n{line}")
                continue
            if completed is not None:
                yield completed

        logger.warning("文件在调用图结束之前就结束了")
        completed = self.write_stack()
        if completed is not None:
            yield completed

    # 处理如下形式的调用图行:
    #
    #     5130 Thread_8749954
    #     + 5130 start_wqthread  (in libsystem_pthread.dylib) ...
    #     +   4282 _pthread_wqthread  (in libsystem_pthread.dylib) ...
    #     +   ! 4282 __doworkq_kernreturn  (in libsystem_kernel.dylib) ...
    #     +   848 _pthread_wqthread  (in libsystem_pthread.dylib) ...
    #     +     848 __doworkq_kernreturn  (in libsystem_kernel.dylib) ...
    def on_line(self, line: str) -> FoldedStack | None:
        """
        处理一行调用图数据，更新调用栈。
        如果这一行说明上一行是叶子节点，返回上一条完整的调用路径。
        """
        body = line[len(LINE_PREFIX):]
        indent_chars = _indent_length(body)
        if indent_chars is None:
            logger.error(f"调用栈行只有缩进字符:\n{line}")
            return None

        # 每一级缩进是两个字符
        if indent_chars % 2 != 0:
            logger.error(f"缩进字符个数为奇数:\n{line}")

        prev_depth = len(self.stack)
        depth = indent_chars // 2 + 1

        completed = None
        if depth <= prev_depth:
            # 每个被采样的函数都是调用树的叶子节点。深度没有增加说明上一行是叶子，
            # 先写出整条路径，再把栈弹回到当前深度的上一层。
            completed = self.write_stack()
            del self.stack[depth - 1:]
        elif depth > prev_depth + 1:
            logger.error(f"跳过了缩进层级:\n{line}")

        parts = line_parts(body[indent_chars:], self.opt.no_modules)
        if parts is None:
            logger.error(f"无法解析调用栈行:\n{line}")
            return completed

        samples, func, module = parts
        if not samples.isdecimal():
            logger.error(f"样本数字段无效: {samples}")
            return completed

        # 非叶子节点的直接子节点样本数之和等于该节点的样本数，
        # 所以只需要记录栈顶的样本数
        self.current_samples = int(samples)
        # sample 不能正确还原 Rust 符号，这里修正
        func = fix_partially_demangled_rust_symbol(func)
        self.stack.append(make_frame(func, module))
        return completed

    def write_stack(self) -> FoldedStack | None:
        """
        将当前调用栈折叠成一条记录。
        栈为空或叶子函数属于忽略列表时返回 None。
        """
        if not self.stack:
            return None
        leaf = self.stack[-1]
        if leaf.endswith(IGNORE_SYMBOLS):
            # 不输出以等待符号结尾的调用栈
            return None
        return FoldedStack(fold_stack(self.stack), self.current_samples)
