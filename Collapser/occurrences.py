"""
Copyright (c) 2026, Chen Jie, Joungtao, Xuzheng Jiang
All rights reserved.
This source code is licensed under the BSD-2-Clause license found in the
LICENSE file in the root directory of this source tree.
"""

# occurrences.py
import logging
from typing import Iterator, TextIO

from Collapser.common_types import FoldedStack

logger = logging.getLogger(__name__)


class Occurrences:
    """
    折叠栈计数表：折叠键 -> 累计样本数。
    同一个键可能在不同线程下多次出现，计数只做累加，从不覆盖。
    """

    def __init__(self):
        self._counts: dict[str, int] = {}

    def __len__(self) -> int:
        return len(self._counts)

    def __contains__(self, key: str) -> bool:
        return key in self._counts

    def get(self, key: str, default: int = 0) -> int:
        return self._counts.get(key, default)

    def insert(self, key: str, count: int):
        """将 count 累加到 key 上，不存在时新建。"""
        self._counts[key] = self._counts.get(key, 0) + count

    def insert_stack(self, stack: FoldedStack):
        self.insert(stack.key, stack.count)

    def items(self) -> Iterator[FoldedStack]:
        """按键排序返回所有条目，保证输出可复现。"""
        for key in sorted(self._counts):
            yield FoldedStack(key, self._counts[key])

    def clear(self):
        self._counts.clear()

    def write_and_clear(self, output: TextIO):
        """
        将所有条目逐行写入 output（格式: "<key> <count>"），然后清空计数表，
        以便同一个实例用于下一次输入。
        Args:
            output (TextIO): 可写的文本流。
        """
        written = 0
        for stack in self.items():
            output.write(stack.to_line())
            output.write("\n")
            written += 1
        logger.debug(f"已写出 {written} 条折叠栈。")
        self.clear()
