"""
Copyright (c) 2026, Chen Jie, Joungtao, Xuzheng Jiang
All rights reserved.
This source code is licensed under the BSD-2-Clause license found in the
LICENSE file in the root directory of this source tree.
"""

# common_types.py
from dataclasses import dataclass
from typing import NamedTuple

Frame = str
"""表示一个栈帧的显示字符串，形如 "module`function" 或 "function"。"""

CallStack = list[Frame]
"""表示当前调用路径，根在前、叶子在后。"""

FRAME_DELIMITER = ";"
"""折叠栈中各栈帧之间的分隔符"""

MODULE_SEPARATOR = "`"
"""模块名与函数名之间的分隔符"""


@dataclass(frozen=True)
class Options:
    """sample 折叠器的配置项，构造时读取，单次运行期间不可变。"""
    no_modules: bool = False # 为 True 时不在函数名前加模块名


class FoldedStack(NamedTuple):
    """一条已完成的调用路径：折叠后的键及其样本数。"""
    key: str
    count: int

    def to_line(self) -> str:
        return f"{self.key} {self.count}"


def make_frame(func: str, module: str = "") -> Frame:
    """根据函数名和模块名构造栈帧；模块名为空时只返回函数名。"""
    if module:
        return f"{module}{MODULE_SEPARATOR}{func}"
    return func


def fold_stack(stack: CallStack) -> str:
    """将调用栈按根到叶的顺序拼接成折叠键。"""
    return FRAME_DELIMITER.join(stack)
