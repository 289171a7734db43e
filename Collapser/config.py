"""
Copyright (c) 2026, Chen Jie, Joungtao, Xuzheng Jiang
All rights reserved.
This source code is licensed under the BSD-2-Clause license found in the
LICENSE file in the root directory of this source tree.
"""

# config.py
import logging

from tap import Tap

from Collapser.common_types import Options

class Config(Tap):
    """命令行配置模型"""

    # --- Input & Output ---
    input: str | None = None  # sample 输出文件路径，省略或为 "-" 时读取标准输入
    output: str | None = None  # 折叠结果输出路径，省略时写到标准输出

    # --- Folding ---
    no_modules: bool = False  # 不在函数名前加模块名

    # --- Logging ---
    verbose: bool = False  # 输出调试日志
    quiet: bool = False  # 只输出错误日志

    def configure(self) -> None:
        self.add_argument("input", nargs="?")
        self.add_argument("-o", "--output")
        self.add_argument("-v", "--verbose")
        self.add_argument("-q", "--quiet")

    def process_args(self) -> None:
        if self.verbose and self.quiet:
            self.error("--verbose 和 --quiet 不能同时使用")

    def to_options(self) -> Options:
        """根据命令行参数生成折叠器的配置项"""
        return Options(no_modules=self.no_modules)

    def log_level(self) -> int:
        if self.verbose:
            return logging.DEBUG
        if self.quiet:
            return logging.ERROR
        return logging.INFO


# 全局配置实例
settings: Config = None


def initialize_config(args: list[str] | None = None) -> Config:
    """解析命令行参数并初始化全局的 `settings` 对象"""
    global settings
    if settings is not None:
        return settings
    settings = Config(underscores_to_dashes=True).parse_args(args)
    return settings


def reset_config() -> None:
    """丢弃全局配置，下一次 initialize_config 会重新解析参数"""
    global settings
    settings = None
