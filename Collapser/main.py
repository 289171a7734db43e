"""
Copyright (c) 2026, Chen Jie, Joungtao, Xuzheng Jiang
All rights reserved.
This source code is licensed under the BSD-2-Clause license found in the
LICENSE file in the root directory of this source tree.
"""

# main.py
import logging

import zstandard as zstd

from Collapser import config
from Collapser import output_handler as Output
from Collapser import utils
from Collapser.parser_core import SampleFolder

logger = logging.getLogger(__name__)

def run(settings: config.Config) -> int:
    """
    按照配置折叠一份 sample 输出。
    Returns:
        int: 进程退出码，读写失败时为 1。
    """
    folder = SampleFolder(settings.to_options())
    try:
        with Output.open_output(settings.output) as writer:
            folder.collapse_file(settings.input, writer)
    except (OSError, zstd.ZstdError) as e:
        logger.error(f"处理 sample 输出时出错: {e}")
        return 1
    return 0

def main(args: list[str] | None = None) -> int:
    settings = config.initialize_config(args)
    utils.setup_logging(settings.log_level())
    return run(settings)


if __name__ == "__main__":
    raise SystemExit(main())
