# output_handler.py
import os
import sys
import logging
from contextlib import contextmanager
from typing import Iterator, TextIO

logger = logging.getLogger(__name__)

@contextmanager
def open_output(output_path: str | None) -> Iterator[TextIO]:
    """
    打开折叠结果的输出流。
    Args:
        output_path (str | None): 输出文件路径；为空或 "-" 时使用标准输出。
    """
    if not output_path or output_path == "-":
        yield sys.stdout
        sys.stdout.flush()
        return

    output_dir = os.path.dirname(output_path)
    if output_dir:
        os.makedirs(output_dir, exist_ok=True)
    with open(output_path, "w", encoding="utf-8") as f:
        yield f
    logger.info(f"折叠结果已写入: {output_path}")
