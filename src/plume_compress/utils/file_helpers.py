"""文件工具函数模块。

输入文件查找与输出路径推导。
"""

import itertools
from collections.abc import Iterator
from pathlib import Path

from ..models.constants import OutputFormat, detect_format_from_path
from .logging_helpers import get_logger
from .message_formatter import MessageFormatter


logger = get_logger()

COMPRESSED_SUFFIX = "_compressed"


def find_image_files(
    directory: str | Path,
    recursive: bool = True,
    exclude_dirs: list[str] | None = None,
) -> Iterator[Path]:
    """查找目录中可作为输入的图像文件（PNG/JPEG/WebP），按路径排序。

    Args:
        directory: 搜索目录
        recursive: 是否递归搜索子目录
        exclude_dirs: 要排除的目录名列表

    Yields:
        Path: 图像文件路径
    """
    directory = Path(directory)
    exclude_dirs = exclude_dirs or []

    if not directory.exists():
        logger.warning(MessageFormatter.directory_not_found(directory))
        return

    if not directory.is_dir():
        logger.warning(MessageFormatter.path_not_directory(directory))
        return

    pattern = "**/*" if recursive else "*"

    try:
        for file_path in sorted(directory.glob(pattern)):
            if (
                file_path.is_file()
                and detect_format_from_path(file_path) is not None
                and not any(
                    exclude_dir in file_path.parts for exclude_dir in exclude_dirs
                )
            ):
                yield file_path
    except PermissionError:
        logger.error(MessageFormatter.permission_error(directory, "访问目录"))


def resolve_output_path(
    input_path: str | Path,
    output_format: OutputFormat,
    output_path: str | Path | None = None,
) -> Path:
    """推导输出文件路径

    - output_path 为已存在的目录（或以分隔符结尾）：目录/原文件名.新扩展名
    - output_path 为文件路径：原样使用
    - 未指定：输入文件旁的 <原文件名>_compressed.<新扩展名>
    """
    input_path = Path(input_path)
    filename = f"{input_path.stem}.{output_format.extension}"

    if output_path is None:
        return input_path.with_name(
            f"{input_path.stem}{COMPRESSED_SUFFIX}.{output_format.extension}"
        )

    raw = str(output_path)
    output_path = Path(output_path)
    if output_path.is_dir() or raw.endswith(("/", "\\")):
        return output_path / filename
    return output_path


def claim_output_path(path: Path, claimed: set[Path], source: str | Path) -> Path:
    """为同一批次内的输出分配不冲突的路径

    a.png 与 a.jpg 都转成 WebP 时，后者改为 a_jpg.webp；仍冲突时追加序号。
    """
    source_ext = Path(source).suffix.lstrip(".").lower()
    candidates = itertools.chain(
        (path, path.with_name(f"{path.stem}_{source_ext}{path.suffix}")),
        (path.with_name(f"{path.stem}_{n}{path.suffix}") for n in itertools.count(1)),
    )
    candidate = next(c for c in candidates if c not in claimed)
    claimed.add(candidate)
    return candidate
