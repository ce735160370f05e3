"""Concatenate source files into one knowledge document."""

from pathlib import Path
from typing import Sequence

from ..errors import BundleError
from ..structured_logging import get_logger

logger = get_logger("BUNDLE_BUILDER")


def bundle_header(file: Path) -> str:
    return f"\n// ==== file path: {file}\n\n"


def _read_lines(file: Path) -> list[str]:
    if not file.is_file():
        raise BundleError(f"Cannot bundle '{file}': not a file.")
    try:
        with open(file, encoding="utf-8", newline=None) as reader:
            return [line.rstrip("\n") for line in reader]
    except UnicodeDecodeError as e:
        raise BundleError(f"Cannot bundle '{file}': not valid UTF-8 ({e.reason} at byte {e.start}).") from e


def build_bundle(files: Sequence[Path], destination: Path) -> None:
    """Write ``files`` into ``destination`` in the given order.

    Each file gets a header naming its path, then its lines verbatim, then a
    blank separator. The same files in the same order always produce the same
    bytes, so callers must pass a stable order.

    Raises:
        BundleError: if any input is not a regular file or not valid UTF-8.
    """
    # Sources are read before the destination is opened so a failure leaves
    # the previous bundle in place.
    contents = [(Path(file), _read_lines(Path(file))) for file in files]

    with open(destination, "w", encoding="utf-8", newline="\n") as writer:
        for file, lines in contents:
            writer.write(bundle_header(file))
            for line in lines:
                writer.write(line + "\n")
            writer.write("\n\n\n")
        writer.flush()

    logger.debug("Bundle written", destination=str(destination), file_count=len(files))
