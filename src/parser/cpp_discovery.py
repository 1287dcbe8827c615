"""
C++ source discovery.

Groups ``.h``/``.cpp`` files that share a directory and stem into one
SourceUnit. A file without its counterpart still becomes a unit; the pipeline
skips it at the pairing stage.
"""
import re
from pathlib import Path

from src.schemas import SourceUnit
from src.utils.core.logger import get_logger
from .base import BaseDiscovery

logger = get_logger(__name__)

HEADER_SUFFIX = ".h"
IMPLEMENTATION_SUFFIX = ".cpp"

_DECLARATION = re.compile(
    r"""
    ^[ \t]*(?:(?:static|virtual|inline|constexpr|extern)\s+)*
    [A-Za-z_][\w:<>,\s\*&]*?[\s\*&]     # return type
    ([A-Za-z_]\w*)\s*                   # function name
    \([^;{}]*\)\s*
    (?:const\s*)?(?:noexcept\s*)?(?:override\s*)?(?:=\s*0\s*)?;
    """,
    re.MULTILINE | re.VERBOSE,
)
_NOT_FUNCTIONS = {"return", "if", "while", "for", "switch", "sizeof", "operator", "main"}


def companion_path(path: Path) -> Path:
    """``calc.cpp`` <-> ``calc.h``"""
    if path.suffix == HEADER_SUFFIX:
        return path.with_suffix(IMPLEMENTATION_SUFFIX)
    return path.with_suffix(HEADER_SUFFIX)


def infer_declared_symbols(header_text: str) -> list[str]:
    """
    Function names declared in a header, in declaration order.

    A regex pass, not a C++ parser: it sees prototypes ending in ``;`` and
    misses inline definitions and macros.
    """
    names = []
    for match in _DECLARATION.finditer(header_text):
        name = match.group(1)
        if name in _NOT_FUNCTIONS or name in names:
            continue
        names.append(name)
    return names


def _read_text(path: Path) -> str:
    return path.read_text(encoding="utf-8", errors="replace")


class CppDiscovery(BaseDiscovery):
    """Discover paired C++ header/implementation files."""

    def discover(self, input_dir: str | Path) -> list[SourceUnit]:
        input_dir = Path(input_dir)
        if not input_dir.is_dir():
            raise FileNotFoundError(f"Input directory not found: {input_dir}")

        logger.info(f"Reading codebase directory: {input_dir}")
        groups: dict[Path, dict[str, Path]] = {}
        for path in self.iter_source_files(input_dir):
            logger.debug(f"Found file: {path}")
            groups.setdefault(path.with_suffix(""), {})[path.suffix] = path

        units = []
        for key in sorted(groups):
            members = groups[key]
            primary = members.get(IMPLEMENTATION_SUFFIX) or members.get(HEADER_SUFFIX)
            if primary is None:
                continue
            units.append(self.build_unit(primary))

        logger.info(f"Found {len(units)} source units in {input_dir}")
        return units

    def build_unit(self, path: Path) -> SourceUnit:
        """Read ``path`` and its companion (when present) into a SourceUnit."""
        companion = companion_path(path)
        companion_content = _read_text(companion) if companion.is_file() else None
        content = _read_text(path)

        header_text = content if path.suffix == HEADER_SUFFIX else companion_content
        symbols = list(self.requirements.target_symbols)
        if self.settings.infer_symbols and header_text:
            inferred = infer_declared_symbols(header_text)
            if inferred:
                symbols = inferred
            else:
                logger.warning(f"No declarations found in header of {path}; using configured symbols")

        return SourceUnit(
            path=path,
            content=content,
            companion_path=companion,
            companion_content=companion_content,
            target_symbols=tuple(symbols),
        )
