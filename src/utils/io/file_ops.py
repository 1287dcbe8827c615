"""
基础文件读写操作

提供 JSON、JSONL、文本文件的读写功能，自动创建父目录。
"""
import json
import re
from pathlib import Path
from typing import Any

import orjson


def read_json(path: Path | str) -> dict | None:
    """
    Read JSON file and return as dict.

    Args:
        path: Path to JSON file

    Returns:
        Parsed dict or None if file doesn't exist
    """
    path = Path(path)
    if not path.exists():
        return None

    with open(path, 'r', encoding='utf-8') as f:
        return json.load(f)


def write_json(path: Path | str, obj: Any, indent: int = 2) -> None:
    """
    Write object to JSON file with automatic parent directory creation.

    Args:
        path: Path to output JSON file
        obj: Object to serialize
        indent: JSON indentation (default: 2)
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, 'w', encoding='utf-8') as f:
        json.dump(obj, f, indent=indent, ensure_ascii=False)


def read_jsonl(path: Path | str) -> list[dict]:
    """
    Read JSONL file and return list of dicts (empty list if file doesn't exist).
    """
    path = Path(path)
    if not path.exists():
        return []

    with open(path, 'rb') as f:
        return [orjson.loads(line) for line in f if line.strip()]


def append_jsonl(path: Path | str, row: dict) -> None:
    """
    Append a single dict to JSONL file with automatic parent directory creation.

    Args:
        path: Path to JSONL file
        row: Dict to append
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, 'ab') as f:
        f.write(orjson.dumps(row))
        f.write(b'\n')


def write_text(path: Path | str, text: str) -> Path:
    """Write text (UTF-8) creating parent directories; returns the path."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding='utf-8')
    return path


def load_prompt_template(template_path: str | Path) -> str:
    """
    Load prompt template file with automatic relative path resolution.

    Args:
        template_path: Path to template file (absolute or relative to project root)

    Returns:
        Template content as string

    Raises:
        FileNotFoundError: If template file not found
    """
    path = Path(template_path)

    if not path.is_absolute() and not path.exists():
        project_root = Path(__file__).resolve().parent.parent.parent.parent
        candidate = project_root / path
        if candidate.exists():
            path = candidate

    if not path.exists():
        raise FileNotFoundError(f"Prompt template not found: {path}")

    with open(path, 'r', encoding='utf-8') as f:
        return f.read()


_LEADING_FENCE = re.compile(r"^```[\w+#-]*[ \t]*\n?")
_TRAILING_FENCE = re.compile(r"\n?```\s*$")


def clean_llm_code_output(output: str) -> str:
    """
    Clean LLM output to extract the code body.
    Removes a leading markdown fence (``` or ```cpp), a trailing fence and
    surrounding whitespace. Inner text is left untouched.

    Args:
        output: Raw LLM output string

    Returns:
        Normalized code string
    """
    output = output.strip()
    output = _LEADING_FENCE.sub("", output, count=1)
    output = _TRAILING_FENCE.sub("", output, count=1)
    return output.strip()


_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def safe_filename(name: str) -> str:
    """Replace characters that are not portable in file names (``qwen2.5-coder:7b`` -> ``qwen2.5-coder_7b``)."""
    return _UNSAFE_FILENAME_CHARS.sub("_", name).strip("_") or "unnamed"
