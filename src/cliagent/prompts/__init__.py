"""Prompt text shipped with the package.

A file named ``prompts/<name>.txt`` under the current working directory
takes precedence over the packaged copy, so a project can carry its own
system prompt.
"""

from functools import lru_cache
from pathlib import Path

_PACKAGE_DIR = Path(__file__).parent

SYSTEM_PROMPT = "system_prompt"


def prompt_paths(name: str) -> list[Path]:
    """Candidate files for a prompt, highest precedence first."""
    filename = f"{name}.txt"
    return [Path.cwd() / "prompts" / filename, _PACKAGE_DIR / filename]


@lru_cache(maxsize=16)
def load_prompt(name: str) -> str:
    """Read a prompt by name (without the .txt extension).

    Raises:
        FileNotFoundError: If no candidate file exists
    """
    candidates = prompt_paths(name)
    for path in candidates:
        if path.is_file():
            return path.read_text(encoding="utf-8").strip()
    searched = "\n".join(f"  - {path}" for path in candidates)
    raise FileNotFoundError(f"Prompt '{name}' not found. Searched:\n{searched}")


def get_system_prompt() -> str:
    """System instruction sent with every model call."""
    return load_prompt(SYSTEM_PROMPT)


def clear_cache() -> None:
    load_prompt.cache_clear()


__all__ = [
    "SYSTEM_PROMPT",
    "prompt_paths",
    "load_prompt",
    "get_system_prompt",
    "clear_cache",
]
