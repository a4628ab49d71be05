"""Text formatting utilities for the TUI.

Hides the details of markdown rendering, tool-entry layout and status text.
"""

import json
import os

from rich.markdown import Markdown

from ..llm.catalog import model_hint
from .config import MAX_TOOL_RESULT_LENGTH, TOKEN_WARNING_THRESHOLD
from .models import EntryKind, TranscriptEntry

TOOL_ICON = "🔧"
THOUGHT_ICON = "💭"
COLLAPSED_ICON = "▶"
EXPANDED_ICON = "▼"


def render_markdown(text: str) -> Markdown:
    """Render text as markdown."""
    return Markdown(text)


def truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[:limit] + f"\n... ({len(text) - limit} more characters)"


def _is_structured(text: str) -> bool:
    text = text.strip()
    return (text.startswith("{") and text.endswith("}")) or (text.startswith("[") and text.endswith("]"))


def format_tool_content(content: str) -> str:
    """Convert a raw tool message into markdown with Arguments and Result sections.

    Messages that do not follow the ``Arguments:`` / ``Result:`` layout are
    returned unchanged.
    """
    lines = content.split("\n")
    if len(lines) < 3:
        return content

    arguments = ""
    outcome_label = "Result"
    outcome_lines: list[str] = []
    in_outcome = False
    for line in lines[1:]:
        if not in_outcome and line.startswith("Arguments:"):
            arguments = line.removeprefix("Arguments:").strip()
        elif not in_outcome and line.startswith(("Result:", "Error:", "Reason:")):
            label, _, rest = line.partition(":")
            outcome_label = label
            outcome_lines.append(rest.strip())
            in_outcome = True
        elif in_outcome:
            outcome_lines.append(line)
    outcome = truncate("\n".join(outcome_lines), MAX_TOOL_RESULT_LENGTH)

    parts = ["**Arguments:**"]
    if arguments and arguments != "{}":
        parts.append(f"```json\n{arguments}\n```")
    else:
        parts.append("`None`")

    parts.append(f"\n**{outcome_label}:**")
    if not outcome:
        parts.append("`No output`")
    elif _is_structured(outcome) or outcome_label != "Result" or "\n" in outcome:
        fence = "json" if _is_structured(outcome) else ""
        parts.append(f"```{fence}\n{outcome}\n```")
    else:
        parts.append(outcome)
    return "\n".join(parts)


def entry_header(entry: TranscriptEntry) -> str:
    """One-line header for an entry; the only line shown when collapsed."""
    timestamp = entry.timestamp.strftime("%H:%M:%S")
    if entry.kind is EntryKind.USER:
        return f"> You [{timestamp}]"
    if entry.kind is EntryKind.TOOL:
        first = entry.content.split("\n", 1)[0]
        name = first.removeprefix(f"{TOOL_ICON} Tool Call: ")
        status = "✗" if entry.is_error else "✓"
        toggle = COLLAPSED_ICON if entry.collapsed else EXPANDED_ICON
        return f"{toggle} {TOOL_ICON} {status} {name}"
    if entry.kind is EntryKind.THOUGHT:
        toggle = COLLAPSED_ICON if entry.collapsed else EXPANDED_ICON
        return f"{toggle} {THOUGHT_ICON} Thinking..."
    if entry.kind is EntryKind.WELCOME:
        return "🎉 Welcome to CLI Code Assistant"
    if entry.kind is EntryKind.NOTICE:
        return f"• [{timestamp}]"
    suffix = " (streaming)" if entry.streaming else ""
    return f"< Assistant [{timestamp}]{suffix}"


def entry_body(entry: TranscriptEntry) -> str:
    """Markdown body of an expanded entry."""
    if entry.kind is EntryKind.TOOL:
        return format_tool_content(entry.content)
    if entry.kind is EntryKind.THOUGHT:
        return entry.content.removeprefix(f"{THOUGHT_ICON} Thinking: ")
    return entry.content


def format_model_option(model_id: str, current: str) -> str:
    """Model selector line: current-model marker plus capability hint."""
    prefix = "• " if model_id == current else "  "
    hint = model_hint(model_id)
    return f"{prefix}{model_id} ({hint})" if hint else f"{prefix}{model_id}"


def format_arguments(arguments: dict) -> str:
    return json.dumps(arguments, indent=2, default=str)


def short_cwd(limit: int = 30) -> str:
    cwd = os.getcwd()
    if len(cwd) > limit:
        return "..." + cwd[-(limit - 3):]
    return cwd


def format_tokens(input_tokens: int, output_tokens: int) -> str:
    """Token usage markup; red above the warning threshold."""
    text = f"🪙 {input_tokens:,}/{output_tokens:,}"
    if input_tokens + output_tokens > TOKEN_WARNING_THRESHOLD:
        return f"[bold red]{text}[/]"
    return text
