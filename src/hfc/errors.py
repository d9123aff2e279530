"""Typed errors for hfc.

Single source of truth for exit codes lives here.

Policy:
- Errors are small and boring, but carry enough context (symbol, byte offset)
  to diagnose a failed encode/decode.
- The CLI maps errors to stable exit codes (see EXIT_* constants).
- docs/exit_codes.md is generated from this module (scripts/gen_exit_codes_md.py).
"""

from __future__ import annotations

from dataclasses import dataclass

# -------------------------
# Exit codes (single source)
# -------------------------

EXIT_OK = 0
EXIT_USAGE = 2
EXIT_GENERIC = 10
EXIT_BAD_WEIGHTS = 11
EXIT_UNENCODABLE = 12
EXIT_CORRUPT_STREAM = 13
EXIT_CONFIGURATION = 14


@dataclass(frozen=True, slots=True)
class ExitCodeInfo:
    code: int
    name: str
    description: str


EXIT_CODES: tuple[ExitCodeInfo, ...] = (
    ExitCodeInfo(EXIT_OK, "OK", "Success"),
    ExitCodeInfo(EXIT_USAGE, "USAGE", "Usage/config error (invalid args, invalid profile, missing weights)"),
    ExitCodeInfo(EXIT_GENERIC, "GENERIC", "Generic failure (I/O error, unexpected error, etc.)"),
    ExitCodeInfo(EXIT_BAD_WEIGHTS, "BAD_WEIGHTS", "Malformed weight file (bad line, missing/duplicated index)"),
    ExitCodeInfo(EXIT_UNENCODABLE, "UNENCODABLE", "Input byte has no Huffman code (zero weight)"),
    ExitCodeInfo(EXIT_CORRUPT_STREAM, "CORRUPT_STREAM", "Compressed stream truncated or not decodable with these weights"),
    ExitCodeInfo(EXIT_CONFIGURATION, "CONFIGURATION", "Cannot build codes (all-zero weights, terminator without code)"),
)

# For convenience (fast lookup)
_EXIT_CODE_BY_NAME: dict[str, int] = {e.name: e.code for e in EXIT_CODES}
_EXIT_CODE_BY_CODE: dict[int, ExitCodeInfo] = {e.code: e for e in EXIT_CODES}


def exit_code_info(code: int) -> ExitCodeInfo | None:
    return _EXIT_CODE_BY_CODE.get(int(code))


def exit_code_by_name(name: str) -> int | None:
    return _EXIT_CODE_BY_NAME.get(name.strip().upper())


def render_exit_codes_markdown() -> str:
    """Render docs/exit_codes.md content."""
    lines: list[str] = []
    lines.append("# Exit codes\n")
    lines.append("> GENERATED FILE - do not edit manually.\n")
    lines.append("> Source of truth: `src/hfc/errors.py` (EXIT_CODES).\n")
    lines.append("> Regenerate: `python scripts/gen_exit_codes_md.py`.\n\n")
    lines.append("These are the CLI exit codes you can rely on.\n\n")
    lines.append("| Code | Name | Meaning |\n")
    lines.append("|---:|---|---|\n")
    for e in sorted(EXIT_CODES, key=lambda x: x.code):
        lines.append(f"| {e.code} | `{e.name}` | {e.description} |\n")
    lines.append("\n## Notes\n")
    lines.append("- Internal errors extend `HFCError` and carry an `exit_code`.\n")
    lines.append("- `--debug` re-raises errors to show full stack traces.\n")
    lines.append(
        "- Encode/decode never leave partial results behind silently: the output file is closed "
        "and the command fails with the code above.\n"
    )
    return "".join(lines)


# ---------------
# Typed exceptions
# ---------------


class HFCError(Exception):
    """Base error for hfc."""

    exit_code: int = EXIT_GENERIC


class UsageError(HFCError):
    exit_code = EXIT_USAGE


class FormatError(HFCError):
    """Persisted weights cannot be parsed."""

    exit_code = EXIT_BAD_WEIGHTS

    def __init__(self, message: str, *, line: int | None = None) -> None:
        self.line = line
        where = f" (riga {line})" if line is not None else ""
        super().__init__(f"pesi: {message}{where}")


class UnencodableSymbolError(HFCError):
    """Input symbol without a code: its weight was zero when the tree was built."""

    exit_code = EXIT_UNENCODABLE

    def __init__(self, symbol: int, *, offset: int | None = None) -> None:
        self.symbol = symbol
        self.offset = offset
        where = f" all'offset {offset}" if offset is not None else ""
        super().__init__(f"simbolo {symbol} senza codice Huffman (peso zero o fuori alfabeto){where}")


class CorruptStreamError(HFCError):
    """Compressed stream cannot be resolved to the terminator."""

    exit_code = EXIT_CORRUPT_STREAM

    def __init__(self, message: str, *, offset: int | None = None) -> None:
        self.detail = message
        self.offset = offset
        super().__init__(message)

    def __str__(self) -> str:
        if self.offset is None:
            return f"stream corrotto: {self.detail}"
        return f"stream corrotto: {self.detail} (byte {self.offset})"


class ConfigurationError(HFCError):
    exit_code = EXIT_CONFIGURATION
