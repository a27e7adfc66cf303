"""Parsing and formatting of error stacks.

Stack text is parsed line by line into ParsedStackFrame objects. Two stack
dialects are recognized:

- ``at functionName (file:line:col)`` lines, as produced by JavaScript
  runtimes and reported by browser clients or sibling services;
- ``File "path", line N, in function`` lines from Python tracebacks.

Lines in neither shape are skipped. A frame line that matches no known
location pattern still yields a frame, with the whole line as function name.
"""

import re
import traceback
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from logkit.core.models import ErrorInfo, ParsedError, ParsedStackFrame

if TYPE_CHECKING:
    from logkit.core.config import LoggingConfig

ErrorLike = BaseException | ErrorInfo

DEFAULT_MAX_LINES = 10

LIBRARY_DIRECTORIES = ("node_modules", "site-packages", "dist-packages")

_JS_MARKER = "at "
_PY_MARKER = 'File "'

_NATIVE_SUFFIX = re.compile(r"\s*\(native\)")

# Tried in order, first match wins
_WITH_PARENS = re.compile(r"^(.+?)\s+\((.+):(\d+):(\d+)\)$")
_WITH_PARENS_NO_COL = re.compile(r"^(.+?)\s+\((.+):(\d+)\)$")
_ANONYMOUS = re.compile(r"^(.+):(\d+):(\d+)$")
_ANONYMOUS_NO_COL = re.compile(r"^(.+):(\d+)$")

_PY_FRAME = re.compile(r'^File "(.+)", line (\d+)(?:, in (.+))?$')
_PY_NATIVE_FILES = ("<frozen ", "<built-in")


def is_library_path(file_name: str) -> bool:
    """Return True if the path is inside a third-party package directory."""
    return any(directory in file_name for directory in LIBRARY_DIRECTORIES)


def _frame(
    function_name: str,
    file_name: str,
    line_number: int | None,
    column_number: int | None,
    raw: str,
) -> ParsedStackFrame:
    return ParsedStackFrame(
        function_name=function_name,
        file_name=file_name,
        line_number=line_number,
        column_number=column_number,
        is_native=False,
        is_library=is_library_path(file_name),
        raw=raw,
    )


def _native_frame(function_name: str, raw: str) -> ParsedStackFrame:
    return ParsedStackFrame(
        function_name=function_name,
        file_name="native",
        line_number=None,
        column_number=None,
        is_native=True,
        is_library=False,
        raw=raw,
    )


def _fallback_frame(content: str, raw: str) -> ParsedStackFrame:
    return ParsedStackFrame(
        function_name=content,
        file_name="unknown",
        line_number=None,
        column_number=None,
        is_native=False,
        is_library=False,
        raw=raw,
    )


def _parse_js_frame(content: str, raw: str) -> ParsedStackFrame:
    if "(native)" in content or content == "native":
        name = _NATIVE_SUFFIX.sub("", content, count=1).strip()
        return _native_frame(name or "<native>", raw)

    match = _WITH_PARENS.match(content)
    if match:
        return _frame(
            match[1].strip(), match[2], int(match[3]), int(match[4]), raw
        )

    match = _WITH_PARENS_NO_COL.match(content)
    if match:
        return _frame(match[1].strip(), match[2], int(match[3]), None, raw)

    match = _ANONYMOUS.match(content)
    if match:
        return _frame("<anonymous>", match[1], int(match[2]), int(match[3]), raw)

    match = _ANONYMOUS_NO_COL.match(content)
    if match:
        return _frame("<anonymous>", match[1], int(match[2]), None, raw)

    return _fallback_frame(content, raw)


def _parse_py_frame(line: str) -> ParsedStackFrame:
    match = _PY_FRAME.match(line)
    if not match:
        return _fallback_frame(line, line)

    file_name = match[1]
    function_name = match[3] or "<anonymous>"
    if file_name.startswith(_PY_NATIVE_FILES):
        return _native_frame(function_name, line)
    return _frame(function_name, file_name, int(match[2]), None, line)


def parse_stack_frame(line: str) -> ParsedStackFrame | None:
    """Parse a single stack trace line.

    Returns:
        The parsed frame, or None if the line is not a frame line.
    """
    stripped = line.strip()
    if stripped.startswith(_JS_MARKER):
        return _parse_js_frame(stripped[len(_JS_MARKER) :], stripped)
    if stripped.startswith(_PY_MARKER):
        return _parse_py_frame(stripped)
    return None


def error_name(error: ErrorLike) -> str:
    if isinstance(error, ErrorInfo):
        return error.name
    return type(error).__name__


def error_message(error: ErrorLike) -> str:
    if isinstance(error, ErrorInfo):
        return error.message
    return str(error)


def stack_text(error: ErrorLike) -> str | None:
    """Return the stack text of an error, header line first.

    Python exceptions are rendered from their traceback; an exception that
    was never raised has a header line and no frames.
    """
    if isinstance(error, ErrorInfo):
        return error.stack
    header = f"{error_name(error)}: {error_message(error)}\n"
    if error.__traceback__ is None:
        return header
    return header + "".join(traceback.format_tb(error.__traceback__))


def error_cause(error: ErrorLike) -> ErrorLike | None:
    """Return the error that caused this one, if any."""
    if isinstance(error, ErrorInfo):
        return error.cause
    if error.__cause__ is not None:
        return error.__cause__
    if error.__context__ is not None and not error.__suppress_context__:
        return error.__context__
    return None


def _is_python_traceback(lines: list[str]) -> bool:
    return any(line.strip().startswith(_PY_MARKER) for line in lines)


def _parse(error: ErrorLike, max_lines: int, seen: set[int]) -> ParsedError:
    seen.add(id(error))
    frames: list[ParsedStackFrame] = []
    text = stack_text(error)
    if text:
        # The first line is the "Name: message" header
        lines = text.split("\n")[1:]
        if _is_python_traceback(lines):
            # Indented source lines may start with "at "
            lines = [line for line in lines if line.strip().startswith(_PY_MARKER)]
        for line in lines:
            if len(frames) >= max_lines:
                break
            frame = parse_stack_frame(line)
            if frame is not None:
                frames.append(frame)

    cause = error_cause(error)
    parsed_cause = None
    if isinstance(cause, (BaseException, ErrorInfo)) and id(cause) not in seen:
        parsed_cause = _parse(cause, max_lines, seen)

    return ParsedError(
        name=error_name(error),
        message=error_message(error),
        stack=tuple(frames),
        cause=parsed_cause,
    )


def parse_error(error: ErrorLike, max_lines: int = DEFAULT_MAX_LINES) -> ParsedError:
    """Parse an error and its cause chain into structured frames.

    Args:
        error: A Python exception or an ErrorInfo.
        max_lines: Maximum frames kept per error; applied to each cause
            independently.

    Returns:
        ParsedError with frames in their original top-to-bottom order.
    """
    return _parse(error, max_lines, set())


def _format_frame(frame: ParsedStackFrame) -> str:
    line = f"    at {frame.function_name}"
    if frame.file_name not in ("unknown", "native"):
        location = frame.file_name
        if frame.line_number is not None:
            location += f":{frame.line_number}"
            if frame.column_number is not None:
                location += f":{frame.column_number}"
        line += f" ({location})"
    return line


def format_parsed_error(
    parsed: ParsedError, include_library_frames: bool = False
) -> str:
    """Render a parsed error as readable multi-line text.

    Args:
        parsed: The parsed error.
        include_library_frames: Keep frames from third-party packages.

    Returns:
        ``Name: message`` followed by one ``at`` line per frame and a
        ``Caused by:`` section per cause.
    """
    lines = [f"{parsed.name}: {parsed.message}"]
    lines.extend(
        _format_frame(frame)
        for frame in parsed.stack
        if include_library_frames or not frame.is_library
    )
    if parsed.cause is not None:
        nested = format_parsed_error(parsed.cause, include_library_frames)
        lines.append(f"  Caused by: {nested}")
    return "\n".join(lines)


def create_error_parser(
    config: "LoggingConfig",
) -> Callable[[ErrorLike], dict[str, Any]]:
    """Create an error-to-metadata converter from configuration.

    With stack parsing disabled the record holds the raw stack text;
    otherwise it holds application frames, all frames, the parsed cause and
    the formatted text.
    """
    if not config.error_stack_enabled:

        def raw_parser(error: ErrorLike) -> dict[str, Any]:
            return {
                "name": error_name(error),
                "message": error_message(error),
                "stack": stack_text(error),
            }

        return raw_parser

    max_lines = config.error_stack_lines

    def parser(error: ErrorLike) -> dict[str, Any]:
        parsed = parse_error(error, max_lines)
        return {
            "name": parsed.name,
            "message": parsed.message,
            "parsedStack": [f.to_dict() for f in parsed.stack if not f.is_library],
            "fullStack": [f.to_dict() for f in parsed.stack],
            "cause": parsed.cause.to_dict() if parsed.cause else None,
            "formatted": format_parsed_error(parsed),
        }

    return parser
