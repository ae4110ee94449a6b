#!/usr/bin/env python3
"""Gate G2: Security & PII check for source files.

Fails if, anywhere under src/:
- print( is called
- a logger call uses a non-literal message (f-strings, %, .format)
- a logger call passes extra= without routing it through safe_log_context
- safe_log_context receives a credential or citizen field by name

Usage:
    python scripts/gate_security_pii.py
"""

import ast
import sys
from pathlib import Path

LOG_METHODS = frozenset({"debug", "info", "warning", "error", "critical", "exception"})

# Keyword names that must never reach a log line, even redacted.
FORBIDDEN_LOG_KEYS = frozenset(
    {
        "token",
        "mtoken",
        "m_token",
        "session_token",
        "consumer_key",
        "consumer_secret",
        "citizen_id",
        "first_name",
        "middle_name",
        "last_name",
        "user_id",
        "body",
        "payload",
    }
)


def _call_name(node: ast.Call) -> str:
    func = node.func
    if isinstance(func, ast.Name):
        return func.id
    if isinstance(func, ast.Attribute):
        return func.attr
    return ""


def _is_logger_call(node: ast.Call) -> bool:
    func = node.func
    return (
        isinstance(func, ast.Attribute)
        and func.attr in LOG_METHODS
        and isinstance(func.value, ast.Name)
        and func.value.id == "logger"
    )


def _is_redacted_ctx(node: ast.AST) -> bool:
    if not isinstance(node, ast.Call):
        return False
    name = _call_name(node)
    return name == "safe_log_context" or name.endswith("_log_ctx")


def _check_extra(node: ast.expr) -> bool:
    """extra= must be {"extra_fields": <redacted ctx>}."""
    if not isinstance(node, ast.Dict):
        return False
    for key, value in zip(node.keys, node.values):
        if not (isinstance(key, ast.Constant) and key.value == "extra_fields"):
            return False
        if not _is_redacted_ctx(value):
            return False
    return True


def check_source(source: str, filename: str = "<src>") -> list[str]:
    """Check one module's source. Returns list of error messages."""
    try:
        tree = ast.parse(source, filename=filename)
    except SyntaxError as e:
        return [f"{filename}:{e.lineno}: cannot parse ({e.msg})"]

    errors: list[str] = []

    for node in ast.walk(tree):
        if not isinstance(node, ast.Call):
            continue

        where = f"{filename}:{node.lineno}"

        if _call_name(node) == "print" and isinstance(node.func, ast.Name):
            errors.append(f"{where}: print() not allowed in runtime code")
            continue

        if _is_logger_call(node):
            if node.args and not (
                isinstance(node.args[0], ast.Constant) and isinstance(node.args[0].value, str)
            ):
                errors.append(f"{where}: logger message must be a plain string literal")
            for kw in node.keywords:
                if kw.arg == "extra" and not _check_extra(kw.value):
                    errors.append(
                        f"{where}: logger extra= must be "
                        '{"extra_fields": safe_log_context(...)}'
                    )

        if _call_name(node) == "safe_log_context":
            for kw in node.keywords:
                if kw.arg and kw.arg.lower() in FORBIDDEN_LOG_KEYS:
                    errors.append(f"{where}: '{kw.arg}' must never be logged")

    return errors


def check_file(filepath: Path) -> list[str]:
    """Check a single file for violations. Returns list of error messages."""
    try:
        source = filepath.read_text(encoding="utf-8")
    except UnicodeDecodeError:
        return []
    return check_source(source, str(filepath))


def main() -> int:
    """Run gate check on src directory."""
    src_dir = Path("src")

    if not src_dir.exists():
        src_dir = Path(__file__).parent.parent / "src"

    if not src_dir.exists():
        sys.stderr.write("Error: src directory not found\n")
        return 1

    all_errors: list[str] = []

    for pyfile in sorted(src_dir.rglob("*.py")):
        all_errors.extend(check_file(pyfile))

    if all_errors:
        sys.stderr.write("Gate G2 FAILED - Security/PII violations found:\n")
        for err in all_errors:
            sys.stderr.write(f"  {err}\n")
        return 1

    sys.stdout.write("Gate G2 PASSED - No security/PII violations found\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
