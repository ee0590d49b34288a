"""Lint rule that forbids keeping recipe data in ``localStorage``.

Recipes belong in the cloud database for signed-in users and in session state
for everyone else. Any ``localStorage.getItem/setItem/removeItem`` call whose
first argument is a string literal matching a policy's key pattern is an
error. Keys built at runtime (template strings, concatenation, variables)
cannot be resolved statically and are not reported.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Iterator
from pathlib import Path

import tree_sitter_javascript
from pydantic import BaseModel, ConfigDict, TypeAdapter, field_validator
from tree_sitter import Language, Node, Parser

FORBIDDEN_RECIPE_MESSAGE = (
    "localStorage usage for recipes is FORBIDDEN. Use Firestore for "
    "authenticated users, session state for unauthenticated users."
)
SOURCE_SUFFIXES = (".js", ".jsx", ".mjs", ".cjs")
SKIP_DIRS = {"node_modules", "build", "dist", ".git"}

JAVASCRIPT = Language(tree_sitter_javascript.language())

logger = logging.getLogger(__name__)


class LintParseError(Exception):
    """Raised when a source file cannot be parsed."""


class StoragePolicy(BaseModel):
    """A forbidden ``<storage>.<method>(key)`` pattern."""

    model_config = ConfigDict(frozen=True)

    key_pattern: str
    message: str
    storage_names: tuple[str, ...] = ("localStorage",)
    methods: tuple[str, ...] = ("getItem", "setItem", "removeItem")

    @field_validator("key_pattern")
    @classmethod
    def _compiles(cls, value: str) -> str:
        try:
            re.compile(value)
        except re.error as e:
            raise ValueError(f"invalid key_pattern {value!r}: {e}") from e
        return value

    def matches_key(self, key: str) -> bool:
        return re.search(self.key_pattern, key, re.IGNORECASE) is not None


class Violation(BaseModel):
    """One offending call site. ``line`` and ``column`` are 1-based."""

    model_config = ConfigDict(frozen=True)

    path: str
    line: int
    column: int
    storage: str
    method: str
    key: str
    message: str

    def format(self) -> str:
        return f"{self.path}:{self.line}:{self.column}  {self.message}"


DEFAULT_POLICIES = (
    StoragePolicy(key_pattern="recipe", message=FORBIDDEN_RECIPE_MESSAGE),
)

_policy_list = TypeAdapter(list[StoragePolicy])


def load_policies(path: Path) -> list[StoragePolicy]:
    """Read policies from a JSON array of ``{"key_pattern", "message"}`` objects."""
    return _policy_list.validate_json(path.read_bytes())


def _walk(root: Node) -> Iterator[Node]:
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


_SIMPLE_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "b": "\b",
    "f": "\f",
    "v": "\v",
}


def _decode_escape(text: str) -> str:
    """Cooked value of one JS escape sequence such as ``\\x72`` or ``\\u{65}``."""
    body = text[1:]
    if body.startswith("u{"):
        return chr(int(body[2:-1], 16))
    if body[:1] in ("x", "u") and len(body) > 1:
        return chr(int(body[1:], 16))
    if body.isdigit() and set(body) <= set("01234567"):
        return chr(int(body, 8))
    if body[:1] in ("\n", "\r", "\u2028", "\u2029"):
        return ""
    return _SIMPLE_ESCAPES.get(body, body)


def _string_value(node: Node | None) -> str | None:
    """Cooked value of a plain string literal, ``None`` for anything else."""
    if node is None or node.type != "string":
        return None
    parts = []
    for child in node.named_children:
        if child.type == "string_fragment":
            parts.append(child.text.decode())
        elif child.type == "escape_sequence":
            parts.append(_decode_escape(child.text.decode()))
    return "".join(parts)


def _storage_name(node: Node) -> str | None:
    """``localStorage`` for both ``localStorage`` and ``window.localStorage``."""
    if node.type == "identifier":
        return node.text.decode()
    if node.type == "member_expression":
        obj = node.child_by_field_name("object")
        prop = node.child_by_field_name("property")
        if obj is not None and prop is not None and obj.text == b"window":
            return prop.text.decode()
    return None


def _storage_call(node: Node) -> tuple[str, str] | None:
    """``(storage, method)`` when ``node`` calls ``<storage>.<method>``."""
    callee = node.child_by_field_name("function")
    if callee is None:
        return None
    if callee.type == "member_expression":
        prop = callee.child_by_field_name("property")
        method = prop.text.decode() if prop is not None else None
    elif callee.type == "subscript_expression":
        method = _string_value(callee.child_by_field_name("index"))
    else:
        return None
    obj = callee.child_by_field_name("object")
    storage = _storage_name(obj) if obj is not None else None
    if storage is None or method is None:
        return None
    return storage, method


def _first_error(root: Node) -> Node | None:
    for node in _walk(root):
        if node.type == "ERROR" or node.is_missing:
            return node
    return None


def lint_source(
    source: str,
    path: str = "<string>",
    policies: Iterable[StoragePolicy] = DEFAULT_POLICIES,
) -> list[Violation]:
    """Return every policy violation in ``source``, in source order."""
    policies = list(policies)
    data = source.encode()
    tree = Parser(JAVASCRIPT).parse(data)
    if tree.root_node.has_error:
        bad = _first_error(tree.root_node) or tree.root_node
        row, col = bad.start_point
        raise LintParseError(f"{path}:{row + 1}:{col + 1}: cannot parse source")

    violations = []
    for node in _walk(tree.root_node):
        if node.type != "call_expression":
            continue
        call = _storage_call(node)
        if call is None:
            continue
        storage, method = call
        args = node.child_by_field_name("arguments")
        arg_nodes = [
            arg
            for arg in (args.named_children if args is not None else [])
            if arg.type != "comment"
        ]
        if not arg_nodes:
            continue
        key = _string_value(arg_nodes[0])
        if key is None:
            continue
        row, col = node.start_point
        # tree-sitter columns are byte offsets
        col = len(data[node.start_byte - col : node.start_byte].decode())
        for policy in policies:
            if (
                storage in policy.storage_names
                and method in policy.methods
                and policy.matches_key(key)
            ):
                violations.append(
                    Violation(
                        path=path,
                        line=row + 1,
                        column=col + 1,
                        storage=storage,
                        method=method,
                        key=key,
                        message=policy.message,
                    )
                )
    violations.sort(key=lambda v: (v.line, v.column))
    return violations


def iter_source_files(paths: Iterable[Path]) -> Iterator[Path]:
    """Expand files and directories into lintable JavaScript sources."""
    for path in paths:
        if path.is_dir():
            for child in sorted(path.rglob("*")):
                if child.suffix in SOURCE_SUFFIXES and not (
                    SKIP_DIRS & set(child.relative_to(path).parts)
                ):
                    yield child
        else:
            yield path


def lint_paths(
    paths: Iterable[Path],
    policies: Iterable[StoragePolicy] = DEFAULT_POLICIES,
) -> list[Violation]:
    """Lint every source file under ``paths``."""
    policies = list(policies)
    violations = []
    for path in iter_source_files(paths):
        logger.debug("Linting %s", path)
        try:
            source = path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise LintParseError(f"{path}: not valid UTF-8: {e}") from e
        violations.extend(lint_source(source, str(path), policies))
    return violations
