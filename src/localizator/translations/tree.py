"""
Translation trees and the flat <-> nested conversion.

A flat mapping such as ``{"auth.login.title": "Login"}`` is regrouped into
units (one output document per first key segment) holding a tree of
``Branch`` and ``Leaf`` nodes. ``flatten_units(build_units(m, n)) == m``
holds for any mapping without path conflicts and either nesting setting.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import TypeAlias

logger = logging.getLogger(__name__)

DELIMITER = "."
DEFAULT_UNIT = "messages"


@dataclass(frozen=True)
class Leaf:
    """A translated string."""

    value: str


@dataclass
class Branch:
    """An interior node mapping path segments to child nodes."""

    children: dict[str, Node] = field(default_factory=dict)


Node: TypeAlias = Leaf | Branch


@dataclass
class TranslationUnit:
    """
    One output document.

    ``prefixed`` is False for the default unit holding keys without a
    delimiter; their flat keys do not carry the unit name.
    """

    name: str
    tree: Branch
    prefixed: bool = True


@dataclass(frozen=True)
class TreeConflict:
    """A key that could not be placed because its path collides with another."""

    key: str
    reason: str


def insert(tree: Branch, path: list[str], value: str) -> str | None:
    """
    Place ``value`` at ``path`` inside ``tree``, creating branches as needed.

    Returns:
        None on success, otherwise the reason the path is taken
    """
    current = tree
    for depth, segment in enumerate(path[:-1]):
        child = current.children.get(segment)
        if child is None:
            child = Branch()
            current.children[segment] = child
        elif isinstance(child, Leaf):
            taken = DELIMITER.join(path[: depth + 1])
            return f"'{taken}' already holds a value"
        current = child

    last = path[-1]
    existing = current.children.get(last)
    if isinstance(existing, Branch):
        return f"'{DELIMITER.join(path)}' already holds nested keys"
    current.children[last] = Leaf(value)
    return None


def build_units(
    flat: Mapping[str, str],
    use_nesting: bool,
    default_unit: str = DEFAULT_UNIT,
    conflicts: list[TreeConflict] | None = None,
) -> list[TranslationUnit]:
    """
    Regroup a flat mapping into output units.

    Args:
        flat: Flat key -> value mapping
        use_nesting: Split the remainder of each key into nested branches
        default_unit: Unit name for keys without a delimiter
        conflicts: Optional list collecting keys that could not be placed

    Returns:
        Units in first-seen order; the default unit (if any) comes last
    """
    units: dict[str, TranslationUnit] = {}
    bare = TranslationUnit(name=default_unit, tree=Branch(), prefixed=False)

    for key, value in flat.items():
        if DELIMITER not in key:
            bare.tree.children[key] = Leaf(value)
            continue

        unit_name, remainder = key.split(DELIMITER, 1)
        unit = units.get(unit_name)
        if unit is None:
            unit = TranslationUnit(name=unit_name, tree=Branch())
            units[unit_name] = unit

        path = remainder.split(DELIMITER) if use_nesting else [remainder]
        reason = insert(unit.tree, path, value)
        if reason is not None:
            logger.warning(f"Skipping translation key '{key}': {reason}")
            if conflicts is not None:
                conflicts.append(TreeConflict(key=key, reason=reason))

    result = list(units.values())
    if bare.tree.children:
        result.append(bare)
    return result


def flatten_tree(node: Node, prefix: str | None = None) -> dict[str, str]:
    """
    Flatten a tree by joining path segments with the delimiter.

    Args:
        node: Tree to flatten
        prefix: First key segment for every entry, or None for no prefix

    Returns:
        Flat key -> value mapping
    """
    if isinstance(node, Leaf):
        return {prefix or "": node.value}

    flat: dict[str, str] = {}
    for segment, child in node.children.items():
        key = segment if prefix is None else f"{prefix}{DELIMITER}{segment}"
        flat.update(flatten_tree(child, key))
    return flat


def flatten_units(units: Iterable[TranslationUnit]) -> dict[str, str]:
    """Inverse of ``build_units``."""
    flat: dict[str, str] = {}
    for unit in units:
        flat.update(flatten_tree(unit.tree, unit.name if unit.prefixed else None))
    return flat


def sort_tree(tree: Branch) -> Branch:
    """Return a copy of ``tree`` with every level sorted by key."""
    children: dict[str, Node] = {}
    for segment in sorted(tree.children):
        child = tree.children[segment]
        children[segment] = sort_tree(child) if isinstance(child, Branch) else child
    return Branch(children)


def merge_trees(target: Branch, source: Branch, path: str = "") -> list[str]:
    """
    Merge ``source`` into ``target`` in place without overwriting leaves.

    Returns:
        Paths that were left out because both trees define them differently
    """
    skipped: list[str] = []
    for segment, child in source.children.items():
        child_path = f"{path}{DELIMITER}{segment}" if path else segment
        existing = target.children.get(segment)
        if existing is None:
            target.children[segment] = child
        elif isinstance(existing, Branch) and isinstance(child, Branch):
            skipped.extend(merge_trees(existing, child, child_path))
        elif existing != child:
            skipped.append(child_path)
    return skipped


def merge_units(units: Iterable[TranslationUnit]) -> list[TranslationUnit]:
    """
    Merge units that will be written to the same document.

    The default unit and a prefixed unit of the same name share one file.
    """
    merged: dict[str, TranslationUnit] = {}
    for unit in units:
        current = merged.get(unit.name)
        if current is None:
            merged[unit.name] = TranslationUnit(
                name=unit.name, tree=copy.deepcopy(unit.tree), prefixed=unit.prefixed
            )
            continue
        for path in merge_trees(current.tree, unit.tree):
            logger.warning(f"Unit '{unit.name}' defines '{path}' twice; keeping the first value")
    return list(merged.values())


def tree_from_plain(data: Mapping[str, object]) -> Branch:
    """
    Convert decoded document data (nested dicts) into a tree.

    Non-string scalars become their string form; ``None`` becomes ``""``.
    """
    children: dict[str, Node] = {}
    for key, value in data.items():
        if isinstance(value, Mapping):
            children[str(key)] = tree_from_plain(value)  # pyright: ignore[reportUnknownArgumentType]
        elif value is None:
            children[str(key)] = Leaf("")
        elif isinstance(value, bool):
            children[str(key)] = Leaf("true" if value else "false")
        else:
            children[str(key)] = Leaf(str(value))
    return Branch(children)
