# Copyright 2025 Roger Cibrian
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Rule-based merging of webpack configuration objects.

A rules table maps configuration keys to one of a closed set of merge rules.
Nested tables describe nested mappings. Keys that the table does not name
fall back to the default deep merge.

Merge Rules:
    REPLACE: The override value replaces the base value.
    MERGE: Shallow union of two mappings; override wins on conflicting keys.
    PREPEND: List merge putting override entries first; base entries that
        the override already lists are dropped.
    Match(key, rules): List merge that pairs each base element with the
        first override element whose ``key`` value is equal (compiled
        patterns compare by source and flags, loaders by package name).
        One override element may pair with several base elements. Paired
        elements are merged with the nested ``rules`` and keep the base
        ``key`` value. Unpaired base elements keep their position; override
        elements that paired with nothing are appended in order.

Default Merge:
    - dict + dict -> deep merge
    - list + list -> base followed by override (concatenated)
    - everything else -> override overwrites base

Example:
    ```python
    import re
    from bubuild.webpack.merge import MERGE, REPLACE, Match, merge_with_rules

    rules = {
        "devtool": REPLACE,
        "module": {"rules": Match("test", {"use": Match("loader", {"options": MERGE})})},
    }
    merged = merge_with_rules(rules, base_config, overrides)
    ```

Note:
    Inputs are never mutated. The returned object shares no mutable
    containers with either input.
"""

from __future__ import annotations

from collections.abc import Mapping
import copy
from dataclasses import dataclass, field
from enum import Enum
import re
from typing import Any, Union


class Strategy(Enum):
    """Merge rules that need no parameters."""

    REPLACE = "replace"
    MERGE = "merge"
    PREPEND = "prepend"


REPLACE = Strategy.REPLACE
MERGE = Strategy.MERGE
PREPEND = Strategy.PREPEND

LOADER_KEY = "loader"


@dataclass(frozen=True)
class Match:
    """Pair list elements by the value stored under ``key``.

    Attributes:
        key: Element field compared to pair elements (e.g., "test").
        rules: Rules table applied when merging a pair.
    """

    key: str
    rules: Mapping[str, Any] = field(default_factory=dict)


Rule = Union[Strategy, Match, Mapping[str, Any]]


def merge_with_rules(
    rules: Mapping[str, Rule], base: Mapping[str, Any], override: Mapping[str, Any]
) -> dict[str, Any]:
    """Merge ``override`` onto ``base`` following a rules table.

    Args:
        rules: Table mapping keys to merge rules or nested tables.
        base: Left-hand configuration object.
        override: Right-hand configuration object.

    Returns:
        A new merged configuration object.

    Raises:
        TypeError: If the rules table holds something that is not a rule.
    """
    return _merge_mapping(base, override, rules)


def _merge_mapping(
    base: Mapping[str, Any], override: Mapping[str, Any], rules: Mapping[str, Rule]
) -> dict[str, Any]:
    result: dict[str, Any] = {k: copy.deepcopy(v) for k, v in base.items()}
    for key, value in override.items():
        if key not in result:
            result[key] = copy.deepcopy(value)
            continue
        result[key] = _apply_rule(rules.get(key), result[key], value)
    return result


def _apply_rule(rule: Rule | None, left: Any, right: Any) -> Any:
    if rule is None:
        return _default_merge(left, right)
    if rule is REPLACE:
        return copy.deepcopy(right)
    if rule is MERGE:
        if isinstance(left, Mapping) and isinstance(right, Mapping):
            return {**left, **copy.deepcopy(dict(right))}
        return copy.deepcopy(right)
    if rule is PREPEND:
        if isinstance(left, list) and isinstance(right, list):
            return copy.deepcopy(right) + [
                copy.deepcopy(item) for item in left if item not in right
            ]
        return copy.deepcopy(right)
    if isinstance(rule, Match):
        if isinstance(left, list) and isinstance(right, list):
            return _match_lists(left, right, rule)
        return copy.deepcopy(right)
    if isinstance(rule, Mapping):
        if isinstance(left, Mapping) and isinstance(right, Mapping):
            return _merge_mapping(left, right, rule)
        return copy.deepcopy(right)
    raise TypeError(f"Unknown merge rule: {rule!r}")


def _default_merge(left: Any, right: Any) -> Any:
    if isinstance(left, Mapping) and isinstance(right, Mapping):
        return _merge_mapping(left, right, {})
    if isinstance(left, list) and isinstance(right, list):
        return copy.deepcopy(left) + copy.deepcopy(right)
    return copy.deepcopy(right)


def _match_lists(left: list[Any], right: list[Any], rule: Match) -> list[Any]:
    merged: list[Any] = []
    matched: set[int] = set()

    for item in left:
        partner = _find_partner(item, right, rule.key)
        if partner is None:
            merged.append(copy.deepcopy(item))
            continue
        matched.add(partner)
        merged.append(_merge_pair(item, right[partner], rule))

    merged.extend(
        copy.deepcopy(item) for index, item in enumerate(right) if index not in matched
    )
    return merged


def _merge_pair(item: Any, other: Any, rule: Match) -> Any:
    """Merge a paired element; the base keeps its own predicate value."""
    if isinstance(item, str):
        # Bare loader string paired with a loader object
        item = {rule.key: item}
    if not (isinstance(item, Mapping) and isinstance(other, Mapping)):
        return copy.deepcopy(other)
    result = _merge_mapping(item, other, rule.rules)
    if rule.key in item:
        result[rule.key] = copy.deepcopy(item[rule.key])
    return result


def _find_partner(item: Any, candidates: list[Any], key: str) -> int | None:
    wanted = _predicate(item, key)
    if wanted is None:
        return None
    for index, candidate in enumerate(candidates):
        if same_predicate(wanted, _predicate(candidate, key)):
            return index
    return None


def _predicate(item: Any, key: str) -> Any:
    if isinstance(item, Mapping):
        value = item.get(key)
    elif isinstance(item, str):
        # Bare strings in a loader chain are loader names
        value = item
    else:
        return None
    if key == LOADER_KEY and isinstance(value, str):
        return loader_package(value)
    return value


def loader_package(loader: str) -> str:
    """Package a loader reference points at.

    Resolved paths (as ``require.resolve`` returns them) reduce to the
    package under the last ``node_modules`` directory, scoped packages
    included. Query strings are ignored.

    Example:
        >>> loader_package("/theme/node_modules/css-loader/dist/cjs.js")
        'css-loader'
        >>> loader_package("/t/node_modules/@svgr/webpack/lib/index.js")
        '@svgr/webpack'
        >>> loader_package("sass-loader")
        'sass-loader'
    """
    reference = loader.split("?", 1)[0].replace("\\", "/")
    marker = "node_modules/"
    if marker in reference:
        reference = reference.rsplit(marker, 1)[1]
    elif reference.startswith(("/", ".")):
        return reference
    parts = reference.split("/")
    if parts[0].startswith("@") and len(parts) > 1:
        return "/".join(parts[:2])
    return parts[0]


def same_predicate(left: Any, right: Any) -> bool:
    """Return True when two match predicates select the same files.

    Compiled patterns are equal when their source and flags are equal;
    everything else uses ``==``.

    Example:
        >>> same_predicate(re.compile(r"\\.scss$"), re.compile(r"\\.scss$"))
        True
        >>> same_predicate(re.compile(r"\\.scss$"), re.compile(r"\\.css$"))
        False
    """
    if left is None or right is None:
        return False
    if isinstance(left, re.Pattern) and isinstance(right, re.Pattern):
        return left.pattern == right.pattern and left.flags == right.flags
    return left == right
