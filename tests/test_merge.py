"""
Tests for bubuild.webpack.merge module.

Tests rule-based configuration merging including:
- Default deep merge (dicts recurse, lists concatenate, scalars replace)
- REPLACE, MERGE and PREPEND rules
- Match rules pairing list elements by predicate
- Loader references reduced to package names
- Input immutability
"""

from __future__ import annotations

import copy
import re

import pytest

from bubuild.webpack.merge import (
    MERGE,
    PREPEND,
    REPLACE,
    Match,
    loader_package,
    merge_with_rules,
    same_predicate,
)

pytestmark = pytest.mark.unit


class TestDefaultMerge:
    """Tests for keys the rules table does not name."""

    def test_dicts_merge_recursively(self):
        """Test that nested dicts are deep-merged."""
        base = {"output": {"path": "/a", "filename": "[name].js"}}
        override = {"output": {"path": "/b"}}

        merged = merge_with_rules({}, base, override)

        assert merged == {"output": {"path": "/b", "filename": "[name].js"}}

    def test_lists_concatenate(self):
        """Test that lists are concatenated base first."""
        merged = merge_with_rules({}, {"plugins": ["a", "b"]}, {"plugins": ["c"]})

        assert merged["plugins"] == ["a", "b", "c"]

    def test_scalars_replace(self):
        """Test that the override scalar wins."""
        merged = merge_with_rules({}, {"mode": "production"}, {"mode": "development"})

        assert merged["mode"] == "development"

    def test_keys_only_on_one_side_are_kept(self):
        """Test that keys from either side survive."""
        merged = merge_with_rules({}, {"a": 1}, {"b": 2})

        assert merged == {"a": 1, "b": 2}


class TestRules:
    """Tests for REPLACE, MERGE and PREPEND."""

    def test_replace_discards_base_value(self):
        """Test that REPLACE keeps only the override value."""
        base = {"entry": {"blocks/a": "./a.js"}}
        override = {"entry": {"css/theme": "./theme.scss"}}

        merged = merge_with_rules({"entry": REPLACE}, base, override)

        assert merged["entry"] == {"css/theme": "./theme.scss"}

    def test_replace_with_empty_mapping(self):
        """Test that an empty override still replaces."""
        merged = merge_with_rules({"entry": REPLACE}, {"entry": {"a": "a"}}, {"entry": {}})

        assert merged["entry"] == {}

    def test_merge_is_shallow_and_override_wins(self):
        """Test that MERGE unions keys without recursing."""
        base = {"options": {"sourceMap": False, "nested": {"x": 1}}}
        override = {"options": {"sourceMap": True, "nested": {"y": 2}}}

        merged = merge_with_rules({"options": MERGE}, base, override)

        assert merged["options"] == {"sourceMap": True, "nested": {"y": 2}}

    def test_prepend_puts_override_first(self):
        """Test that PREPEND places override entries ahead of base entries."""
        base = {"modules": ["node_modules", "shared"]}
        override = {"modules": ["custom", "node_modules"]}

        merged = merge_with_rules({"modules": PREPEND}, base, override)

        assert merged["modules"] == ["custom", "node_modules", "shared"]

    def test_nested_rules_table(self):
        """Test that a nested table applies to nested mappings."""
        base = {"resolveLoader": {"modules": ["node_modules"], "extensions": [".js"]}}
        override = {"resolveLoader": {"modules": ["loaders"], "extensions": [".mjs"]}}

        merged = merge_with_rules({"resolveLoader": {"modules": PREPEND}}, base, override)

        assert merged["resolveLoader"]["modules"] == ["loaders", "node_modules"]
        assert merged["resolveLoader"]["extensions"] == [".js", ".mjs"]

    def test_unknown_rule_raises(self):
        """Test that a rules table entry that is not a rule is rejected."""
        with pytest.raises(TypeError, match="Unknown merge rule"):
            merge_with_rules({"a": "replace"}, {"a": 1}, {"a": 2})


class TestMatchRule:
    """Tests for pairing list elements by predicate."""

    RULES = {"rules": Match("test", {"use": Match("loader", {"options": MERGE})})}

    def test_pairs_rules_by_pattern(self):
        """Test that rules with equal patterns are merged together."""
        base = {
            "rules": [
                {
                    "test": re.compile(r"\.scss$"),
                    "use": [{"loader": "sass-loader", "options": {"a": 1}}],
                }
            ]
        }
        override = {
            "rules": [
                {
                    "test": re.compile(r"\.scss$"),
                    "use": [{"loader": "sass-loader", "options": {"b": 2}}],
                }
            ]
        }

        merged = merge_with_rules(self.RULES, base, override)

        assert len(merged["rules"]) == 1
        assert merged["rules"][0]["use"] == [
            {"loader": "sass-loader", "options": {"a": 1, "b": 2}}
        ]

    def test_unmatched_base_elements_keep_position(self):
        """Test that base elements without a partner stay where they were."""
        base = {
            "rules": [
                {"test": re.compile(r"\.js$"), "loader": "babel-loader"},
                {"test": re.compile(r"\.svg$"), "loader": "svgr"},
            ]
        }
        override = {"rules": [{"test": re.compile(r"\.svg$"), "options": {"icon": True}}]}

        merged = merge_with_rules(self.RULES, base, override)

        assert [rule["test"].pattern for rule in merged["rules"]] == [r"\.js$", r"\.svg$"]
        assert merged["rules"][1]["options"] == {"icon": True}

    def test_unmatched_override_elements_are_appended(self):
        """Test that new override elements follow the base elements."""
        base = {"rules": [{"test": re.compile(r"\.js$")}]}
        override = {
            "rules": [
                {"test": re.compile(r"\.png$")},
                {"test": re.compile(r"\.woff2$")},
            ]
        }

        merged = merge_with_rules(self.RULES, base, override)

        assert [rule["test"].pattern for rule in merged["rules"]] == [
            r"\.js$",
            r"\.png$",
            r"\.woff2$",
        ]

    def test_flags_distinguish_patterns(self):
        """Test that patterns with different flags are not paired."""
        base = {"rules": [{"test": re.compile(r"\.scss$")}]}
        override = {"rules": [{"test": re.compile(r"\.scss$", re.IGNORECASE)}]}

        merged = merge_with_rules(self.RULES, base, override)

        assert len(merged["rules"]) == 2

    def test_bare_loader_strings_pair_with_objects(self):
        """Test that a bare loader name pairs with a loader object."""
        base = {
            "rules": [{"test": re.compile(r"\.scss$"), "use": ["css-loader", "sass-loader"]}]
        }
        override = {
            "rules": [
                {
                    "test": re.compile(r"\.scss$"),
                    "use": [{"loader": "sass-loader", "options": {"sourceMap": True}}],
                }
            ]
        }

        merged = merge_with_rules(self.RULES, base, override)

        assert merged["rules"][0]["use"] == [
            "css-loader",
            {"loader": "sass-loader", "options": {"sourceMap": True}},
        ]

    def test_one_override_merges_into_every_matching_base_element(self):
        """Test that an override element pairs with each equal base element."""
        base = {
            "rules": [
                {
                    "test": re.compile(r"\.scss$"),
                    "use": [{"loader": "sass-loader", "options": {"a": 1}}],
                },
                {
                    "test": re.compile(r"\.scss$"),
                    "resourceQuery": "module",
                    "use": [{"loader": "sass-loader", "options": {"a": 2}}],
                },
            ]
        }
        override = {
            "rules": [
                {
                    "test": re.compile(r"\.scss$"),
                    "use": [{"loader": "sass-loader", "options": {"b": 3}}],
                }
            ]
        }

        merged = merge_with_rules(self.RULES, base, override)

        assert len(merged["rules"]) == 2
        assert merged["rules"][0]["use"][0]["options"] == {"a": 1, "b": 3}
        assert merged["rules"][1]["use"][0]["options"] == {"a": 2, "b": 3}
        assert merged["rules"][1]["resourceQuery"] == "module"

    def test_resolved_loader_paths_pair_with_names(self):
        """Test that a resolved loader path pairs with its package name."""
        base = {
            "rules": [
                {
                    "test": "x",
                    "use": [
                        {"loader": "/t/node_modules/css-loader/dist/cjs.js"},
                        "C:\\t\\node_modules\\sass-loader\\dist\\cjs.js",
                    ],
                }
            ]
        }
        override = {
            "rules": [
                {
                    "test": "x",
                    "use": [
                        {"loader": "css-loader", "options": {"sourceMap": True}},
                        {"loader": "sass-loader", "options": {"sourceMap": True}},
                    ],
                }
            ]
        }

        merged = merge_with_rules(self.RULES, base, override)

        assert merged["rules"][0]["use"] == [
            {"loader": "/t/node_modules/css-loader/dist/cjs.js", "options": {"sourceMap": True}},
            {
                "loader": "C:\\t\\node_modules\\sass-loader\\dist\\cjs.js",
                "options": {"sourceMap": True},
            },
        ]

    def test_elements_without_predicate_never_pair(self):
        """Test that elements missing the match key are kept separately."""
        base = {"rules": [{"loader": "a"}]}
        override = {"rules": [{"loader": "b"}]}

        merged = merge_with_rules(self.RULES, base, override)

        assert merged["rules"] == [{"loader": "a"}, {"loader": "b"}]


class TestSamePredicate:
    """Tests for predicate equality."""

    def test_none_never_matches(self):
        """Test that a missing predicate matches nothing."""
        assert same_predicate(None, None) is False

    def test_patterns_compare_by_source(self):
        """Test that separately compiled equal patterns match."""
        assert same_predicate(re.compile("a+"), re.compile("a+"))
        assert not same_predicate(re.compile("a+"), re.compile("b+"))

    def test_strings_compare_by_value(self):
        """Test that plain values use equality."""
        assert same_predicate("sass-loader", "sass-loader")
        assert not same_predicate("sass-loader", "css-loader")


class TestLoaderPackage:
    """Tests for reducing loader references to package names."""

    @pytest.mark.parametrize(
        "loader,expected",
        [
            ("sass-loader", "sass-loader"),
            ("/t/node_modules/css-loader/dist/cjs.js", "css-loader"),
            ("/t/node_modules/@svgr/webpack/lib/index.js", "@svgr/webpack"),
            ("@svgr/webpack", "@svgr/webpack"),
            ("/a/node_modules/x/node_modules/postcss-loader/dist/cjs.js", "postcss-loader"),
            ("C:\\t\\node_modules\\sass-loader\\dist\\cjs.js", "sass-loader"),
            ("css-loader?modules", "css-loader"),
            ("./loaders/svg.js", "./loaders/svg.js"),
        ],
    )
    def test_reduces_to_package(self, loader, expected):
        """Test package names for names, paths, scopes and queries."""
        assert loader_package(loader) == expected


class TestImmutability:
    """Tests that inputs are left untouched."""

    def test_inputs_not_mutated(self):
        """Test that neither input changes and no containers are shared."""
        base = {"a": {"b": [1, 2]}, "rules": [{"test": "x", "use": [{"loader": "l"}]}]}
        override = {"a": {"b": [3]}, "rules": [{"test": "x", "use": [{"loader": "l", "options": {"o": 1}}]}]}
        base_before = copy.deepcopy(base)
        override_before = copy.deepcopy(override)

        merged = merge_with_rules(TestMatchRule.RULES, base, override)
        merged["a"]["b"].append(99)

        assert base == base_before
        assert override == override_before
