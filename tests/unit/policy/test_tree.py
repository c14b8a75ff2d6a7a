"""Tests for the permission tree."""

import pytest

from src.policy.environment import Environment
from src.policy.errors import InvalidRuleError
from src.policy.rules import Effect, PermissionKind, PermissionRule
from src.policy.tree import NodeEffect, PermissionNode, PermissionTree, RootNode


def allow(role, *resource):
    return PermissionRule(Effect.ALLOW, role, resource)


def deny(role, *resource):
    return PermissionRule(Effect.DENY, role, resource)


lit = PermissionKind.literal
var = PermissionKind.variable
set_of = PermissionKind.set_of
ANY = PermissionKind.universal()

EMPTY = Environment.empty()


class TestTreeConstruction:
    """Test building tries from rules."""

    def test_root_created_per_role(self):
        """Test one root per role with default deny."""
        tree = PermissionTree.from_rules([allow("A", lit("x")), allow("B", lit("y"))])
        assert sorted(tree.roles) == ["A", "B"]
        assert len(tree) == 2
        assert tree.root_for("A").effect == NodeEffect.DENY
        assert tree.root_for("C") is None

    def test_chain_effects(self):
        """Test only the deepest node carries the rule effect."""
        tree = PermissionTree.from_rules([allow("A", lit("docs"), lit("public"))])
        root = tree.root_for("A")

        assert len(root.children) == 1
        docs = root.children[0]
        assert docs.kind == lit("docs")
        assert docs.effect == NodeEffect.UNSET
        assert len(docs.children) == 1
        public = docs.children[0]
        assert public.effect == NodeEffect.ALLOW
        assert public.children == []

    def test_prefixes_are_not_merged(self):
        """Test each rule contributes its own node chain."""
        tree = PermissionTree.from_rules([
            allow("A", lit("docs"), lit("public")),
            deny("A", lit("docs"), lit("private")),
        ])
        root = tree.root_for("A")
        assert [child.kind for child in root.children] == [lit("docs"), lit("docs")]
        assert root.children[1].children[0].effect == NodeEffect.DENY

    def test_empty_resource_rejected(self):
        """Test a rule with no segments is a caller bug."""
        with pytest.raises(InvalidRuleError):
            PermissionTree.from_rules([allow("A")])

    def test_add_rule_to_root_directly(self):
        """Test RootNode.add_rule appends in insertion order."""
        root = RootNode()
        root.add_rule(allow("A", lit("a")))
        root.add_rule(allow("A", ANY))
        assert [child.kind for child in root.children] == [lit("a"), ANY]


class TestNodeMatching:
    """Test single-segment matching for each kind."""

    def test_literal(self):
        """Test literal matches exactly."""
        node = PermissionNode(lit("docs"))
        assert node.matches("docs", EMPTY)
        assert not node.matches("Docs", EMPTY)
        assert not node.matches("doc", EMPTY)

    def test_variable_bound(self):
        """Test variable matches its bound value only."""
        node = PermissionNode(var("user_id"))
        env = Environment.build({"user_id": "42"})
        assert node.matches("42", env)
        assert not node.matches("43", env)

    def test_variable_unbound(self):
        """Test unbound variable never matches."""
        node = PermissionNode(var("user_id"))
        assert not node.matches("42", EMPTY)
        assert not node.matches("", EMPTY)

    def test_set(self):
        """Test set membership."""
        node = PermissionNode(set_of("staff"))
        env = Environment.build(sets={"staff": ["7", "9"]})
        assert node.matches("9", env)
        assert not node.matches("8", env)

    def test_unknown_set(self):
        """Test unknown set never matches."""
        node = PermissionNode(set_of("staff"))
        assert not node.matches("7", EMPTY)

    def test_universal(self):
        """Test universal matches anything."""
        node = PermissionNode(ANY)
        assert node.matches("anything", EMPTY)
        assert node.matches("*", EMPTY)


class TestHasPermissionFor:
    """Test path evaluation across the tree."""

    def test_no_rules_denies(self):
        """Test empty tree denies everything."""
        tree = PermissionTree.from_rules([])
        assert not tree.has_permission_for(["A"], ["x"], EMPTY)

    def test_unknown_role_denies(self):
        """Test role without a root denies."""
        tree = PermissionTree.from_rules([allow("A", lit("x"))])
        assert not tree.has_permission_for(["B"], ["x"], EMPTY)

    def test_literal_multi_segment(self):
        """Test exact multi-segment literal rule."""
        tree = PermissionTree.from_rules([allow("Editor", lit("docs"), lit("public"))])
        assert tree.has_permission_for(["Editor"], ["docs", "public"], EMPTY)
        assert not tree.has_permission_for(["Editor"], ["docs", "private"], EMPTY)

    def test_incomplete_path_denied(self):
        """Test intermediate nodes grant nothing."""
        tree = PermissionTree.from_rules([allow("Editor", lit("docs"), lit("public"))])
        assert not tree.has_permission_for(["Editor"], ["docs"], EMPTY)

    def test_longer_path_denied(self):
        """Test a path deeper than the rule is denied."""
        tree = PermissionTree.from_rules([allow("Guest", ANY)])
        assert tree.has_permission_for(["Guest"], ["anything"], EMPTY)
        assert not tree.has_permission_for(["Guest"], ["a", "b"], EMPTY)

    def test_empty_path_denied(self):
        """Test an empty resource path never matches."""
        tree = PermissionTree.from_rules([allow("Guest", ANY)])
        assert not tree.has_permission_for(["Guest"], [], EMPTY)

    def test_deny_terminal(self):
        """Test a terminal deny evaluates to False."""
        tree = PermissionTree.from_rules([deny("A", lit("x"))])
        assert not tree.has_permission_for(["A"], ["x"], EMPTY)

    def test_any_granting_sibling_wins(self):
        """Test OR across siblings: a deny does not mask an allow."""
        tree = PermissionTree.from_rules([
            deny("A", lit("docs"), ANY),
            allow("A", lit("docs"), lit("public")),
        ])
        assert tree.has_permission_for(["A"], ["docs", "public"], EMPTY)
        assert not tree.has_permission_for(["A"], ["docs", "other"], EMPTY)

    def test_mixed_kinds(self):
        """Test variable, set and universal segments in one pattern."""
        tree = PermissionTree.from_rules([
            allow("A", lit("users"), var("me"), set_of("sections"), ANY),
        ])
        env = Environment.build({"me": "42"}, {"sections": ["inbox", "sent"]})
        assert tree.has_permission_for(["A"], ["users", "42", "inbox", "m1"], env)
        assert not tree.has_permission_for(["A"], ["users", "43", "inbox", "m1"], env)
        assert not tree.has_permission_for(["A"], ["users", "42", "trash", "m1"], env)

    def test_chain_checked_in_order(self):
        """Test any role in the chain may grant."""
        tree = PermissionTree.from_rules([
            allow("Admin", lit("x")),
            deny("User", lit("x")),
        ])
        assert tree.has_permission_for(["User", "Admin"], ["x"], EMPTY)
        assert not tree.has_permission_for(["User"], ["x"], EMPTY)

    def test_accepts_tuple_resource(self):
        """Test resource paths may be any sequence."""
        tree = PermissionTree.from_rules([allow("A", lit("a"), lit("b"))])
        assert tree.has_permission_for(("A",), ("a", "b"), EMPTY)

    def test_deep_paths(self):
        """Test paths deeper than the interpreter recursion limit."""
        depth = 5000
        segments = [f"s{i}" for i in range(depth)]
        tree = PermissionTree.from_rules([allow("A", *[lit(s) for s in segments])])

        assert tree.has_permission_for(["A"], segments, EMPTY)
        assert not tree.has_permission_for(["A"], segments[:-1], EMPTY)
        assert not tree.has_permission_for(["A"], segments + ["extra"], EMPTY)
        assert not tree.has_permission_for(["A"], segments[:-1] + ["other"], EMPTY)

    def test_node_evaluation(self):
        """Test evaluating a single subtree directly."""
        node = PermissionNode(lit("a"), children=[PermissionNode(ANY, NodeEffect.ALLOW)])
        assert node.has_permission_for(["a", "b"], EMPTY)
        assert not node.has_permission_for(["a"], EMPTY)
        assert not node.has_permission_for([], EMPTY)

    def test_rebuild_is_deterministic(self):
        """Test identical rules build trees with identical answers."""
        rules = [
            allow("A", lit("docs"), ANY),
            deny("A", lit("docs"), lit("secret")),
            allow("A", var("v")),
        ]
        env = Environment.build({"v": "docs"})
        first = PermissionTree.from_rules(rules)
        second = PermissionTree.from_rules(rules)
        for path in (["docs"], ["docs", "secret"], ["docs", "x"], ["x"], []):
            assert first.has_permission_for(["A"], path, env) == \
                second.has_permission_for(["A"], path, env)
