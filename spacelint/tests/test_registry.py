"""
Tests for the rule and adapter registry.
"""

from spacelint.engine.javascript_adapter import JavaScriptAdapter
from spacelint.engine.registry import Registry
from spacelint.engine.types import LanguageAdapter, Requires, RuleMeta


class _FakeRule:
    requires = Requires(raw_text=True, syntax=False)

    def __init__(self, rule_id, langs=("javascript",)):
        self.meta = RuleMeta(id=rule_id, category="style", priority="P3",
                             autofix_safety="safe", langs=list(langs))

    def visit(self, ctx):
        return []


class _PlainAdapter(LanguageAdapter):
    language_id = "plain"
    file_extensions = (".txt",)

    def parse(self, text):
        return None

    def list_files(self, paths):
        return []


class TestRegistry:
    """Test cases for Registry."""

    def setup_method(self):
        self.registry = Registry()

    def test_register_and_lookup(self):
        rule = _FakeRule("style.a")
        self.registry.register_rule(rule)

        assert self.registry.get_rule("style.a") is rule
        assert self.registry.get_rule("style.missing") is None

    def test_duplicate_registration_ignored(self):
        first = _FakeRule("style.a")
        self.registry.register_rule(first)
        self.registry.register_rule(_FakeRule("style.a"))

        assert self.registry.get_all_rules() == [first]

    def test_rules_for_language(self):
        self.registry.register_rule(_FakeRule("style.a"))
        self.registry.register_rule(_FakeRule("style.b", langs=("python",)))

        assert [r.meta.id for r in self.registry.get_rules_for_language("javascript")] == ["style.a"]

    def test_enabled_rules_by_pattern(self):
        for rule_id in ("style.a", "style.b", "layout.c"):
            self.registry.register_rule(_FakeRule(rule_id))

        def ids(patterns):
            return [r.meta.id for r in self.registry.get_enabled_rules(patterns, "javascript")]

        assert ids(["*"]) == ["style.a", "style.b", "layout.c"]
        assert ids(["style.*"]) == ["style.a", "style.b"]
        assert ids(["layout.c", "style.b"]) == ["style.b", "layout.c"]
        assert ids(["style.*", "style.a"]) == ["style.a", "style.b"]
        assert ids(["nomatch"]) == []
        assert ids([]) == []

    def test_adapter_for_file(self):
        adapter = JavaScriptAdapter()
        self.registry.register_adapter("javascript", adapter)

        assert self.registry.get_adapter("javascript") is adapter
        assert self.registry.get_adapter_for_file("src/app.MJS") is adapter
        assert self.registry.get_adapter_for_file("setup.py") is None

    def test_adapter_needs_only_parse_and_list_files(self):
        adapter = _PlainAdapter()
        self.registry.register_adapter(adapter.language_id, adapter)

        assert self.registry.get_adapter_for_file("notes.TXT") is adapter
        assert list(adapter.iter_template_spans(None)) == []

    def test_discover_builtin_rules(self):
        discovered = self.registry.discover_rules(["spacelint.rules"])

        assert discovered == 2
        assert set(self.registry.get_rule_ids()) == {"style.no_multiple_empty_lines", "style.eol_last"}
        # Second discovery finds the same rules again and registers nothing
        assert self.registry.discover_rules(["spacelint.rules"]) == 0

    def test_discover_missing_package(self, caplog):
        assert self.registry.discover_rules(["spacelint.no_such_package"]) == 0
        assert "Could not import package" in caplog.text

    def test_clear(self):
        self.registry.register_rule(_FakeRule("style.a"))
        self.registry.register_adapter("javascript", JavaScriptAdapter())
        self.registry.clear()

        assert self.registry.get_all_rules() == []
        assert self.registry.get_all_adapters() == {}
