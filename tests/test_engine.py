"""
Tests for the no-one-time-vars rule — detection and automatic fixes

Covers:
- Single-use detection (zero / one / many reads)
- Scope isolation (if/else arms, shadowing, hoisted var)
- Exclusion policy (loops, callbacks, await, exports, options)
- Fix output, including destructuring and parenthesization
- Fix loop behaviour (deferred fixes, idempotence)

All tests parse real source with tree-sitter and are skipped without
tree-sitter-language-pack.
"""

import pytest

from tests.factories import requires_tree_sitter

pytestmark = requires_tree_sitter


def names(findings):
    return [f.name for f in findings]


# =============================================================================
# Detection
# =============================================================================

class TestDetection:
    """Which bindings are reported."""

    def test_single_read_is_reported(self):
        """A variable read exactly once produces one finding."""
        from onetime.core.engine import check_source

        findings = check_source("var testVar = 'once';\nconsole.log(testVar);\n")

        assert names(findings) == ["testVar"]
        assert findings[0].message == "Variable 'testVar' is only used once."

    def test_finding_points_at_declared_name(self):
        """Line and column are 1-based and locate the declared identifier."""
        from onetime.core.engine import check_source

        findings = check_source("\nconst total = price * qty;\nshow(total);\n")

        assert len(findings) == 1
        assert (findings[0].line, findings[0].column) == (2, 7)
        assert (findings[0].end_line, findings[0].end_column) == (2, 12)

    def test_two_reads_are_not_reported(self):
        """A variable read twice is not a one-time variable."""
        from onetime.core.engine import check_source

        source = "var testVar = 'multiple times';\nconsole.log(testVar);\nconsole.log(testVar);\n"

        assert check_source(source) == []

    def test_unread_variable_is_not_reported(self):
        """Zero reads is a different problem (unused), not this rule's."""
        from onetime.core.engine import check_source

        assert check_source("const unused = compute();\n") == []

    def test_member_property_names_are_not_reads(self):
        """`obj.a` does not read a variable named `a`."""
        from onetime.core.engine import check_source

        findings = check_source("const a = 1;\nuse(obj.a, a);\n")

        assert names(findings) == ["a"]

    def test_property_keys_are_not_reads(self):
        """`{ a: 1 }` does not read `a`; the shorthand `{ a }` does."""
        from onetime.core.engine import check_source

        assert names(check_source("const a = 1;\nsend({ a: 2 }, a);\n")) == ["a"]
        assert check_source("const a = 1;\nsend({ a }, a);\n") == []

    def test_findings_in_declaration_order(self):
        """Findings are returned in registration order."""
        from onetime.core.engine import check_source

        findings = check_source("const b = 2;\nconst a = 1;\nuse(a);\nuse(b);\n")

        assert names(findings) == ["b", "a"]

    def test_fingerprint_ignores_line_moves(self):
        """Moving a declaration down keeps its fingerprint."""
        from onetime.core.engine import OneTimeVarsRule

        rule = OneTimeVarsRule()
        first = rule.check("const a = 1;\nuse(a);\n", path="app.js")
        moved = rule.check("\n\nconst a = 1;\nuse(a);\n", path="app.js")

        assert first[0].fingerprint == moved[0].fingerprint
        assert first[0].line != moved[0].line

    def test_finding_to_dict(self):
        """Findings serialize with the rule id and fix edits."""
        from onetime.core.engine import RULE_ID, OneTimeVarsRule

        finding = OneTimeVarsRule().check("const a = 1;\nuse(a);\n", path="app.js")[0]
        data = finding.to_dict()

        assert data["rule"] == RULE_ID
        assert data["path"] == "app.js"
        assert data["fixable"] is True
        assert len(data["fix"]["edits"]) == 2


# =============================================================================
# Scopes
# =============================================================================

class TestScopes:
    """Bindings are keyed by (name, scope)."""

    def test_branch_isolation(self):
        """Same-named bindings in if/else arms are counted separately."""
        from onetime.core.engine import check_source

        findings = check_source("if (c) { let x = 1; f(x); } else { let x = 2; g(x); }\n")

        assert names(findings) == ["x", "x"]
        assert findings[0].column == 14
        assert findings[0].column != findings[1].column

    def test_switch_cases_are_isolated(self):
        """Each case clause is its own scope."""
        from onetime.core.engine import check_source

        source = (
            "switch (k) {\n"
            "  case 1: { const v = a(); use(v); break; }\n"
            "  case 2: { const v = b(); use(v); break; }\n"
            "}\n"
        )

        assert names(check_source(source)) == ["v", "v"]

    def test_shadowing_function_scope(self):
        """An inner declaration shadows the outer one; both are single-use."""
        from onetime.core.engine import check_source

        source = (
            "const x = 1;\n"
            "function f() {\n"
            "  const x = 2;\n"
            "  return x;\n"
            "}\n"
            "use(x, f);\n"
        )

        findings = check_source(source)

        assert names(findings) == ["x", "x"]
        assert [f.line for f in findings] == [1, 3]

    def test_parameter_shadows_outer_variable(self):
        """A parameter with the same name captures reads in its function."""
        from onetime.core.engine import check_source

        source = "const x = 1;\nfunction f(x) { return x; }\nuse(f);\n"

        assert check_source(source) == []

    def test_var_read_before_declaration(self):
        """A hoisted var read above its declaration is left alone."""
        from onetime.core.engine import check_source

        assert check_source("use(a);\nvar a = 1;\n") == []

    def test_var_read_outside_declaring_block(self):
        """A var assigned inside an if arm and read after it is left alone."""
        from onetime.core.engine import check_source

        assert check_source("if (ok) { var a = 1; }\nuse(a);\n") == []

    def test_redeclared_var(self):
        """Two `var` declarations of one name share a binding and are skipped."""
        from onetime.core.engine import check_source

        assert check_source("var a = 1;\nvar a = 2;\nuse(a);\n") == []

    def test_reassigned_variable(self):
        """Assignments count as uses and mark the binding reassigned."""
        from onetime.core.engine import check_source

        assert check_source("let a = 1;\na = 2;\n") == []
        assert check_source("let n = 0;\nn++;\n") == []


# =============================================================================
# Exclusions
# =============================================================================

class TestExclusions:
    """Exclusion policy and rule options."""

    def test_for_of_loop_variable(self):
        """Loop variables are never reported."""
        from onetime.core.engine import check_source

        assert check_source("for (const x of xs) { h(x); }\n") == []

    def test_declaration_inside_for_loop(self):
        """Declarations inside for-loop bodies are exempt."""
        from onetime.core.engine import check_source

        assert check_source("for (let i = 0; i < n; i++) { const row = rows[i]; draw(row); }\n") == []

    def test_read_inside_while_loop(self):
        """A read inside a while loop around which the value was computed once is exempt."""
        from onetime.core.engine import check_source

        assert check_source("const a = 1;\nwhile (go()) { use(a); }\n") == []

    def test_declaration_and_read_in_same_while_body(self):
        """Declared and read in the same iteration: reported."""
        from onetime.core.engine import check_source

        assert names(check_source("while (go()) { const a = next(); use(a); }\n")) == ["a"]

    def test_callback_exemption(self):
        """Reads inside a callback are exempt unless allowInsideCallback is off."""
        from onetime.config import RuleOptions
        from onetime.core.engine import check_source

        source = "const t = now();\nlater(() => use(t));\n"

        assert check_source(source) == []
        assert check_source(source, options=RuleOptions(allow_inside_callback=False))[0].name == "t"

    def test_class_field_initializer_is_deferred(self):
        """A class field value runs per instance, like a callback."""
        from onetime.config import RuleOptions
        from onetime.core.engine import check_source

        source = "const t = now();\nclass A { y = t; }\n"

        assert check_source(source) == []
        assert names(check_source(source, options=RuleOptions(allow_inside_callback=False))) == ["t"]
        assert check_source(source, language="typescript") == []

    def test_declared_inside_function_expression(self):
        """Declaration and read inside the same callback: reported."""
        from onetime.core.engine import check_source

        source = (
            "module.exports = {\n"
            "  create: function() {\n"
            "    var testVar = Date.now();\n"
            "    console.log(Date.now() - testVar);\n"
            "  }\n"
            "};\n"
        )

        assert names(check_source(source)) == ["testVar"]

    def test_awaited_initializer(self):
        """`await` initializers fix an evaluation point and are exempt."""
        from onetime.core.engine import check_source

        source = "async function run() {\n  const data = await load();\n  use(data);\n}\n"

        assert check_source(source) == []

    def test_ignored_variables(self):
        """Names in ignoredVariables are never reported."""
        from onetime.config import RuleOptions
        from onetime.core.engine import check_source

        options = RuleOptions(ignored_variables={"testVar"})

        assert check_source("var testVar = 'once';\nconsole.log(testVar);\n", options=options) == []

    def test_function_values(self):
        """Function-valued variables are exempt by default."""
        from onetime.config import RuleOptions
        from onetime.core.engine import check_source

        source = "const handler = () => 1;\nlisten(handler);\n"

        assert check_source(source) == []
        options = RuleOptions(ignore_function_variables=False)
        assert names(check_source(source, options=options)) == ["handler"]

    def test_array_threshold(self):
        """ignoreArrayVariables as a number exempts longer array literals."""
        from onetime.config import RuleOptions
        from onetime.core.engine import check_source

        options = RuleOptions(ignore_array_variables=2)

        assert check_source("const xs = [1, 2, 3];\nuse(xs);\n", options=options) == []
        assert names(check_source("const xs = [1, 2];\nuse(xs);\n", options=options)) == ["xs"]

    def test_array_flag(self):
        """ignoreArrayVariables=true exempts every array literal."""
        from onetime.config import RuleOptions
        from onetime.core.engine import check_source

        options = RuleOptions(ignore_array_variables=True)

        assert check_source("const xs = [];\nuse(xs);\n", options=options) == []

    def test_object_literals(self):
        """Small object literals are reported; large or ignored ones are not."""
        from onetime.config import RuleOptions
        from onetime.core.engine import check_source

        assert names(check_source("const o = { a: 1 };\nuse(o);\n")) == ["o"]
        assert check_source("const o = { a: 1, b: 2, c: 3, d: 4 };\nuse(o);\n") == []
        options = RuleOptions(ignore_object_variables=True)
        assert check_source("const o = { a: 1 };\nuse(o);\n", options=options) == []

    def test_long_initializer(self):
        """Initializers longer than maxInitializerLength are exempt."""
        from onetime.config import RuleOptions
        from onetime.core.engine import check_source

        source = "const s = compute(alpha, beta);\nuse(s);\n"

        assert names(check_source(source)) == ["s"]
        assert check_source(source, options=RuleOptions(max_initializer_length=10)) == []

    def test_exported_variables(self):
        """Exported bindings are exempt by default and never fixed."""
        from onetime.config import RuleOptions
        from onetime.core.engine import check_source

        source = "export const a = 1;\nuse(a);\n"

        assert check_source(source) == []
        findings = check_source(source, options=RuleOptions(ignore_exported_variables=False))
        assert names(findings) == ["a"]
        assert findings[0].fix is None

    def test_export_specifier_is_a_read(self):
        """`export { a }` reads `a` and exports it."""
        from onetime.core.engine import check_source

        assert check_source("const a = 1;\nexport { a };\n") == []

    def test_object_destructuring_option(self):
        """ignoreObjectDestructuring exempts object-pattern bindings."""
        from onetime.config import RuleOptions
        from onetime.core.engine import check_source

        source = "const { a } = obj;\nf(a);\n"

        assert names(check_source(source)) == ["a"]
        assert check_source(source, options=RuleOptions(ignore_object_destructuring=True)) == []

    def test_multi_name_patterns(self):
        """Patterns declaring several names are never reported."""
        from onetime.core.engine import check_source

        assert check_source("const { a, b } = obj;\nf(a);\ng(b);\n") == []
        assert check_source("const [x, ...rest] = list;\nf(x, rest);\n") == []

    def test_parameters_imports_and_classes(self):
        """Only variables are reported."""
        from onetime.core.engine import check_source

        source = (
            "import helper from './helper';\n"
            "class Widget {}\n"
            "function f(p) { return p; }\n"
            "try { f(helper, Widget); } catch (e) { log(e); }\n"
        )

        assert check_source(source) == []


# =============================================================================
# Fixes
# =============================================================================

class TestFixes:
    """Fix output."""

    def test_inline_on_one_line(self):
        """Declaration and trailing space removed, read substituted."""
        from onetime.core.engine import fix_source

        assert fix_source("const a = 1; use(a);") == "use(1);"

    def test_declaration_line_removed(self):
        """A declaration alone on its line takes the line with it."""
        from onetime.core.engine import fix_source

        source = "const total = price * qty;\nconsole.log(total);\n"

        assert fix_source(source) == "console.log(price * qty);\n"

    def test_indented_declaration(self):
        """Indentation of the removed line goes too."""
        from onetime.core.engine import fix_source

        source = "function f() {\n  const x = 2;\n  return x;\n}\nuse(f);\n"

        assert fix_source(source) == "function f() {\n  return 2;\n}\nuse(f);\n"

    def test_branch_fixes(self):
        """Both arms are fixed independently in one pass."""
        from onetime.core.engine import OneTimeVarsRule

        result = OneTimeVarsRule().fix("if (c) { let x = 1; f(x); } else { let x = 2; g(x); }\n")

        assert result.source == "if (c) { f(1); } else { g(2); }\n"
        assert result.applied == 2
        assert result.passes == 1

    def test_object_destructuring(self):
        """`const { a } = obj; f(a);` becomes `f(obj.a)`."""
        from onetime.core.engine import fix_source

        assert fix_source("const { a } = obj;\nf(a);\n") == "f(obj.a);\n"

    def test_renamed_object_destructuring(self):
        """`{ key: a }` reads `obj.key`."""
        from onetime.core.engine import fix_source

        assert fix_source("const { key: a } = obj;\nf(a);\n") == "f(obj.key);\n"

    def test_string_key_destructuring(self):
        """String keys use bracket access."""
        from onetime.core.engine import fix_source

        assert fix_source("const { 'data-id': id } = attrs;\nf(id);\n") == "f(attrs['data-id']);\n"

    def test_array_destructuring(self):
        """`const [, b] = pair; f(b);` becomes `f(pair[1])`."""
        from onetime.core.engine import fix_source

        assert fix_source("const [, b] = pair;\nf(b);\n") == "f(pair[1]);\n"

    def test_destructuring_low_precedence_base(self):
        """The destructured expression is wrapped when it binds loosely."""
        from onetime.core.engine import fix_source

        assert fix_source("const { a } = x || y;\nf(a);\n") == "f((x || y).a);\n"

    def test_shorthand_property(self):
        """A shorthand property read keeps its key."""
        from onetime.core.engine import fix_source

        assert fix_source("const a = 1;\nsend({ a });\n") == "send({ a: 1 });\n"

    def test_declared_without_value(self):
        """`let a;` inlines as undefined."""
        from onetime.core.engine import fix_source

        assert fix_source("let a;\nuse(a);\n") == "use(undefined);\n"

    def test_multiple_declarators(self):
        """Overlapping fixes in one statement are deferred to a later pass."""
        from onetime.core.engine import OneTimeVarsRule

        result = OneTimeVarsRule().fix("const a = 1, b = 2;\nf(a, b);\n")

        assert result.source == "f(1, 2);\n"
        assert result.applied == 2
        assert result.passes == 2

    def test_middle_declarator(self):
        """Removing a later declarator takes the comma before it."""
        from onetime.core.engine import fix_source

        source = "const a = 1, b = 2;\nf(b);\ng(a, a);\n"

        assert fix_source(source) == "const a = 1;\nf(2);\ng(a, a);\n"

    def test_chained_variables(self):
        """A variable used in another one-time variable's initializer."""
        from onetime.core.engine import fix_source

        source = "const a = 1;\nconst b = a + 1;\nf(b);\n"

        assert fix_source(source) == "f(1 + 1);\n"

    def test_statement_body_becomes_empty_statement(self):
        """A declaration that is the whole body of a loop is replaced with `;`."""
        from onetime.core.engine import fix_source

        source = "do var a = next(); while (use(a));\n"

        assert fix_source(source) == "do ; while (use(next()));\n"

    def test_fixed_output_is_idempotent(self):
        """Checking fixed output finds nothing more."""
        from onetime.core.engine import check_source, fix_source

        source = (
            "const { a } = obj;\n"
            "const [, b] = pair;\n"
            "const v = x ? 1 : 2;\n"
            "f(a, b, obj2[v].y);\n"
        )

        fixed = fix_source(source)

        assert fixed == "f(obj.a, pair[1], obj2[(x ? 1 : 2)].y);\n"
        assert check_source(fixed) == []

    def test_typescript_annotations(self):
        """Type annotations are dropped with the declaration."""
        from onetime.core.engine import fix_source

        assert fix_source("const n: number = 1;\nuse(n);\n", language="typescript") == "use(1);\n"

    def test_typeof_in_type_counts_as_read(self):
        """`typeof x` in a type position reads the value."""
        from onetime.core.engine import check_source

        source = "const base = { a: 1 };\ntype T = typeof base;\nuse(base);\n"

        assert check_source(source, language="typescript") == []

    def test_jsx_component_has_no_fix(self):
        """A component used as a JSX tag is reported without a fix."""
        from onetime.core.engine import check_source

        findings = check_source("const Widget = load();\nrender(<Widget />);\n")

        assert names(findings) == ["Widget"]
        assert findings[0].fix is None

    def test_delete_operand_has_no_fix(self):
        """`delete v` cannot become `delete <expr>` safely."""
        from onetime.core.engine import check_source

        findings = check_source("const v = obj.key;\ndelete v;\n")

        assert names(findings) == ["v"]
        assert findings[0].fixable is False

    def test_semicolon_kept_for_leading_bracket(self):
        """Without semicolons, the `;` before a `[` line survives removal."""
        from onetime.core.engine import fix_source

        source = "let a = 1\nconst x = b\n;[x].map(f)"

        assert fix_source(source) == "let a = 1\n;[b].map(f)"

    def test_semicolon_inserted_before_leading_paren(self):
        """A removed statement between `foo()` and an IIFE leaves a `;`."""
        from onetime.config import RuleOptions
        from onetime.core.engine import fix_source

        source = "foo()\nconst x = 1\n;(async () => { f(x) })()"
        options = RuleOptions(allow_inside_callback=False)

        assert fix_source(source, options=options) == "foo()\n;(async () => { f(1) })()"

    def test_semicolon_inserted_for_whole_line(self):
        """A whole removed line becomes `;` when the next line starts with `(`."""
        from onetime.core.engine import fix_source

        source = "foo()\nconst x = g;\n(x)()\n"

        assert fix_source(source) == "foo()\n;(g)()\n"

    def test_terminated_neighbours_need_no_semicolon(self):
        """Semicolon style code is not given stray `;`."""
        from onetime.core.engine import fix_source

        source = "foo();\nconst x = 1;\n[x].map(f);\n"

        assert fix_source(source) == "foo();\n[1].map(f);\n"


# =============================================================================
# Parenthesization
# =============================================================================

class TestParenthesization:
    """Substitutions keep the original evaluation order."""

    @pytest.mark.parametrize("source, expected", [
        ("const v = x ? 1 : 2;\nobj[v].y;\n", "obj[(x ? 1 : 2)].y;\n"),
        ("const s = a + b;\nuse(s * 2);\n", "use((a + b) * 2);\n"),
        ("const s = a - b;\nuse(10 - s);\n", "use(10 - (a - b));\n"),
        ("const s = a * b;\nuse(s + 1);\n", "use(a * b + 1);\n"),
        ("const n = -x;\nuse(-n);\n", "use(-(-x));\n"),
        ("const p = a || b;\nuse(p ?? c);\n", "use((a || b) ?? c);\n"),
        ("const o = { a: 1 };\no.a;\n", "({ a: 1 }).a;\n"),
        ("const make = factory();\nnew make();\n", "new (factory())();\n"),
        ("const w = load(x);\nw.run();\n", "load(x).run();\n"),
        ("const t = ok ? a : b;\nuse(t ? 1 : 2);\n", "use((ok ? a : b) ? 1 : 2);\n"),
        ("const t = a ? b : c;\nuse(x ? t : y);\n", "use(x ? a ? b : c : y);\n"),
    ])
    def test_substitution(self, source, expected):
        """Initializers are wrapped only when the read position requires it."""
        from onetime.core.engine import fix_source

        assert fix_source(source) == expected
