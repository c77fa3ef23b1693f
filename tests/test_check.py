"""
Tests for CheckCommand — reporting over files and directories

Runs against throwaway projects built by LintTestFactory.
"""

import json

from tests.factories import requires_tree_sitter

pytestmark = requires_tree_sitter


class TestCheckCommand:
    """Check over real files."""

    def test_reports_findings(self, lint_factory, capsys):
        """Findings are printed per file and the status is 1."""
        from onetime.commands.check import CheckCommand

        path = lint_factory.write("src/app.js", "const a = 1;\nuse(a);\n")
        cli = lint_factory.create_cli()

        status = CheckCommand(cli).check([str(path)])
        out = capsys.readouterr().out

        assert status == 1
        assert str(path) in out
        assert "  1:7      Variable 'a' is only used once.  [fix]" in out
        assert "[!] 1 problem (1 fixable)" in out

    def test_clean_project(self, lint_factory, capsys):
        """A clean directory exits 0."""
        from onetime.commands.check import CheckCommand

        lint_factory.write("src/app.js", "const a = 1;\nuse(a, a);\n")
        cli = lint_factory.create_cli()

        status = CheckCommand(cli).check([str(lint_factory.project_dir)])

        assert status == 0
        assert "[OK] No single-use variables found." in capsys.readouterr().out

    def test_walk_respects_exclusions(self, lint_factory, capsys):
        """Excluded directories are not checked."""
        from onetime.commands.check import CheckCommand

        lint_factory.write("src/app.ts", "const a: number = 1;\nuse(a);\n")
        lint_factory.write("node_modules/pkg/index.js", "const b = 1;\nuse(b);\n")
        lint_factory.write("legacy/old.js", "const c = 1;\nuse(c);\n")
        cli = lint_factory.create_cli(format="json", exclude=["**/legacy/*"])

        CheckCommand(cli).check([str(lint_factory.project_dir)])
        data = json.loads(capsys.readouterr().out)

        assert data["files"] == 1
        assert [item["name"] for item in data["items"]] == ["a"]

    def test_json_finding_shape(self, lint_factory, capsys):
        """JSON items carry position, fix edits and a fingerprint."""
        from onetime.commands.check import CheckCommand

        path = lint_factory.write("a.js", "const a = 1;\nuse(a);\n")
        cli = lint_factory.create_cli(format="json")

        CheckCommand(cli).check([str(path)])
        item = json.loads(capsys.readouterr().out)["items"][0]

        assert item["rule"] == "no-one-time-vars"
        assert (item["line"], item["column"], item["end_line"], item["end_column"]) == (1, 7, 1, 8)
        assert item["fixable"] is True
        assert item["fix"]["edits"][1]["text"] == "1"
        assert len(item["fingerprint"]) == 8

    def test_rule_override(self, lint_factory, capsys):
        """--rule options change what is reported."""
        from onetime.commands.check import CheckCommand

        path = lint_factory.write("a.js", "const t = now();\nlater(() => use(t));\n")

        cli = lint_factory.create_cli(format="json")
        CheckCommand(cli).check([str(path)])
        assert json.loads(capsys.readouterr().out)["items"] == []

        cli = lint_factory.create_cli(format="json", rule=["allowInsideCallback=false"])
        CheckCommand(cli).check([str(path)])
        assert [i["name"] for i in json.loads(capsys.readouterr().out)["items"]] == ["t"]

    def test_project_config_applies(self, lint_factory, capsys):
        """rule options from .onetime/config.yaml are honoured."""
        from onetime.commands.check import CheckCommand

        lint_factory.write_config("rule:\n  ignoredVariables: [self]\n")
        path = lint_factory.write("a.js", "const self = this;\nuse(self);\n")
        cli = lint_factory.create_cli()

        assert CheckCommand(cli).check([str(path)]) == 0

    def test_errors_do_not_stop_the_run(self, lint_factory, capsys):
        """Unreadable files are reported; the rest are still checked."""
        from onetime.commands.check import CheckCommand

        good = lint_factory.write("good.js", "const a = 1;\nuse(a);\n")
        bad = lint_factory.project_dir / "bad.js"
        bad.write_bytes(b"const a = '\xff\xfe';\n")
        cli = lint_factory.create_cli(format="json")

        status = CheckCommand(cli).check([str(good), str(bad), str(lint_factory.project_dir / "nope.js")])
        data = json.loads(capsys.readouterr().out)

        assert status == 2
        assert [item["name"] for item in data["items"]] == ["a"]
        assert sorted(e["path"] for e in data["errors"]) == sorted([
            str(bad), str(lint_factory.project_dir / "nope.js"),
        ])

    def test_max_file_size(self, lint_factory, capsys):
        """files.max_file_size turns large files into errors."""
        from onetime.commands.check import CheckCommand

        lint_factory.write_config("files:\n  max_file_size: 10\n")
        path = lint_factory.write("a.js", "const a = 1;\nuse(a);\n")
        cli = lint_factory.create_cli()

        status = CheckCommand(cli).check([str(path)])

        assert status == 2
        assert "(limit 10)" in capsys.readouterr().out

    def test_summary_format(self, lint_factory, capsys):
        from onetime.commands.check import CheckCommand

        lint_factory.write("a.js", "const a = 1;\nuse(a);\n")
        lint_factory.write("b.js", "const b = 1;\nuse(b, b);\n")
        cli = lint_factory.create_cli(format="summary")

        CheckCommand(cli).check([str(lint_factory.project_dir)])
        out = capsys.readouterr().out

        assert "Files checked: 2" in out
        assert "Problems: 1 (1 fixable)" in out
