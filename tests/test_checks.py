"""
Tests for the installer consistency checks.
"""

from pathlib import Path

import pytest

from conftest import RecordingReporter, installer_script, problem_lines
from isscheck.core.config import BITSIZE_DEFINE, PHP_VERSION_DEFINE, SEVENZIP_SOURCE
from isscheck.core.registry import ComponentRecord
from isscheck.errors import ConfigurationError
from isscheck.validation import (
    CheckContext,
    CheckName,
    Severity,
    check_bitsize_define,
    check_component_entries,
    check_installer_content,
    check_php_version,
    check_registry_pairing,
    check_sevenzip_bitsize,
    check_vcredist_bitsize,
    component_entry_findings,
    run_all_checks,
)


FULL = Path("full-php56-w64.iss")
WEB = Path("webinstaller-php56-w64.iss")


class TestInstallerConventions:
    """The literal lines are a byte-for-byte contract with the scripts."""

    def test_define_padding(self):
        assert PHP_VERSION_DEFINE.format(version="php56") == '#define PHP_VERSION          "php56"'
        assert BITSIZE_DEFINE.format(word="w32") == '#define BITSIZE              "w32"'

    def test_sevenzip_source(self):
        assert SEVENZIP_SOURCE.format(arch="x86") == "Source: ..\\bin\\7zip\\x86"


class TestCheckContext:
    """Discovery of the two input folders."""

    def test_discover_sorts_inputs(self, tree):
        tree.installer("lite-php56-w64.iss", "")
        tree.installer("full-php56-w64.iss", "")
        tree.registry("z.json", [])
        tree.registry("a.json", [])
        (tree.installers / "README.md").write_text("not an installer")

        ctx = CheckContext.discover(tree.installers, tree.registries)

        assert [p.name for p in ctx.installer_paths] == ["full-php56-w64.iss", "lite-php56-w64.iss"]
        assert ctx.registry_names == ["a.json", "z.json"]

    def test_missing_installers_folder_is_fatal(self, tree, tmp_path):
        with pytest.raises(ConfigurationError) as exc_info:
            CheckContext.discover(tmp_path / "missing", tree.registries)
        assert exc_info.value.setting == "installers_folder"

    def test_registries_folder_must_be_directory(self, tree):
        not_a_dir = tree.installer("full-php56-w64.iss", "")
        with pytest.raises(ConfigurationError) as exc_info:
            CheckContext.discover(tree.installers, not_a_dir)
        assert exc_info.value.setting == "registries_folder"


class TestRegistryPairing:
    """Every non-web installer needs its registry."""

    def test_all_paired(self, tree):
        tree.installer("full-php56-w64.iss", "")
        tree.registry("full-next-php5.6-w64.json", [])
        ctx = CheckContext.discover(tree.installers, tree.registries)

        findings = check_registry_pairing(ctx)

        assert [f.severity for f in findings] == [Severity.OK]

    def test_one_finding_per_missing_registry(self, tree):
        tree.installer("full-php56-w64.iss", "")
        tree.installer("full-php71-w32.iss", "")
        tree.registry("full-next-php5.6-w64.json", [])
        ctx = CheckContext.discover(tree.installers, tree.registries)

        check_registry_pairing(ctx)

        problems = ctx.problems(CheckName.PAIRING)
        assert len(problems) == 1
        assert problems[0].severity is Severity.MISSING
        assert problems[0].installer.name == "full-php71-w32.iss"
        assert "full-next-php7.1-w32.json" in problems[0].message

    def test_web_installers_exempt(self, tree, recording_reporter):
        tree.installer("webinstaller-php56-w64.iss", "")
        ctx = CheckContext.discover(tree.installers, tree.registries, reporter=recording_reporter)

        check_registry_pairing(ctx)

        assert ctx.problems() == []
        assert "Skipping web installer" in recording_reporter.text()

    def test_orphan_registry_only_reported_verbose(self, tree, recording_reporter):
        tree.registry("lite-next-php7.0-w64.json", [])
        ctx = CheckContext.discover(tree.installers, tree.registries, reporter=recording_reporter)

        check_registry_pairing(ctx)

        assert ctx.problems() == []
        assert "lite-php70-w64.iss" in recording_reporter.text(include_verbose=True)
        assert "lite-php70-w64.iss" not in recording_reporter.text(include_verbose=False)


class TestComponentEntryFindings:
    """The three entries a registry component needs."""

    def test_missing_filename_entry_yields_one_finding(self):
        content = "Name: foo;\n"
        record = ComponentRecord("foo-x64", "https://example.org/foo", "foo-1.0.zip", "1.0")

        findings = component_entry_findings(FULL, content, record)

        referencing = [f for f in findings if "Filename_foo" in f.message]
        assert len(referencing) == 1
        assert referencing[0].suggestion == 'Filename_foo = "foo-1.0.zip";'

    def test_all_entries_present(self):
        content = "Name: serverstack;\nFilename_mariadb = 'x';\nDoUnzip(targetPath + Filename_mariadb);\n"
        record = ComponentRecord("mariadb-x64", "u", "mariadb.zip", "10.1")
        assert component_entry_findings(FULL, content, record) == []

    def test_missing_name_entry_uses_section_label(self):
        content = "Filename_phpext_xdebug\ntargetPath + Filename_phpext_xdebug\n"
        record = ComponentRecord("phpext-xdebug-x64", "u", "xdebug.zip", "2.4")

        findings = component_entry_findings(FULL, content, record)

        assert len(findings) == 1
        assert findings[0].suggestion == "Name: xdebug;"

    def test_missing_install_section(self):
        content = "Name: node;\nFilename_node = 'node.zip';\n"
        record = ComponentRecord("node-x64", "u", "node.zip", "6.3")

        findings = component_entry_findings(FULL, content, record)

        assert len(findings) == 1
        assert "install section" in findings[0].message
        assert findings[0].suggestion == "targetPath + Filename_node"

    def test_qa_build_checked_under_base_name(self):
        content = "Name: serverstack;\nFilename_php\ntargetPath + Filename_php\n"
        record = ComponentRecord("php-qa-x64", "u", "php-qa.zip", "7.1.0RC1")
        assert component_entry_findings(FULL, content, record) == []


class TestComponentEntries:
    """check_component_entries over a folder tree."""

    def test_consistent_installer(self, tree):
        tree.installer("full-php56-w64.iss", installer_script(components=[
            ("mariadb", "serverstack"), ("phpext_xdebug", "xdebug"),
        ]))
        tree.registry("full-next-php5.6-w64.json", ["mariadb-x64", "phpext-xdebug-x64"])
        ctx = CheckContext.discover(tree.installers, tree.registries)

        check_component_entries(ctx)

        assert ctx.problems() == []
        assert [f.severity for f in ctx.findings] == [Severity.OK]

    def test_missing_component(self, tree):
        tree.installer("full-php56-w64.iss", installer_script(components=[("mariadb", "serverstack")]))
        tree.registry("full-next-php5.6-w64.json", ["mariadb-x64", "foo-x64"])
        ctx = CheckContext.discover(tree.installers, tree.registries)

        check_component_entries(ctx)

        problems = ctx.problems(CheckName.ENTRIES)
        assert len(problems) == 3
        assert len([f for f in problems if "Filename_foo" in f.message]) == 1

    def test_empty_registry_yields_no_entry_findings(self, tree):
        tree.installer("full-php56-w64.iss", "nothing here")
        tree.registry("full-next-php5.6-w64.json", [])
        ctx = CheckContext.discover(tree.installers, tree.registries)

        run_all_checks(ctx)

        assert ctx.problems(CheckName.ENTRIES) == []
        # content checks still ran
        assert len(ctx.problems(CheckName.CONTENT)) == 4

    def test_missing_registry_is_a_finding(self, tree):
        tree.installer("full-php56-w64.iss", installer_script())
        ctx = CheckContext.discover(tree.installers, tree.registries)

        check_component_entries(ctx)

        problems = ctx.problems(CheckName.ENTRIES)
        assert len(problems) == 1
        assert problems[0].severity is Severity.MISSING
        assert "not found" in problems[0].message

    def test_broken_registry_does_not_stop_other_installers(self, tree):
        tree.installer("full-php56-w64.iss", installer_script())
        tree.installer("full-php71-w64.iss", installer_script(php="php71"))
        (tree.registries / "full-next-php5.6-w64.json").write_text("{ not json", encoding="utf-8")
        tree.registry("full-next-php7.1-w64.json", ["mariadb-x64", "foo"])
        ctx = CheckContext.discover(tree.installers, tree.registries)

        check_component_entries(ctx)

        by_installer = {}
        for f in ctx.problems():
            by_installer.setdefault(f.installer.name, []).append(f)
        assert [f.severity for f in by_installer["full-php56-w64.iss"]] == [Severity.INVALID]
        assert len(by_installer["full-php71-w64.iss"]) == 3

    def test_web_installers_skipped(self, tree):
        tree.installer("webinstaller-php56-w64.iss", "")
        ctx = CheckContext.discover(tree.installers, tree.registries)

        check_component_entries(ctx)

        assert ctx.problems() == []


class TestPhpVersionDefine:
    """#define PHP_VERSION against the filename."""

    def test_present(self):
        assert check_php_version(FULL, '#define PHP_VERSION          "php56"\n') is None

    def test_missing(self):
        finding = check_php_version(FULL, "")
        assert finding.severity is Severity.MISSING
        assert finding.suggestion == '#define PHP_VERSION          "php56"'

    def test_wrong_value(self):
        finding = check_php_version(FULL, '#define PHP_VERSION          "php71"\n')
        assert finding.severity is Severity.INVALID

    def test_wrong_padding(self):
        assert check_php_version(FULL, '#define PHP_VERSION "php56"\n') is not None

    def test_skipped_without_version_in_filename(self):
        assert check_php_version(Path("full-w64.iss"), "") is None

    def test_skipped_when_version_is_not_the_second_segment(self):
        assert check_php_version(Path("full-debug-php56-w64.iss"), "") is None


class TestBitsizeDefine:
    """#define BITSIZE against the filename."""

    def test_w32(self):
        assert check_bitsize_define(Path("full-php56-w32.iss"), '#define BITSIZE              "w32"') is None

    def test_mismatch(self):
        finding = check_bitsize_define(Path("full-php56-w32.iss"), '#define BITSIZE              "w64"')
        assert finding.severity is Severity.INVALID
        assert finding.suggestion == '#define BITSIZE              "w32"'

    def test_missing(self):
        assert check_bitsize_define(FULL, "").severity is Severity.MISSING


class TestSevenZipBitsize:
    """7zip must come from the folder matching the architecture."""

    def test_matching(self):
        assert check_sevenzip_bitsize(FULL, "Source: ..\\bin\\7zip\\x64\\7za.exe") is None

    def test_wrong_architecture(self):
        finding = check_sevenzip_bitsize(Path("full-php56-w32.iss"), "Source: ..\\bin\\7zip\\x64\\7za.exe")
        assert finding.severity is Severity.INVALID
        assert finding.suggestion == "Source: ..\\bin\\7zip\\x86"

    def test_missing(self):
        assert check_sevenzip_bitsize(FULL, "").severity is Severity.MISSING


class TestVcredistBitsize:
    """Occurrence count of vcredist_<arch>_<digits>."""

    TWO = "vcredist_x64_2013\nVCREDIST_X64_2015\n"

    def test_web_installer_needs_two(self):
        assert check_vcredist_bitsize(WEB, self.TWO) is None

    def test_full_installer_with_two_fails(self):
        finding = check_vcredist_bitsize(FULL, self.TWO)
        assert finding.severity is Severity.INVALID
        assert "expected 3" in finding.message

    def test_full_installer_needs_three(self):
        assert check_vcredist_bitsize(FULL, self.TWO + "vcredist_x64_2012\n") is None

    def test_web_installer_with_three_fails(self):
        assert check_vcredist_bitsize(WEB, self.TWO + "vcredist_x64_2012\n") is not None

    def test_wrong_architecture_not_counted(self):
        content = "vcredist_x86_2012\nvcredist_x86_2013\nvcredist_x86_2015\n"
        finding = check_vcredist_bitsize(FULL, content)
        assert "found 0" in finding.message


class TestInstallerContent:
    """check_installer_content runs on web and non-web installers alike."""

    def test_consistent_installers(self, tree):
        tree.installer("full-php56-w64.iss", installer_script())
        tree.installer("full-php71-w32.iss", installer_script(php="php71", word="w32", arch="x86"))
        tree.installer("webinstaller-php56-w64.iss", installer_script(vcredist=2))
        ctx = CheckContext.discover(tree.installers, tree.registries)

        check_installer_content(ctx)

        assert ctx.problems() == []

    def test_web_installer_is_checked(self, tree):
        tree.installer("webinstaller-php56-w32.iss", installer_script(vcredist=2))
        ctx = CheckContext.discover(tree.installers, tree.registries)

        check_installer_content(ctx)

        # w64 define, x64 7zip, x64 vcredist in a w32 installer
        assert len(ctx.problems(CheckName.CONTENT)) == 3


@pytest.mark.integration
class TestRunAllChecks:
    """Full runs over a folder tree."""

    def _populate(self, tree):
        tree.installer("full-php56-w64.iss", installer_script(components=[
            ("mariadb", "serverstack"), ("nginx", "serverstack"),
        ]))
        tree.registry("full-next-php5.6-w64.json", ["mariadb-x64", "nginx", "gogs-x64"])
        tree.installer("full-php71-w32.iss", installer_script(php="php71", word="w64", arch="x86"))
        tree.installer("webinstaller-php56-w64.iss", installer_script(vcredist=3))

    def test_categories_in_order_without_short_circuit(self, tree):
        self._populate(tree)
        ctx = CheckContext.discover(tree.installers, tree.registries)

        findings = run_all_checks(ctx)

        checks_seen = []
        for f in findings:
            if f.check not in checks_seen:
                checks_seen.append(f.check)
        assert checks_seen == [CheckName.PAIRING, CheckName.ENTRIES, CheckName.CONTENT]
        assert len(ctx.problems(CheckName.PAIRING)) == 1   # full-php71-w32 has no registry
        assert len(ctx.problems(CheckName.ENTRIES)) == 4   # gogs x3 + missing registry
        assert len(ctx.problems(CheckName.CONTENT)) == 2   # w32 BITSIZE, web vcredist count

    def test_selected_checks_only(self, tree):
        self._populate(tree)
        ctx = CheckContext.discover(tree.installers, tree.registries)

        run_all_checks(ctx, [CheckName.CONTENT])

        assert {f.check for f in ctx.findings} == {CheckName.CONTENT}

    def test_idempotent_output(self, tree):
        self._populate(tree)

        outputs = []
        for _ in range(2):
            reporter = RecordingReporter()
            ctx = CheckContext.discover(tree.installers, tree.registries, reporter=reporter)
            run_all_checks(ctx)
            outputs.append((reporter.text(), problem_lines(ctx.findings)))

        assert outputs[0] == outputs[1]

    def test_findings_streamed_to_reporter(self, tree):
        self._populate(tree)
        reporter = RecordingReporter()
        ctx = CheckContext.discover(tree.installers, tree.registries, reporter=reporter)

        run_all_checks(ctx)

        text = reporter.text(include_verbose=False)
        for line in problem_lines(ctx.findings):
            assert line in text
        assert text.startswith("== Checking Installer Health")
