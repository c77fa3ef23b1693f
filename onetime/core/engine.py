"""
Engine — The no-one-time-vars rule for one source unit at a time

Ties the pieces together:

    parse -> Analyzer -> EligibilityFilter -> FixSynthesizer -> Finding

Every check() call builds fresh analysis state, so one OneTimeVarsRule
can be reused across files. It is not meant to be shared between threads;
give each worker its own instance.

Usage:
    rule = OneTimeVarsRule(RuleOptions(allow_inside_callback=False))
    findings = rule.check("const t = now(); later(() => use(t));")

    result = rule.fix(source, path="src/app.ts")
    print(result.source)
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import xxhash

from ..config import RuleOptions
from ..errors import UnsupportedLanguageError, UnsupportedRewrite
from .analyzer import Analysis, Analyzer
from .bindings import Binding
from .eligibility import EligibilityFilter
from .fixer import Fix, FixSynthesizer, apply_fixes
from .nodes import node_text
from .parsing import LanguageConfig, ParserRegistry, SourceParser, default_registry

logger = logging.getLogger(__name__)

RULE_ID = "no-one-time-vars"
MESSAGE = "Variable '{name}' is only used once."
MAX_FIX_PASSES = 10

Source = Union[str, bytes]


@dataclass
class Finding:
    """
    One reported binding.

    Lines and columns are 1-based and point at the declared name.
    """
    name: str
    line: int
    column: int
    end_line: int
    end_column: int
    message: str
    fix: Optional[Fix] = None
    path: Optional[str] = None
    fingerprint: str = ""

    @property
    def fixable(self) -> bool:
        return self.fix is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rule": RULE_ID,
            "name": self.name,
            "path": self.path,
            "line": self.line,
            "column": self.column,
            "end_line": self.end_line,
            "end_column": self.end_column,
            "message": self.message,
            "fixable": self.fixable,
            "fix": self.fix.to_dict() if self.fix else None,
            "fingerprint": self.fingerprint,
        }


@dataclass
class FixResult:
    """Outcome of OneTimeVarsRule.fix()."""
    source: str
    applied: int = 0
    passes: int = 0
    findings: List[Finding] = field(default_factory=list)  # left after the last pass
    reverted: bool = False  # a pass produced unparsable output and was undone

    @property
    def changed(self) -> bool:
        return self.applied > 0


def fingerprint(path: Optional[str], name: str, declaration: str) -> str:
    """Stable id for a finding, independent of its line number."""
    return xxhash.xxh32(f"{path or ''}:{name}:{declaration}".encode()).hexdigest()


class OneTimeVarsRule:
    """
    Detects (and optionally inlines) bindings read exactly once.

    Args:
        options: Rule options (defaults when None)
        registry: Language routing (JavaScript, TypeScript, TSX by default)
        parser: Parser cache to use (a fresh one when None)
    """

    def __init__(self, options: Optional[RuleOptions] = None,
                 registry: Optional[ParserRegistry] = None,
                 parser: Optional[SourceParser] = None):
        self.options = options or RuleOptions()
        self.registry = registry or default_registry()
        self.parser = parser or SourceParser()

    def language_for(self, path: Optional[Union[str, Path]] = None,
                     language: Optional[Union[str, LanguageConfig]] = None) -> LanguageConfig:
        """
        Resolve the language of a unit: explicit language first, then the
        path's extension, then JavaScript.

        Raises:
            UnsupportedLanguageError: If neither names a registered language
        """
        if isinstance(language, LanguageConfig):
            return language
        if language:
            config = self.registry.get_config_by_name(language)
            if config is None:
                raise UnsupportedLanguageError(language)
            return config
        if path is not None:
            return self.registry.require(Path(path))
        return self.registry.get_config_by_name("javascript")

    def analyze(self, source: bytes, config: LanguageConfig, path: Optional[str] = None) -> Tuple[Analysis, bool]:
        """
        Parse and analyze one unit.

        Returns:
            (analysis, has_error): has_error is True when the tree holds
            ERROR or missing nodes
        """
        tree = self.parser.parse(source, config, path or "<source>")
        root = tree.root_node
        analysis = Analyzer(source, self.options, config.type_contexts).run(root)
        return analysis, root.has_error

    def check(self, source: Source, path: Optional[Union[str, Path]] = None,
              language: Optional[Union[str, LanguageConfig]] = None) -> List[Finding]:
        """
        Report every single-use binding of one unit.

        Args:
            source: Source text (str) or its UTF-8 bytes
            path: File path, for language routing and reporting
            language: Explicit language name, overriding the path

        Returns:
            Findings in declaration order
        """
        data = source.encode('utf-8') if isinstance(source, str) else source
        config = self.language_for(path, language)
        findings, _ = self._run(data, config, str(path) if path is not None else None)
        return findings

    def fix(self, source: Source, path: Optional[Union[str, Path]] = None,
            language: Optional[Union[str, LanguageConfig]] = None,
            max_passes: int = MAX_FIX_PASSES) -> FixResult:
        """
        Inline single-use bindings until nothing more applies.

        Each pass applies every non-overlapping fix; deferred fixes are
        picked up by the next pass. A pass whose output no longer parses
        cleanly is undone and fixing stops.
        """
        data = source.encode('utf-8') if isinstance(source, str) else source
        config = self.language_for(path, language)
        name = str(path) if path is not None else None

        findings, had_error = self._run(data, config, name)
        result = FixResult(source=data.decode('utf-8', errors='replace'), findings=findings)

        while result.passes < max_passes:
            fixes = [f.fix for f in findings if f.fix is not None]
            if not fixes:
                break
            candidate, applied, deferred = apply_fixes(data, fixes)
            new_findings, has_error = self._run(candidate, config, name)
            if has_error and not had_error:
                logger.warning("Fix pass %d for %s produced unparsable output; reverted",
                               result.passes + 1, name or "<source>")
                result.reverted = True
                break
            logger.debug("Pass %d: applied %d fixes, deferred %d",
                         result.passes + 1, len(applied), len(deferred))
            data, findings = candidate, new_findings
            result.applied += len(applied)
            result.passes += 1

        result.source = data.decode('utf-8', errors='replace')
        result.findings = findings
        return result

    def _run(self, data: bytes, config: LanguageConfig, path: Optional[str]) -> Tuple[List[Finding], bool]:
        analysis, has_error = self.analyze(data, config, path)
        eligibility = EligibilityFilter(self.options, analysis.scopes)
        synthesizer = FixSynthesizer(data)

        findings = []
        for binding in eligibility.reportable(analysis.registry):
            try:
                fix = synthesizer.synthesize(binding)
            except UnsupportedRewrite as e:
                logger.debug("%s", e)
                fix = None
            findings.append(self._finding(binding, data, fix, path))
        return findings, has_error

    def _finding(self, binding: Binding, data: bytes, fix: Optional[Fix], path: Optional[str]) -> Finding:
        anchor = binding.target_node
        (row, col), (end_row, end_col) = anchor.start_point, anchor.end_point
        return Finding(
            name=binding.name,
            line=row + 1,
            column=col + 1,
            end_line=end_row + 1,
            end_column=end_col + 1,
            message=MESSAGE.format(name=binding.name),
            fix=fix,
            path=path,
            fingerprint=fingerprint(path, binding.name, node_text(binding.declaration_node, data)),
        )


# =============================================================================
# Convenience Functions
# =============================================================================

def check_source(source: Source, language: str = "javascript",
                 options: Optional[RuleOptions] = None) -> List[Finding]:
    """Check a snippet with a throwaway rule instance."""
    return OneTimeVarsRule(options).check(source, language=language)


def fix_source(source: Source, language: str = "javascript",
               options: Optional[RuleOptions] = None,
               max_passes: int = MAX_FIX_PASSES) -> str:
    """Fix a snippet and return the rewritten text."""
    return OneTimeVarsRule(options).fix(source, language=language, max_passes=max_passes).source
