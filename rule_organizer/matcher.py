"""
Rule matcher module - Decide the destination directory for a file.

Rules are ranked by specificity so that a rule with a file-name pattern wins
over a rule that only lists extensions, whatever the authored order.
"""
import fnmatch
import logging
from pathlib import Path
from typing import List, Optional, Sequence

from rule_organizer.models import UNCATEGORIZED_DIR, FileInfo, Rule

logger = logging.getLogger(__name__)

PATTERN_BASE_SCORE = 1000
EXTENSION_SCORE = 100


def specificity_score(rule: Rule) -> int:
    """
    Compute the ranking score of a rule.

    A pattern scores 1000 plus the number of literal characters in it
    (wildcards '*' and '?' removed); a non-empty extension set adds 100.
    """
    score = 0
    if rule.pattern:
        literal = rule.pattern.replace("*", "").replace("?", "")
        score += PATTERN_BASE_SCORE + len(literal)
    if rule.extensions:
        score += EXTENSION_SCORE
    return score


def sort_rules(rules: Sequence[Rule]) -> List[Rule]:
    """Return a new list ordered by descending score; ties keep authored order."""
    return sorted(rules, key=specificity_score, reverse=True)


def rule_matches(rule: Rule, file_name: str, extension: str) -> bool:
    """
    Check a single rule against a file.

    The pattern and the extension set are independent gates: a rule whose
    pattern does not match can still match through its extensions. A rule
    without a target directory never matches.
    """
    if not rule.target_dir:
        return False
    if rule.pattern and fnmatch.fnmatch(file_name, rule.pattern):
        return True
    return extension.lower() in rule.extensions


def resolve_target_dir(target_dir: str, parent: Path) -> Path:
    """Resolve a rule target against the file's current parent directory."""
    target = Path(target_dir)
    if target.is_absolute():
        return target
    return parent / target


def classify(file_name: str, extension: str, rules: Sequence[Rule]) -> Optional[str]:
    """
    Pick the target directory of the most specific matching rule.

    Args:
        file_name: Name of the file
        extension: File extension including the leading dot
        rules: Rules in authored order (not modified)

    Returns:
        The matching rule's target directory, or None when nothing matches
    """
    rule = RuleMatcher(rules).match(file_name, extension)
    return rule.target_dir if rule else None


class RuleMatcher:
    """Matches files against a rule set sorted once by specificity."""

    def __init__(self, rules: Sequence[Rule]):
        """
        Initialize matcher.

        Args:
            rules: Rules in authored order; a sorted copy is kept
        """
        self.rules = sort_rules(rules)

    def match(self, file_name: str, extension: str) -> Optional[Rule]:
        """Return the first rule in specificity order that matches, if any."""
        for rule in self.rules:
            if rule_matches(rule, file_name, extension):
                logger.debug(f"Matched rule {rule.name or rule.id!r} for {file_name}")
                return rule
        return None

    def destination_dir(self, file_info: FileInfo) -> Path:
        """
        Compute the directory a file should be moved into.

        Unmatched files go to '!Uncategorized' under their current parent.
        """
        parent = file_info.parent
        rule = self.match(file_info.name, file_info.extension)
        if rule is None:
            return parent / UNCATEGORIZED_DIR
        return resolve_target_dir(rule.target_dir, parent)
