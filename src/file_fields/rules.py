"""Registry of per-field extension rules and the alternate naming source."""

import logging
from typing import Dict, Iterable, Optional

from file_fields.schemas import UploadRule, normalize_extension

logger = logging.getLogger(__name__)


class UploadRules:
    """Extension rules for the file fields of one entity.

    Allow-lists and deny-lists are kept per field. The alternate name
    source is registry-wide: once set it names the stored file for every
    field processed afterwards.
    """

    def __init__(self):
        self._rules: Dict[str, UploadRule] = {}
        self.alt_name_field: Optional[str] = None

    def rule_for(self, field: str) -> UploadRule:
        return self._rules.get(field, UploadRule())

    def add_extension(self, field: str, ext: str) -> "UploadRules":
        rule = self.rule_for(field)
        allowed = list(rule.allowed_extensions or ()) + [ext]
        self._rules[field] = UploadRule(
            allowed_extensions=allowed,
            denied_extensions=rule.denied_extensions,
        )
        return self

    def set_extensions(self, field: str, extensions: Iterable[str]) -> "UploadRules":
        rule = self.rule_for(field)
        self._rules[field] = UploadRule(
            allowed_extensions=list(extensions),
            denied_extensions=rule.denied_extensions,
        )
        return self

    def add_bad_extension(self, field: str, ext: str) -> "UploadRules":
        rule = self.rule_for(field)
        denied = list(rule.denied_extensions or ()) + [ext]
        self._rules[field] = UploadRule(
            allowed_extensions=rule.allowed_extensions,
            denied_extensions=denied,
        )
        return self

    def set_bad_extensions(self, field: str, extensions: Iterable[str]) -> "UploadRules":
        rule = self.rule_for(field)
        self._rules[field] = UploadRule(
            allowed_extensions=rule.allowed_extensions,
            denied_extensions=list(extensions),
        )
        return self

    def extension_is_ok(self, field: str, extension: str) -> Optional[str]:
        """Check an extension against the rules of a field.

        The allow-list is checked first, then the deny-list, so a denied
        extension is rejected even when it is also allowed.

        Args:
            field: Name of the file field
            extension: Extension to check, any case

        Returns:
            The lower-cased extension when accepted, otherwise None
        """
        extension = normalize_extension(extension)
        if not extension:
            return None

        rule = self.rule_for(field)
        if rule.allowed_extensions is not None and extension not in rule.allowed_extensions:
            logger.debug(f"Extension '{extension}' is not allowed for field '{field}'")
            return None
        if rule.denied_extensions is not None and extension in rule.denied_extensions:
            logger.debug(f"Extension '{extension}' is denied for field '{field}'")
            return None

        return extension
