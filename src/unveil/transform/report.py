"""Record of the rules that fired during one transformation."""

from dataclasses import dataclass, field


@dataclass
class TransformReport:
    """Rules that changed the document, in the order they fired.

    A fresh report is created for every transformation.
    """

    fired: list[str] = field(default_factory=list)
    elements_removed: int = 0
    urls_rewritten: int = 0
    styles_cleaned: int = 0

    def record(self, rule: str, value: str | None = None) -> None:
        """Record a fired rule once.

        Args:
            rule: Rule category, e.g. ``class_element_remove``.
            value: The rule item that matched, if any.
        """
        entry = f"{rule}: {value}" if value is not None else rule
        if entry not in self.fired:
            self.fired.append(entry)

    @property
    def is_empty(self) -> bool:
        """Whether no rule fired."""
        return not self.fired

    def to_dict(self) -> dict[str, int | list[str]]:
        """Convert the report to a dictionary for logging."""
        return {
            "fired": list(self.fired),
            "elements_removed": self.elements_removed,
            "urls_rewritten": self.urls_rewritten,
            "styles_cleaned": self.styles_cleaned,
        }
