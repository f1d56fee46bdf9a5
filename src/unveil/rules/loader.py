"""Rule table loading with validation."""

import hashlib
from dataclasses import dataclass, field
from pathlib import Path
from typing import TypeVar

import structlog
import yaml
from pydantic import BaseModel, ValidationError

from unveil.rules.models import BlockedDomainTable, DomainRuleTable, GlobalRuleSet


logger = structlog.get_logger()

DEFAULT_RULES_DIR = Path(__file__).parent / "data"

GLOBAL_RULES_FILE = "global_rules.yaml"
DOMAIN_RULES_FILE = "domain_rules.yaml"
BLOCKED_DOMAINS_FILE = "blocked_domains.yaml"

ModelT = TypeVar("ModelT", bound=BaseModel)


class RuleTableError(Exception):
    """Raised when a rule table cannot be read or fails validation."""

    def __init__(self, errors: list[dict[str, str]], file_path: str) -> None:
        """Initialize the error.

        Args:
            errors: List of validation error details.
            file_path: Path to the file that failed.
        """
        self.errors = errors
        self.file_path = file_path
        super().__init__(f"Invalid rule table {file_path}: {len(errors)} errors")


@dataclass(frozen=True)
class RuleTables:
    """Validated rule tables, immutable once loaded."""

    global_rules: GlobalRuleSet
    domain_rules: DomainRuleTable
    blocked_domains: BlockedDomainTable
    file_checksums: dict[str, str] = field(default_factory=dict)

    @classmethod
    def load(cls, directory: Path | None = None) -> "RuleTables":
        """Load all rule tables.

        Files missing from ``directory`` are taken from the packaged defaults,
        so a deployment can override a single table.

        Args:
            directory: Directory holding the YAML tables; packaged defaults
                when None.

        Returns:
            Validated RuleTables.

        Raises:
            RuleTableError: If a table cannot be parsed or validated.
        """
        log = logger.bind(component="rules")
        checksums: dict[str, str] = {}

        global_rules = _load_table(
            _resolve(directory, GLOBAL_RULES_FILE), GlobalRuleSet, checksums
        )
        domain_rules = _load_table(
            _resolve(directory, DOMAIN_RULES_FILE), DomainRuleTable, checksums
        )
        blocked = _load_table(
            _resolve(directory, BLOCKED_DOMAINS_FILE), BlockedDomainTable, checksums
        )

        log.info(
            "rule_tables_loaded",
            directory=str(directory or DEFAULT_RULES_DIR),
            domain_count=len(domain_rules.domains),
            blocked_count=len(blocked.domains),
            file_checksums=checksums,
        )
        return cls(
            global_rules=global_rules,
            domain_rules=domain_rules,
            blocked_domains=blocked,
            file_checksums=checksums,
        )


def _resolve(directory: Path | None, filename: str) -> Path:
    if directory is not None:
        candidate = directory / filename
        if candidate.is_file():
            return candidate
        logger.info(
            "rule_table_default",
            component="rules",
            file=filename,
            directory=str(directory),
        )
    return DEFAULT_RULES_DIR / filename


def _load_table(
    path: Path, model: type[ModelT], checksums: dict[str, str]
) -> ModelT:
    """Read, checksum and validate one YAML table.

    Args:
        path: Table file.
        model: Pydantic model to validate against.
        checksums: Mapping updated with the file's SHA-256.

    Returns:
        Validated model instance.

    Raises:
        RuleTableError: On read, parse or validation failure.
    """
    try:
        content = path.read_bytes()
    except OSError as e:
        raise RuleTableError(
            [{"loc": "file", "msg": str(e), "type": "file_not_found"}], str(path)
        ) from e

    checksums[str(path.resolve())] = hashlib.sha256(content).hexdigest()

    try:
        parsed = yaml.safe_load(content.decode("utf-8")) or {}
    except yaml.YAMLError as e:
        logger.error("rule_table_yaml_error", component="rules", file=str(path))
        raise RuleTableError(
            [{"loc": "yaml", "msg": str(e), "type": "yaml_parse_error"}], str(path)
        ) from e

    try:
        return model.model_validate(parsed)
    except ValidationError as e:
        errors = [
            {
                "loc": ".".join(str(loc) for loc in err["loc"]),
                "msg": err["msg"],
                "type": err["type"],
            }
            for err in e.errors()
        ]
        logger.error(
            "rule_table_validation_failed",
            component="rules",
            file=str(path),
            validation_error_count=len(errors),
            errors=errors,
        )
        raise RuleTableError(errors, str(path)) from e
