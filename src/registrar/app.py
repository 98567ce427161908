"""Registrar - wires the rule engine components onto one database."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from registrar.config import Settings
from registrar.enrollment import RegistrationInvariantChecker, RegistrationService
from registrar.history import RegistrationHistoryRecorder
from registrar.rules import (
    RuleStore,
    StatusTransitionValidator,
    StudentStatusService,
    load_rules_file,
)
from registrar.store import Database, RecordStore

if TYPE_CHECKING:
    from registrar.history import HistoryEntry
    from registrar.store import RegistrationStatus

logger = logging.getLogger(__name__)


class Registrar:
    """Entry point for the surrounding service layer.

    Exposes the three core calls directly (can_transition,
    validate_enrollment, record_transition) and the components behind them
    as attributes.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        """Create the database schema and all components.

        Args:
            settings: Runtime settings. Defaults to ``Settings()``.

        Raises:
            ConfigError: If the configured rules file is missing or invalid.
        """
        self.settings = settings if settings is not None else Settings()
        rule_set = (
            load_rules_file(self.settings.rules_file)
            if self.settings.rules_file is not None
            else None
        )

        self.db = Database(self.settings.db_path, lock_timeout=self.settings.lock_timeout)
        self.db.create_tables()

        self.records = RecordStore(self.db)
        self.rules = RuleStore(self.db)
        self.history = RegistrationHistoryRecorder(self.db)
        self.validator = StatusTransitionValidator(self.db)
        self.students = StudentStatusService(self.db, self.history)
        self.checker = RegistrationInvariantChecker(self.db)
        self.registrations = RegistrationService(self.db, self.checker, self.history)

        if rule_set is not None:
            self.rules.replace_rules(rule_set)
            logger.info("Loaded transition rules from %s", self.settings.rules_file)

    @classmethod
    def from_env(cls) -> Registrar:
        """Create a Registrar from REGISTRAR_* environment variables."""
        return cls(Settings.from_env())

    def close(self) -> None:
        """Close the database connection."""
        self.db.close()

    def can_transition(self, from_status_id: str, to_status_id: str) -> bool:
        """See StatusTransitionValidator.can_transition."""
        return self.validator.can_transition(from_status_id, to_status_id)

    def validate_enrollment(self, class_id: str, student_id: str) -> None:
        """See RegistrationInvariantChecker.validate_enrollment."""
        self.checker.validate_enrollment(class_id, student_id)

    def record_transition(
        self,
        registration_id: str,
        previous_status: RegistrationStatus | str | None,
        new_status: RegistrationStatus | str,
        reason: str = "",
    ) -> HistoryEntry:
        """See RegistrationHistoryRecorder.record_transition."""
        return self.history.record_transition(registration_id, previous_status, new_status, reason)
