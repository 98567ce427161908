"""History - append-only audit trail of accepted changes."""

from registrar.history.models import HistoryEntry, StatusHistoryEntry
from registrar.history.recorder import RegistrationHistoryRecorder

__all__ = [
    "HistoryEntry",
    "RegistrationHistoryRecorder",
    "StatusHistoryEntry",
]
