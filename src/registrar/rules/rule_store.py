"""RuleStore - the administrator-configured status transition graph."""

from __future__ import annotations

import logging
from collections.abc import Mapping

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from registrar.rules.loader import RuleSetConfig
from registrar.store.database import Database
from registrar.store.models import StatusTransitionRule, StudentStatus
from registrar.store.store import get_status_or_raise

logger = logging.getLogger(__name__)

EdgeSet = dict[str, frozenset[str]]


def load_edges(session: Session) -> EdgeSet:
    """Read the full edge set: status ID -> IDs of its allowed next statuses."""
    edges: dict[str, set[str]] = {}
    stmt = select(StatusTransitionRule.from_status_id, StatusTransitionRule.to_status_id)
    for from_id, to_id in session.execute(stmt):
        edges.setdefault(from_id, set()).add(to_id)
    return {from_id: frozenset(to_ids) for from_id, to_ids in edges.items()}


def has_edge(session: Session, from_status_id: str, to_status_id: str) -> bool:
    stmt = select(StatusTransitionRule.id).where(
        StatusTransitionRule.from_status_id == from_status_id,
        StatusTransitionRule.to_status_id == to_status_id,
    )
    return session.execute(stmt).first() is not None


class RuleStore:
    """Owns the StatusTransitionRule rows.

    Rules are read straight from the table on every call, so administrative
    edits take effect on the next request.
    """

    def __init__(self, db: Database) -> None:
        self._db = db

    def load_edges(self) -> EdgeSet:
        """Get the current edge set.

        Returns:
            Mapping from status ID to the frozen set of reachable status IDs.
            Terminal statuses have no key.
        """
        with self._db.transaction() as session:
            return load_edges(session)

    def next_statuses(self, status_id: str) -> frozenset[str]:
        """Get IDs of the statuses directly reachable from a status.

        Raises:
            UnknownStatusError: If status doesn't exist
        """
        with self._db.transaction() as session:
            get_status_or_raise(session, status_id)
            stmt = select(StatusTransitionRule.to_status_id).where(
                StatusTransitionRule.from_status_id == status_id
            )
            return frozenset(session.execute(stmt).scalars().all())

    def list_rules(self) -> list[StatusTransitionRule]:
        """List all rules ordered by source and target status."""
        with self._db.transaction() as session:
            stmt = select(StatusTransitionRule).order_by(
                StatusTransitionRule.from_status_id, StatusTransitionRule.to_status_id
            )
            return list(session.execute(stmt).scalars().all())

    def add_rule(self, from_status_id: str, to_status_id: str) -> StatusTransitionRule:
        """Allow the transition from_status -> to_status.

        Adding an existing rule returns the stored rule.

        Raises:
            UnknownStatusError: If either status doesn't exist
            ValueError: If both IDs are the same status
        """
        if from_status_id == to_status_id:
            raise ValueError("A status always transitions to itself; self rules are not stored")
        with self._db.transaction() as session:
            get_status_or_raise(session, from_status_id)
            get_status_or_raise(session, to_status_id)

            stmt = select(StatusTransitionRule).where(
                StatusTransitionRule.from_status_id == from_status_id,
                StatusTransitionRule.to_status_id == to_status_id,
            )
            rule = session.execute(stmt).scalar_one_or_none()
            if rule is None:
                rule = StatusTransitionRule(
                    from_status_id=from_status_id, to_status_id=to_status_id
                )
                session.add(rule)
                logger.info("Added transition rule %s -> %s", from_status_id, to_status_id)
        return rule

    def remove_rule(self, from_status_id: str, to_status_id: str) -> bool:
        """Revoke the transition from_status -> to_status.

        Returns:
            True if a rule was removed, False if none existed.
        """
        with self._db.transaction() as session:
            result = session.execute(
                delete(StatusTransitionRule).where(
                    StatusTransitionRule.from_status_id == from_status_id,
                    StatusTransitionRule.to_status_id == to_status_id,
                )
            )
            removed = bool(result.rowcount)
        if removed:
            logger.info("Removed transition rule %s -> %s", from_status_id, to_status_id)
        return removed

    def replace_rules(self, transitions: Mapping[str, list[str]] | RuleSetConfig) -> EdgeSet:
        """Replace the whole rule set from a mapping keyed by status name.

        Statuses named in the mapping are created if missing. Existing
        statuses are never deleted. Self transitions in the mapping are
        ignored.

        Args:
            transitions: ``{status name: [next status names]}`` or a loaded
                RuleSetConfig. Repeated targets are stored once.

        Returns:
            The new edge set.
        """
        if isinstance(transitions, RuleSetConfig):
            names = transitions.statuses
            mapping: Mapping[str, list[str]] = transitions.transitions
        else:
            mapping = transitions
            names = list(dict.fromkeys([*mapping, *(t for ts in mapping.values() for t in ts)]))

        with self._db.transaction() as session:
            ids = self._ensure_statuses(session, names)
            session.execute(delete(StatusTransitionRule))
            for source, targets in mapping.items():
                for target in dict.fromkeys(targets):
                    if source == target:
                        continue
                    session.add(
                        StatusTransitionRule(from_status_id=ids[source], to_status_id=ids[target])
                    )
            session.flush()
            edges = load_edges(session)

        logger.info(
            "Replaced transition rules: %d statuses, %d rules",
            len(names),
            sum(len(v) for v in edges.values()),
        )
        return edges

    def _ensure_statuses(self, session: Session, names: list[str]) -> dict[str, str]:
        existing = {
            s.name: s.id
            for s in session.execute(
                select(StudentStatus).where(StudentStatus.name.in_(names))
            ).scalars()
        }
        for name in names:
            if name not in existing:
                status = StudentStatus(name=name)
                session.add(status)
                existing[name] = status.id
        session.flush()
        return existing
