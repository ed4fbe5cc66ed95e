"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING

from pydantic import ValidationError
from sqlalchemy import delete, func, insert, select, update

from placekeep.adapters.sqlalchemy.mappings import (
    mutation_attachment_table,
    pending_mutation_table,
    place_snapshot_table,
)
from placekeep.adapters.sqlalchemy.serialization import (
    dump_place,
    dump_places,
    load_place,
    load_places,
)
from placekeep.domain.model import Attachment, PendingMutation, ReviewDraft

if TYPE_CHECKING:
    from collections.abc import Iterable

    from sqlalchemy import Row
    from sqlalchemy.orm import Session

    from placekeep.domain.model import Place

log = getLogger(__name__)


class SqlAlchemyPendingMutationRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, mutation: PendingMutation) -> None:
        draft = mutation.draft
        result = self.session.execute(
            insert(pending_mutation_table).values(
                temp_id=mutation.temp_id,
                kind=mutation.kind,
                created_at=mutation.created_at,
                place_json=dump_place(mutation.place),
                visited_on=draft.visited_on,
                rating=draft.rating,
                text=draft.text,
            )
        )
        sequence = result.inserted_primary_key[0] if result.inserted_primary_key else None
        if sequence is None:
            sequence = self._sequence_of(mutation.temp_id)
        for position, attachment in enumerate(draft.attachments):
            self.session.execute(
                insert(mutation_attachment_table).values(
                    mutation_sequence=sequence,
                    position=position,
                    name=attachment.name,
                    content_type=attachment.content_type,
                    data=attachment.data,
                )
            )

    def list_pending(self) -> list[PendingMutation]:
        rows = self.session.execute(
            select(pending_mutation_table).order_by(pending_mutation_table.c.sequence)
        ).all()
        return [self._to_domain(row) for row in rows]

    def contains(self, temp_id: str) -> bool:
        return self._sequence_of(temp_id) is not None

    def remove(self, temp_id: str) -> bool:
        sequence = self._sequence_of(temp_id)
        if sequence is None:
            return False
        self._delete_sequences([sequence])
        return True

    def clear(self) -> int:
        sequences = list(self.session.execute(select(pending_mutation_table.c.sequence)).scalars())
        self._delete_sequences(sequences)
        return len(sequences)

    def _sequence_of(self, temp_id: str) -> int | None:
        stmt = select(pending_mutation_table.c.sequence).where(
            pending_mutation_table.c.temp_id == temp_id
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def _delete_sequences(self, sequences: list[int]) -> None:
        if not sequences:
            return
        # sqlite leaves foreign-key cascades off unless the pragma is set
        self.session.execute(
            delete(mutation_attachment_table).where(
                mutation_attachment_table.c.mutation_sequence.in_(sequences)
            )
        )
        self.session.execute(
            delete(pending_mutation_table).where(pending_mutation_table.c.sequence.in_(sequences))
        )

    def _attachments_for(self, sequence: int) -> tuple[Attachment, ...]:
        stmt = (
            select(mutation_attachment_table)
            .where(mutation_attachment_table.c.mutation_sequence == sequence)
            .order_by(mutation_attachment_table.c.position)
        )
        return tuple(
            Attachment(name=row.name, data=row.data, content_type=row.content_type)
            for row in self.session.execute(stmt)
        )

    def _to_domain(self, row: Row[tuple[object, ...]]) -> PendingMutation:
        mapping = row._mapping  # noqa: SLF001
        return PendingMutation(
            temp_id=mapping["temp_id"],
            created_at=mapping["created_at"],
            kind=mapping["kind"],
            place=load_place(mapping["place_json"]),
            draft=ReviewDraft(
                visited_on=mapping["visited_on"],
                rating=mapping["rating"],
                text=mapping["text"],
                attachments=self._attachments_for(mapping["sequence"]),
            ),
        )


class SqlAlchemyPlaceSnapshotRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def save(self, key: str, places: Iterable[Place]) -> None:
        payload = dump_places(list(places))
        now = datetime.now(UTC)
        exists = self.session.execute(
            select(func.count())
            .select_from(place_snapshot_table)
            .where(place_snapshot_table.c.key == key)
        ).scalar_one()
        if exists:
            self.session.execute(
                update(place_snapshot_table)
                .where(place_snapshot_table.c.key == key)
                .values(payload=payload, updated_at=now)
            )
        else:
            self.session.execute(
                insert(place_snapshot_table).values(key=key, payload=payload, updated_at=now)
            )

    def load(self, key: str) -> list[Place] | None:
        payload = self.session.execute(
            select(place_snapshot_table.c.payload).where(place_snapshot_table.c.key == key)
        ).scalar_one_or_none()
        if payload is None:
            return None
        try:
            return load_places(payload)
        except ValidationError:
            log.warning("Discarding unreadable place snapshot %r", key, exc_info=True)
            return None
