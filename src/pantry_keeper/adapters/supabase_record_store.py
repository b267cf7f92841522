"""Supabase implementation of the persistence gateway."""

from collections.abc import Mapping
from dataclasses import dataclass

import httpx
from postgrest import APIError
from supabase import Client

from pantry_keeper.domain.errors import ConflictError, GatewayFailure, NotFound
from pantry_keeper.services.gateway import RecordStore

UNIQUE_VIOLATION = "23505"


@dataclass
class SupabaseRecordStore(RecordStore):
    """Supabase-backed generic record store."""

    client: Client

    def get(self, collection: str, record_id: str) -> dict[str, object] | None:
        """Return a record by id, if present."""
        response = self._execute(
            lambda: self.client.table(collection)
            .select("*")
            .eq("id", record_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return response.data[0]

    def list(
        self, collection: str, filters: Mapping[str, object] | None = None
    ) -> list[dict[str, object]]:
        """Return records matching all equality filters."""

        def run():  # type: ignore[no-untyped-def]
            query = self.client.table(collection).select("*")
            for column, value in (filters or {}).items():
                query = query.eq(column, value)
            return query.execute()

        response = self._execute(run)
        return list(response.data or [])

    def insert(self, collection: str, record: dict[str, object]) -> dict[str, object]:
        """Insert a record and return the stored row."""
        response = self._execute(
            lambda: self.client.table(collection).insert(record).execute()
        )
        if not response.data:
            raise GatewayFailure(f"Failed to insert into {collection}")
        return response.data[0]

    def update(
        self, collection: str, record_id: str, fields: dict[str, object]
    ) -> None:
        """Update an existing record."""
        response = self._execute(
            lambda: self.client.table(collection)
            .update(fields)
            .eq("id", record_id)
            .execute()
        )
        if not response.data:
            raise NotFound(f"{collection} record {record_id} not found")

    def delete(self, collection: str, record_id: str) -> None:
        """Delete a record by id."""
        response = self._execute(
            lambda: self.client.table(collection).delete().eq("id", record_id).execute()
        )
        if not response.data:
            raise NotFound(f"{collection} record {record_id} not found")

    @staticmethod
    def _execute(call):  # type: ignore[no-untyped-def]
        try:
            return call()
        except APIError as exc:
            if exc.code == UNIQUE_VIOLATION:
                raise ConflictError(exc.message or str(exc)) from exc
            raise GatewayFailure(exc.message or str(exc)) from exc
        except httpx.HTTPError as exc:
            raise GatewayFailure(str(exc)) from exc
