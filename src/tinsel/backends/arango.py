"""ArangoDB backend.

One document per party in ``parties``; one document per guest link in
``guest_links``. Party writes are single-document inserts with
``overwrite=True``, which ArangoDB applies atomically.
"""

from __future__ import annotations

import logging

from arango import ArangoClient
from arango.exceptions import ArangoError

from tinsel.backends.abstract import StorageBackend

logger = logging.getLogger("tinsel.backends.arango")

PARTIES = "parties"
GUEST_LINKS = "guest_links"

_META_FIELDS = ("_key", "_id", "_rev")


def _strip_meta(doc: dict | None) -> dict | None:
    if doc is None:
        return None
    return {k: v for k, v in doc.items() if k not in _META_FIELDS}


class ArangoDBBackend(StorageBackend):
    """Storage backed by an ArangoDB database."""

    def __init__(
        self,
        host: str,
        db_name: str,
        username: str = "root",
        password: str = "",
        client: ArangoClient | None = None,
    ) -> None:
        self._client = client or ArangoClient(hosts=host)
        sys_db = self._client.db("_system", username=username, password=password)
        if not sys_db.has_database(db_name):
            logger.info("Creating database %s", db_name)
            sys_db.create_database(db_name)
        self._db = self._client.db(db_name, username=username, password=password)
        for name in (PARTIES, GUEST_LINKS):
            if not self._db.has_collection(name):
                logger.info("Creating collection %s", name)
                self._db.create_collection(name)
        self._parties = self._db.collection(PARTIES)
        self._guest_links = self._db.collection(GUEST_LINKS)

    def get_party(self, party_id: str) -> dict | None:
        return _strip_meta(self._parties.get(party_id))

    def put_party(self, party_id: str, record: dict) -> None:
        self._parties.insert({**record, "_key": party_id}, overwrite=True, silent=True)

    def get_value(self, key: str) -> dict | None:
        return _strip_meta(self._guest_links.get(key))

    def put_values(self, items: dict[str, dict]) -> list[str]:
        keys = list(items)
        docs = [{**items[key], "_key": key} for key in keys]
        try:
            results = self._guest_links.insert_many(docs, overwrite=True)
        except ArangoError:
            logger.exception("Batch insert of %d guest links failed", len(keys))
            return keys
        failed = [key for key, result in zip(keys, results) if isinstance(result, Exception)]
        if failed:
            logger.warning("%d of %d guest link writes failed", len(failed), len(keys))
        return failed

    def count_records(self) -> dict[str, int]:
        return {
            "parties": self._parties.count(),
            "guestLinks": self._guest_links.count(),
        }

    def close(self) -> None:
        self._client.close()
