"""In-memory document storage and a simple per-guild credit ledger."""

from __future__ import annotations

import copy
import secrets
import threading
from collections.abc import Iterable, Mapping
from typing import Any, Union

Filter = Union[Mapping[str, Any], Iterable[tuple[str, Any]], None]
Sort = Union[Mapping[str, int], Iterable[tuple[str, int]], None]

_MISSING = object()

ACCOUNT_COLLECTION = "bank_accounts"


class NotFoundError(LookupError):
    """Raised when no document matches a lookup."""


class InsufficientFundsError(ValueError):
    """Raised when a withdrawal exceeds an account's balance."""

    def __init__(self, balance: int, amount: int) -> None:
        super().__init__(f"insufficient funds: balance {balance}, requested {amount}")
        self.balance = balance
        self.amount = amount


def _new_object_id() -> str:
    return secrets.token_hex(12)


def _normalize(pairs: Filter) -> dict[str, Any]:
    if pairs is None:
        return {}
    if isinstance(pairs, Mapping):
        return dict(pairs)
    return dict(pairs)


def _matches(document: Mapping[str, Any], criteria: Mapping[str, Any]) -> bool:
    return all(document.get(key, _MISSING) == value for key, value in criteria.items())


def _sort_key(field: str):
    def key(document: Mapping[str, Any]) -> tuple[bool, Any]:
        value = document.get(field)
        return (value is not None, value)

    return key


class DocumentStore:
    """A thread-safe, in-memory collection of dictionary documents.

    Filters are equality matches on top-level fields. Documents are copied
    on the way in and on the way out, so callers never share state with
    the store.
    """

    def __init__(self) -> None:
        self._collections: dict[str, list[dict[str, Any]]] = {}
        self._lock = threading.RLock()

    def find_one(self, collection: str, filter: Filter) -> dict[str, Any]:
        """Return the first document matching the filter, or raise NotFoundError."""
        criteria = _normalize(filter)
        with self._lock:
            for document in self._collections.get(collection, []):
                if _matches(document, criteria):
                    return copy.deepcopy(document)
        raise NotFoundError(f"no document in {collection!r} matches {criteria!r}")

    def find_many(
        self,
        collection: str,
        filter: Filter,
        sort: Sort = None,
        limit: int = 0,
    ) -> list[dict[str, Any]]:
        """Return all matching documents, sorted and limited; limit 0 means no limit."""
        criteria = _normalize(filter)
        order = list(_normalize(sort).items())
        with self._lock:
            found = [
                copy.deepcopy(document)
                for document in self._collections.get(collection, [])
                if _matches(document, criteria)
            ]
        for field, direction in reversed(order):
            found.sort(key=_sort_key(field), reverse=direction < 0)
        if limit > 0:
            found = found[:limit]
        return found

    def update_or_insert(
        self, collection: str, filter: Filter, document: Mapping[str, Any]
    ) -> str:
        """Update the first matching document or insert a new one; return its id."""
        criteria = _normalize(filter)
        fields = copy.deepcopy(dict(document))
        with self._lock:
            documents = self._collections.setdefault(collection, [])
            for existing in documents:
                if _matches(existing, criteria):
                    fields.pop("_id", None)
                    existing.update(fields)
                    return existing["_id"]
            stored = copy.deepcopy(criteria)
            stored.update(fields)
            if not stored.get("_id"):
                stored["_id"] = _new_object_id()
            documents.append(stored)
            return stored["_id"]

    def delete(self, collection: str, filter: Filter) -> int:
        """Delete the first matching document; return how many were deleted."""
        criteria = _normalize(filter)
        with self._lock:
            documents = self._collections.get(collection, [])
            for position, document in enumerate(documents):
                if _matches(document, criteria):
                    del documents[position]
                    return 1
        return 0

    def delete_many(self, collection: str, filter: Filter) -> int:
        """Delete every matching document; return how many were deleted."""
        criteria = _normalize(filter)
        with self._lock:
            documents = self._collections.get(collection, [])
            kept = [document for document in documents if not _matches(document, criteria)]
            removed = len(documents) - len(kept)
            self._collections[collection] = kept
        return removed


class Ledger:
    """Credit balances for guild members, kept in a document store."""

    def __init__(self, store: DocumentStore, starting_balance: int = 0) -> None:
        self.store = store
        self.starting_balance = starting_balance
        self._lock = threading.RLock()

    def _account(self, guild_id: str, member_id: str) -> dict[str, Any]:
        key = {"guild_id": guild_id, "member_id": member_id}
        try:
            return self.store.find_one(ACCOUNT_COLLECTION, key)
        except NotFoundError:
            account = {**key, "current_balance": self.starting_balance}
            account["_id"] = self.store.update_or_insert(ACCOUNT_COLLECTION, key, account)
            return account

    def _save(self, account: dict[str, Any]) -> None:
        self.store.update_or_insert(ACCOUNT_COLLECTION, {"_id": account["_id"]}, account)

    def balance(self, guild_id: str, member_id: str) -> int:
        """Return the member's current balance, opening the account if needed."""
        with self._lock:
            return self._account(guild_id, member_id)["current_balance"]

    def deposit(self, guild_id: str, member_id: str, amount: int) -> int:
        """Add credits to the account and return the new balance."""
        if amount < 0:
            raise ValueError("deposit amount must not be negative")
        with self._lock:
            account = self._account(guild_id, member_id)
            account["current_balance"] += amount
            self._save(account)
            return account["current_balance"]

    def withdraw(self, guild_id: str, member_id: str, amount: int) -> int:
        """Remove credits from the account and return the new balance."""
        if amount < 0:
            raise ValueError("withdrawal amount must not be negative")
        with self._lock:
            account = self._account(guild_id, member_id)
            if amount > account["current_balance"]:
                raise InsufficientFundsError(account["current_balance"], amount)
            account["current_balance"] -= amount
            self._save(account)
            return account["current_balance"]