# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (c) 2026 Karan Sharma
"""Contract lifecycle for pact.

Creates contracts with their ordered terms, records each party's signature,
and completes the contract once both parties have signed.

The store is injected; nothing here holds a process-wide client.
"""

import logging
import sqlite3
import time
from dataclasses import dataclass

from contract import (
    normalize_title, normalize_terms, build_terms, validate_draft,
    parse_role, normalize_signature, validate_signature,
)
from protocol import (
    CONTRACTS_TABLE, TERMS_TABLE, SIGNATURES_TABLE, REQUIRED_SIGNATURES,
    STATUS_TRANSITIONS, ContractStatus, Role,
    MSG_CREATE_FAILED, MSG_SIGN_FAILED, MSG_NOT_FOUND, MSG_ALREADY_SIGNED,
)
from server.store import ContractStore

logger = logging.getLogger(__name__)


# --- Errors ---

class ValidationFailed(ValueError):
    """Input rejected before any write."""

    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))


class ContractNotFound(LookupError):
    def __init__(self, contract_id: str):
        self.contract_id = contract_id
        super().__init__(MSG_NOT_FOUND)


class AlreadySigned(Exception):
    """The role already has a signature on this contract."""

    def __init__(self, contract_id: str, role: Role):
        self.contract_id = contract_id
        self.role = role
        super().__init__(MSG_ALREADY_SIGNED)


class StoreFailure(Exception):
    """A read or write against the store failed. Message is user-visible."""


@dataclass
class SignResult:
    """Outcome of a signature.

    completed is True only when this call moved the contract to completed;
    the caller decides whether to hand off to the celebration view.
    """
    completed: bool
    signature: dict
    status: str = ContractStatus.PENDING.value


# --- Controller ---

class ContractLifecycle:
    """Create, sign, and complete relationship contracts."""

    def __init__(self, store: ContractStore):
        self.store = store

    def create_contract(self, title: str | None, term_texts: list[str]) -> str:
        """Persist a pending contract and one term per promise. Returns contract id.

        Contract and terms are written in one transaction.
        """
        ok, errors = validate_draft(title, term_texts)
        if not ok:
            raise ValidationFailed(errors)

        terms = normalize_terms(term_texts)
        try:
            with self.store.transaction():
                contract = self.store.insert(CONTRACTS_TABLE, {
                    "title": normalize_title(title),
                    "status": ContractStatus.PENDING.value,
                    "completed_at": None,
                })
                self.store.insert_many(TERMS_TABLE, build_terms(contract["id"], terms))
        except sqlite3.Error:
            logger.exception("Error creating contract")
            raise StoreFailure(MSG_CREATE_FAILED)

        logger.info("Created contract %s with %d terms", contract["id"], len(terms))
        return contract["id"]

    def sign_contract(self, contract_id: str, role: Role | str, name: str,
                      message: str | None = None) -> SignResult:
        """Record a signature, then complete the contract if both parties have signed.

        Insert, recount, and status update run in one transaction.
        """
        ok, errors = validate_signature(role, name, message)
        if not ok:
            raise ValidationFailed(errors)
        role = parse_role(role)
        name, message = normalize_signature(name, message)

        try:
            with self.store.transaction():
                contract = self._get_contract(contract_id)
                try:
                    signature = self.store.insert(SIGNATURES_TABLE, {
                        "contract_id": contract_id,
                        "name": name,
                        "role": role.value,
                        "message": message,
                    })
                except sqlite3.IntegrityError:
                    raise AlreadySigned(contract_id, role)

                signatures = self.store.select(SIGNATURES_TABLE, contract_id=contract_id)
                completed = False
                status = contract["status"]
                if len(signatures) == REQUIRED_SIGNATURES and status == ContractStatus.PENDING.value:
                    # completed_at never precedes the signature that completed the contract
                    at = max(time.time(), signature["signed_at"])
                    completed = self.transition(contract_id, ContractStatus.COMPLETED, at=at)
                    if completed:
                        status = ContractStatus.COMPLETED.value
        except sqlite3.Error:
            logger.exception("Error signing contract %s", contract_id)
            raise StoreFailure(MSG_SIGN_FAILED)

        if completed:
            logger.info("Contract %s completed", contract_id)
        return SignResult(completed=completed, signature=signature, status=status)

    def transition(self, contract_id: str, status: ContractStatus | str,
                   at: float | None = None) -> bool:
        """Move a contract to a new status with state machine enforcement.

        Returns False if the contract changed status underneath us.
        """
        contract = self._get_contract(contract_id)
        current = ContractStatus(contract["status"])
        new = ContractStatus(status)

        if new not in STATUS_TRANSITIONS.get(current, set()):
            raise ValueError(f"Invalid status transition: {current.value} -> {new.value}")

        values = {"status": new.value}
        if new is ContractStatus.COMPLETED:
            values["completed_at"] = at if at is not None else time.time()
        # Guarded on the status we read so completed_at is set once
        updated = self.store.update(CONTRACTS_TABLE, values, id=contract_id, status=current.value)
        return updated > 0

    def _get_contract(self, contract_id: str) -> dict:
        rows = self.store.select(CONTRACTS_TABLE, id=contract_id)
        if not rows:
            raise ContractNotFound(contract_id)
        return rows[0]
