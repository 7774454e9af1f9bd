# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (c) 2026 Karan Sharma
"""Read projection for pact.

Reassembles a contract, its ordered terms, and its signatures into the view
shared by the signing page and the celebration page.
"""

import logging
import sqlite3
from dataclasses import dataclass, field
from datetime import datetime, timezone

from protocol import (
    CONTRACTS_TABLE, TERMS_TABLE, SIGNATURES_TABLE, REQUIRED_ROLES,
    ContractStatus, Role, MSG_LOAD_FAILED,
)
from server.lifecycle import ContractNotFound, StoreFailure
from server.store import ContractStore

logger = logging.getLogger(__name__)


@dataclass
class ContractView:
    contract: dict
    terms: list[dict] = field(default_factory=list)
    signatures: list[dict] = field(default_factory=list)

    @property
    def is_completed(self) -> bool:
        return self.contract["status"] == ContractStatus.COMPLETED.value

    def signature_for(self, role: Role) -> dict | None:
        """First signature with this role. Roles are unique per contract."""
        for sig in self.signatures:
            if sig["role"] == role.value:
                return sig
        return None

    def has_signed(self, role: Role) -> bool:
        return self.signature_for(role) is not None


def load_contract_view(store: ContractStore, contract_id: str) -> ContractView:
    """Contract by id plus terms ordered by term_order and all its signatures.

    Raises ContractNotFound before reading terms or signatures.
    """
    try:
        rows = store.select(CONTRACTS_TABLE, id=contract_id)
        if not rows:
            raise ContractNotFound(contract_id)
        terms = store.select(TERMS_TABLE, order_by="term_order", contract_id=contract_id)
        signatures = store.select(SIGNATURES_TABLE, contract_id=contract_id)
    except sqlite3.Error:
        logger.exception("Error loading contract %s", contract_id)
        raise StoreFailure(MSG_LOAD_FAILED)
    return ContractView(contract=rows[0], terms=terms, signatures=signatures)


# --- Date formatting ---

def format_long_date(ts: float | None) -> str | None:
    """'October 19, 2026'"""
    if ts is None:
        return None
    dt = datetime.fromtimestamp(ts, tz=timezone.utc)
    return f"{dt:%B} {dt.day}, {dt.year}"


def format_short_date(ts: float | None) -> str | None:
    """'10/19/2026'"""
    if ts is None:
        return None
    dt = datetime.fromtimestamp(ts, tz=timezone.utc)
    return f"{dt.month}/{dt.day}/{dt.year}"


# --- Views ---

def _term_list(view: ContractView) -> list[dict]:
    return [
        {"number": i + 1, "term_text": t["term_text"], "term_order": t["term_order"]}
        for i, t in enumerate(view.terms)
    ]


def signing_view(view: ContractView) -> dict:
    """Everything the signing page shows: the contract and who has signed so far."""
    c = view.contract
    parties = {}
    for role in REQUIRED_ROLES:
        sig = view.signature_for(role)
        parties[role.value] = {
            "signed": sig is not None,
            "signature": sig,
        }
    return {
        "id": c["id"],
        "title": c["title"],
        "status": c["status"],
        "created_at": c["created_at"],
        "completed_at": c["completed_at"],
        "created_on": format_short_date(c["created_at"]),
        "terms": _term_list(view),
        "signatures": view.signatures,
        "parties": parties,
    }


def celebration_view(view: ContractView) -> dict:
    """The celebration summary: title, numbered promises, and both signatures."""
    c = view.contract
    parties = {}
    for role in REQUIRED_ROLES:
        sig = view.signature_for(role)
        if sig is None:
            parties[role.value] = None
            continue
        parties[role.value] = {
            "name": sig["name"],
            "message": sig["message"],
            "signed_at": sig["signed_at"],
            "signed_on": format_short_date(sig["signed_at"]),
        }
    return {
        "id": c["id"],
        "title": c["title"],
        "status": c["status"],
        "completed": view.is_completed,
        "since": format_long_date(c["completed_at"]),
        "terms": _term_list(view),
        "parties": parties,
    }
