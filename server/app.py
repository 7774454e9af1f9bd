# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (c) 2026 Karan Sharma
"""HTTP API for the pact platform (FastAPI).

Endpoints for the contract lifecycle: fetch form defaults, create a
contract, view it for signing, sign it as either party, and view the
celebration summary once both parties have signed.

Views are JSON. Rendering, routing, and the hand-off delay are the caller's.
"""

import sys
import os
# Ensure parent directory is importable
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel
from typing import Optional

from server.store import ContractStore
from server.lifecycle import (
    ContractLifecycle, ValidationFailed, ContractNotFound, AlreadySigned, StoreFailure,
)
from server.projection import load_contract_view, signing_view, celebration_view
from protocol import DEFAULT_TITLE, DEFAULT_TERMS, CELEBRATION_DELAY, MSG_NOT_FOUND


# --- Request models ---

class CreateContractRequest(BaseModel):
    title: Optional[str] = DEFAULT_TITLE
    terms: list[str] = []

class SignRequest(BaseModel):
    role: str  # "boyfriend" or "girlfriend"
    name: str = ""
    message: Optional[str] = None


def _raise_for(exc: Exception):
    """Map a lifecycle error to its HTTP status."""
    if isinstance(exc, ValidationFailed):
        raise HTTPException(400, str(exc))
    if isinstance(exc, ContractNotFound):
        raise HTTPException(404, MSG_NOT_FOUND)
    if isinstance(exc, AlreadySigned):
        raise HTTPException(409, str(exc))
    if isinstance(exc, StoreFailure):
        raise HTTPException(500, str(exc))
    raise exc


# --- App factory ---

def create_app(store: ContractStore | None = None) -> FastAPI:
    """Create FastAPI app with injected dependencies."""

    app = FastAPI(title="Pact", version="1.0")

    _store = store or ContractStore()
    _lifecycle = ContractLifecycle(_store)

    # Expose for testing
    app.state.store = _store
    app.state.lifecycle = _lifecycle

    @app.get("/")
    async def index():
        return {
            "service": "pact",
            "routes": {
                "create": "/contracts",
                "sign": "/contracts/{contract_id}",
                "celebrate": "/contracts/{contract_id}/celebration",
            },
        }

    @app.get("/defaults")
    async def defaults():
        """Prefilled title and promises for the creation form."""
        return {"title": DEFAULT_TITLE, "terms": list(DEFAULT_TERMS)}

    # --- Contract lifecycle ---

    @app.post("/contracts")
    async def post_contract(req: CreateContractRequest):
        """Create a pending contract with its ordered promises."""
        try:
            contract_id = _lifecycle.create_contract(req.title, req.terms)
        except (ValidationFailed, StoreFailure) as e:
            _raise_for(e)
        return {"contract_id": contract_id, "status": "pending"}

    @app.get("/contracts/{contract_id}")
    async def get_contract(contract_id: str):
        """Signing view: the contract, its promises, and who has signed."""
        try:
            view = load_contract_view(_store, contract_id)
        except (ContractNotFound, StoreFailure) as e:
            _raise_for(e)
        return signing_view(view)

    @app.post("/contracts/{contract_id}/sign")
    async def sign_contract(contract_id: str, req: SignRequest):
        """Sign as one party. Reports whether this signature completed the contract."""
        try:
            result = _lifecycle.sign_contract(contract_id, req.role, req.name, req.message)
        except (ValidationFailed, ContractNotFound, AlreadySigned, StoreFailure) as e:
            _raise_for(e)

        resp = {
            "completed": result.completed,
            "status": result.status,
            "signature": result.signature,
        }
        if result.completed:
            resp["celebrate_after"] = CELEBRATION_DELAY
            resp["celebrate_url"] = f"/contracts/{contract_id}/celebration"
        return resp

    @app.get("/contracts/{contract_id}/celebration")
    async def get_celebration(contract_id: str):
        """Celebration view with formatted dates and both signatures."""
        try:
            view = load_contract_view(_store, contract_id)
        except (ContractNotFound, StoreFailure) as e:
            _raise_for(e)
        return celebration_view(view)

    return app
