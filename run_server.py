#!/usr/bin/env python3
# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (c) 2026 Karan Sharma
"""Pact platform server.

Configuration from env vars: PACT_DB, PACT_HOST, PACT_PORT, PACT_LOG_LEVEL.
"""

import os, sys, logging
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

import uvicorn
from server.app import create_app
from server.store import ContractStore

DB_PATH = os.environ.get("PACT_DB", "pact.db")
HOST = os.environ.get("PACT_HOST", "127.0.0.1")
PORT = int(os.environ.get("PACT_PORT", "8000"))
LOG_LEVEL = os.environ.get("PACT_LOG_LEVEL", "info").lower()


def main():
    logging.basicConfig(
        level=LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    log = logging.getLogger("pact")

    store = ContractStore(DB_PATH)
    app = create_app(store=store)
    log.info("Serving pact on %s:%d (db=%s)", HOST, PORT, DB_PATH)
    try:
        uvicorn.run(app, host=HOST, port=PORT, log_level=LOG_LEVEL)
    finally:
        store.close()


if __name__ == "__main__":
    main()
