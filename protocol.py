# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (c) 2026 Karan Sharma
"""Shared constants and interfaces for the pact platform.

All modules import from here to avoid circular dependencies.
"""

from enum import Enum

# --- Contract defaults ---

DEFAULT_TITLE = "Our Relationship Contract"

# Prefilled promises offered by the creation form
DEFAULT_TERMS = [
    "We promise to communicate openly and honestly with each other",
    "We will respect each other's boundaries and personal space",
    "We commit to supporting each other's dreams and goals",
    "We agree to be faithful and loyal to one another",
    "We will make time for each other despite our busy schedules",
]

# Seconds a caller waits after the completing signature before showing the celebration
CELEBRATION_DELAY = 1.5

# --- Limits ---

MAX_TITLE_LENGTH = 200
MAX_TERM_LENGTH = 500
MAX_TERMS = 50
MAX_NAME_LENGTH = 100
MAX_MESSAGE_LENGTH = 1000

# --- User-visible messages ---

MSG_NO_TERMS = "Please add at least one term to your contract"
MSG_NO_NAME = "Please enter your name"
MSG_CREATE_FAILED = "Failed to create contract. Please try again."
MSG_SIGN_FAILED = "Failed to sign contract. Please try again."
MSG_LOAD_FAILED = "Failed to load contract"
MSG_NOT_FOUND = "Contract not found"
MSG_ALREADY_SIGNED = "This role has already signed the contract"


# --- State Machine ---

class ContractStatus(Enum):
    PENDING = "pending"
    COMPLETED = "completed"  # both parties signed; terminal


# Valid status transitions: current -> set of valid next statuses
STATUS_TRANSITIONS = {
    ContractStatus.PENDING: {ContractStatus.COMPLETED},
    ContractStatus.COMPLETED: set(),
}


# --- Parties ---

class Role(Enum):
    BOYFRIEND = "boyfriend"
    GIRLFRIEND = "girlfriend"


# Every role must sign before a contract completes
REQUIRED_ROLES = (Role.BOYFRIEND, Role.GIRLFRIEND)

# Signatures needed to complete a contract
REQUIRED_SIGNATURES = len(REQUIRED_ROLES)


# --- Tables ---

CONTRACTS_TABLE = "contracts"
TERMS_TABLE = "contract_terms"
SIGNATURES_TABLE = "signatures"
