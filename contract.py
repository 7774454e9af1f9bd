# SPDX-License-Identifier: AGPL-3.0-or-later
# Copyright (c) 2026 Karan Sharma
"""Contract draft builder and validator for pact.

Builds and validates the pieces of a relationship contract before anything
is written: the title, the ordered promises, and each party's signature.
Everything here is pure; persistence lives in server/.
"""

from protocol import (
    DEFAULT_TITLE, MAX_TITLE_LENGTH, MAX_TERM_LENGTH, MAX_TERMS,
    MAX_NAME_LENGTH, MAX_MESSAGE_LENGTH, MSG_NO_TERMS, MSG_NO_NAME,
    Role,
)


# --- Terms ---

def normalize_terms(term_texts):
    """Strip each promise and drop blank ones. Input order is preserved."""
    if not term_texts:
        return []
    out = []
    for text in term_texts:
        if text is None:
            continue
        text = str(text).strip()
        if text:
            out.append(text)
    return out


def normalize_title(title):
    """Trimmed title, or DEFAULT_TITLE when blank."""
    title = (title or "").strip()
    return title or DEFAULT_TITLE


def build_terms(contract_id, term_texts):
    """Build term rows for a contract.

    term_order is the position in term_texts: zero-based, gapless.
    Callers pass already-normalized texts.
    """
    return [
        {"contract_id": contract_id, "term_text": text, "term_order": index}
        for index, text in enumerate(term_texts)
    ]


# --- Validator ---

def validate_draft(title, term_texts):
    """Validate a contract draft.

    Returns:
        (True, []) if valid, (False, [errors]) otherwise.
    """
    errors = []

    if title is not None and not isinstance(title, str):
        errors.append("title must be a string")
    elif len(normalize_title(title)) > MAX_TITLE_LENGTH:
        errors.append(f"title must be at most {MAX_TITLE_LENGTH} characters")

    terms = normalize_terms(term_texts)
    if not terms:
        errors.append(MSG_NO_TERMS)
    elif len(terms) > MAX_TERMS:
        errors.append(f"a contract can have at most {MAX_TERMS} terms")
    else:
        for i, text in enumerate(terms):
            if len(text) > MAX_TERM_LENGTH:
                errors.append(f"term {i + 1} must be at most {MAX_TERM_LENGTH} characters")

    return (len(errors) == 0, errors)


# --- Signatures ---

def parse_role(role):
    """Role enum from a Role or its string value. Raises ValueError."""
    if isinstance(role, Role):
        return role
    return Role(role)


def normalize_signature(name, message=None):
    """Trim name and message. A blank message becomes None."""
    name = (name or "").strip()
    message = (message or "").strip() or None
    return name, message


def validate_signature(role, name, message=None):
    """Validate a signature before it is written.

    Returns:
        (True, []) if valid, (False, [errors]) otherwise.
    """
    errors = []

    try:
        parse_role(role)
    except ValueError:
        valid = ", ".join(r.value for r in Role)
        errors.append(f"role must be one of: {valid}")

    name, message = normalize_signature(name, message)
    if not name:
        errors.append(MSG_NO_NAME)
    elif len(name) > MAX_NAME_LENGTH:
        errors.append(f"name must be at most {MAX_NAME_LENGTH} characters")

    if message and len(message) > MAX_MESSAGE_LENGTH:
        errors.append(f"message must be at most {MAX_MESSAGE_LENGTH} characters")

    return (len(errors) == 0, errors)
