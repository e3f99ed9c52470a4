"""Join Codes — generation and normalization of institute and exam codes.

Invariants:
    - Codes are upper-case, drawn from an alphabet without 0/O/1/I
    - normalize_code is applied to every user-supplied code before lookup
"""

import secrets

CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
INSTITUTE_CODE_LENGTH = 6
EXAM_CODE_LENGTH = 8


def generate_code(length: int) -> str:
    return "".join(secrets.choice(CODE_ALPHABET) for _ in range(length))


def generate_institute_code() -> str:
    return generate_code(INSTITUTE_CODE_LENGTH)


def generate_exam_code() -> str:
    return generate_code(EXAM_CODE_LENGTH)


def normalize_code(raw: str) -> str:
    return (raw or "").strip().upper()
