"""Helpers for project role tokens: durations, JWT claims and observations."""

from __future__ import annotations

import re
from typing import Any

import jwt

from ..utils.optional import to_int

_DURATION_UNITS = {"s": 1, "m": 60, "h": 3600, "d": 86400}
_DURATION_PART = re.compile(r"(\d+)([smhd])")


def parse_duration(value: str | None) -> int:
    """Parse a duration such as "90s", "12h" or "1d12h" into seconds.

    None and "0" both mean zero.

    Raises:
        ValueError: If the string is not a sequence of <n>s|m|h|d parts
    """
    if value is None or value == "0":
        return 0
    text = value.strip()
    if not text:
        raise ValueError("invalid duration: empty string")
    position = 0
    seconds = 0
    for match in _DURATION_PART.finditer(text):
        if match.start() != position:
            break
        seconds += int(match.group(1)) * _DURATION_UNITS[match.group(2)]
        position = match.end()
    if position != len(text):
        raise ValueError(f"invalid duration: {value!r}")
    return seconds


def token_claims(token: str) -> dict[str, Any]:
    """Decode the claims of a JWT without verifying its signature."""
    return jwt.decode(token, options={"verify_signature": False})


def find_role(project: dict[str, Any], role_name: str) -> dict[str, Any] | None:
    for role in (project.get("spec") or {}).get("roles") or []:
        if role.get("name") == role_name:
            return role
    return None


def find_token(role: dict[str, Any], token_id: str) -> dict[str, Any]:
    """The role's JWT with the given id; an empty dict when there is none."""
    for token in role.get("jwtTokens") or []:
        if token.get("id", "") == token_id:
            return token
    return {}


def generate_token_observation(token: dict[str, Any]) -> dict[str, Any]:
    return {
        "iat": to_int(token.get("iat")),
        "exp": to_int(token.get("exp")),
        "id": token.get("id", ""),
    }
