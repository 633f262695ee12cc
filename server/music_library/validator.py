"""Accumulating field validator.

Failures are collected per field so a caller can report every problem with a
request in one response instead of stopping at the first one.
"""

from collections.abc import Collection


class Validator:
    def __init__(self) -> None:
        self.errors: dict[str, str] = {}

    def valid(self) -> bool:
        return not self.errors

    def add_error(self, key: str, message: str) -> None:
        # First failure recorded for a field wins
        self.errors.setdefault(key, message)

    def check(self, ok: bool, key: str, message: str) -> None:
        if not ok:
            self.add_error(key, message)


def permitted_value(value: str, permitted: Collection[str]) -> bool:
    return value in permitted
