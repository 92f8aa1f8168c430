"""
Field rules for book payloads.

Each rule pairs a pure predicate with an applicability guard; every rule runs
independently and all violations are collected. Nothing here mutates the
payload or touches storage.
"""
from __future__ import annotations

import datetime
import re
import uuid
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any, ClassVar, Protocol

from pydantic import BaseModel, ConfigDict

from bookkeep.core.errors import VALIDATION_MESSAGE, PayloadValidationError

NIL_GUID = uuid.UUID(int=0)

ISBN_PATTERN = re.compile(r"[0-9-]+")
# Longest accepted spelling: ISBN-13 with its four group separators
ISBN_MAX_RAW_LENGTH = 17
# Patterns are applied with fullmatch
COVER_URL_PATTERN = re.compile(r"(http|https)://([\w-]+\.)+[\w-]+(/[\w\- ./?%&=]*)?")

MIN_PUBLICATION_YEAR = 1000
PUBLICATION_YEAR_LEAD = 5


class BookFields(Protocol):
    guid: uuid.UUID | None
    title: str | None
    author: str | None
    isbn: str | None
    description: str | None
    publication_year: int | None
    genre: str | None
    cover_image_url: str | None


class Violation(BaseModel):
    field: str
    rule: str
    message: str

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True)


Predicate = Callable[[Any], bool]
MessageFactory = str | Callable[[], str]


@dataclass(frozen=True)
class Rule:
    field: str
    name: str
    check: Predicate
    message: MessageFactory
    when: Predicate | None = None

    def evaluate(self, payload: object) -> Violation | None:
        value = getattr(payload, self.field, None)
        if self.when is not None and not self.when(value):
            return None
        if self.check(value):
            return None
        message = self.message() if callable(self.message) else self.message
        return Violation(field=self.field, rule=self.name, message=message)


# ---- guards ----
def present(value: Any) -> bool:
    """Optional fields are only checked when supplied and non-empty."""
    return value is not None and value != ""


def not_blank(value: Any) -> bool:
    return isinstance(value, str) and value.strip() != ""


# ---- predicates ----
def max_length(limit: int) -> Predicate:
    return lambda value: len(value) <= limit


def isbn_digit_count(value: str) -> int:
    return sum(1 for c in value if c in "0123456789")


def isbn_length_ok(value: str) -> bool:
    return len(value) <= ISBN_MAX_RAW_LENGTH and 10 <= isbn_digit_count(value) <= 13


def isbn_format_ok(value: str) -> bool:
    return ISBN_PATTERN.fullmatch(value) is not None and isbn_digit_count(value) in (10, 13)


def max_publication_year() -> int:
    return datetime.datetime.now(datetime.timezone.utc).year + PUBLICATION_YEAR_LEAD


def publication_year_ok(value: int) -> bool:
    return MIN_PUBLICATION_YEAR <= value <= max_publication_year()


def guid_ok(value: Any) -> bool:
    return value is not None and value != NIL_GUID


def cover_url_ok(value: str) -> bool:
    return COVER_URL_PATTERN.fullmatch(value) is not None


def required(field: str, message: str) -> Rule:
    return Rule(field, "required", not_blank, message)


BOOK_RULES: tuple[Rule, ...] = (
    Rule("guid", "required", guid_ok, "Guid cannot be empty."),
    required("title", "Title is required."),
    Rule("title", "max_length", max_length(200),
         "Title cannot be longer than 200 characters.", when=not_blank),
    required("author", "Author is required."),
    Rule("author", "max_length", max_length(100),
         "Author name cannot be longer than 100 characters.", when=not_blank),
    required("isbn", "ISBN is required."),
    Rule("isbn", "length", isbn_length_ok,
         "ISBN must be between 10 and 13 characters.", when=not_blank),
    Rule("isbn", "format", isbn_format_ok, "Invalid ISBN format.", when=not_blank),
    Rule("description", "max_length", max_length(2000),
         "Description cannot be longer than 2000 characters.", when=present),
    Rule("publication_year", "range", publication_year_ok,
         lambda: (
             "Please enter a valid publication year between "
             f"{MIN_PUBLICATION_YEAR} and {max_publication_year()}."
         ),
         when=lambda value: value is not None),
    Rule("genre", "max_length", max_length(50),
         "Genre cannot be longer than 50 characters.", when=present),
    Rule("cover_image_url", "max_length", max_length(500),
         "Cover image URL cannot be longer than 500 characters.", when=present),
    Rule("cover_image_url", "url", cover_url_ok,
         "Please enter a valid URL for the cover image.", when=present),
)


COVER_URL_RULES: tuple[Rule, ...] = tuple(
    rule for rule in BOOK_RULES if rule.field == "cover_image_url"
)


def validate_book(payload: BookFields, rules: Sequence[Rule] = BOOK_RULES) -> list[Violation]:
    """Run every rule against the payload; an empty list means valid."""
    violations: list[Violation] = []
    for rule in rules:
        violation = rule.evaluate(payload)
        if violation is not None:
            violations.append(violation)
    return violations


def ensure_valid_book(payload: BookFields) -> None:
    """Raise PayloadValidationError listing every violation, if any."""
    violations = validate_book(payload)
    if violations:
        raise PayloadValidationError(
            VALIDATION_MESSAGE,
            payload={"errors": [v.model_dump() for v in violations]},
        )
