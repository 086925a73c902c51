"""Predicate Composer: optional filters -> store-agnostic query description.

Invariants:
    - Predicates are AND-combined, in the order they were composed
    - Owner filter is exact match; service-name filter is case-insensitive substring
    - A blank (empty or all-whitespace) service-name fragment is the same as no filter
    - Pagination never fails: out-of-range values are clamped
    - Values travel as typed descriptors, never as query text

Design Decisions:
    - Frozen dataclass per predicate kind: the store adapter pattern-matches on type
      and owns the translation to its native query language
    - matches() evaluates the same predicates in Python, giving the store
      adapter a reference to be checked against
"""

from dataclasses import dataclass
from datetime import date

from subscription_service.core.domain_types import (
    DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT, SubscriptionField, UserId,
)
from subscription_service.core.subscription import SubscriptionRecord


# ─── Predicate Descriptors ───────────────────────────────────────

@dataclass(frozen=True)
class Equals:
    field: SubscriptionField
    value: object


@dataclass(frozen=True)
class ILikeSubstring:
    field: SubscriptionField
    value: str


@dataclass(frozen=True)
class DateLTE:
    field: SubscriptionField
    value: date


@dataclass(frozen=True)
class DateGTEOrNull:
    """field >= value, or field is absent (open-ended)."""
    field: SubscriptionField
    value: date


Predicate = Equals | ILikeSubstring | DateLTE | DateGTEOrNull
PredicateSet = tuple[Predicate, ...]


@dataclass(frozen=True)
class Pagination:
    limit: int
    offset: int


@dataclass(frozen=True)
class ListQuery:
    """Normalized input for SubscriptionRepository.list_records."""
    predicates: PredicateSet
    pagination: Pagination


# ─── Normalization ───────────────────────────────────────────────

def normalize_fragment(fragment: str | None) -> str | None:
    """Trim a service-name fragment. Blank means absent."""
    if fragment is None:
        return None
    fragment = fragment.strip()
    return fragment or None


def normalize_pagination(limit: int, offset: int) -> Pagination:
    if limit <= 0 or limit > MAX_PAGE_LIMIT:
        limit = DEFAULT_PAGE_LIMIT
    if offset < 0:
        offset = 0
    return Pagination(limit=limit, offset=offset)


# ─── Composition ─────────────────────────────────────────────────

def compose_filters(
    owner_id: UserId | None, service_name: str | None,
) -> PredicateSet:
    """Owner and service-name predicates. Empty tuple = match everything."""
    predicates: list[Predicate] = []
    if owner_id is not None:
        predicates.append(Equals(SubscriptionField.USER_ID, owner_id))
    fragment = normalize_fragment(service_name)
    if fragment is not None:
        predicates.append(ILikeSubstring(SubscriptionField.SERVICE_NAME, fragment))
    return tuple(predicates)


def compose_list_query(
    owner_id: UserId | None, service_name: str | None,
    limit: int, offset: int,
) -> ListQuery:
    return ListQuery(
        predicates=compose_filters(owner_id, service_name),
        pagination=normalize_pagination(limit, offset),
    )


# ─── Evaluation & Description ────────────────────────────────────

def matches(record: SubscriptionRecord, predicates: PredicateSet) -> bool:
    """Evaluate predicates against a record in memory. Pure."""
    return all(_matches_one(record, p) for p in predicates)


def _matches_one(record: SubscriptionRecord, predicate: Predicate) -> bool:
    actual = getattr(record, predicate.field.value)
    if isinstance(predicate, Equals):
        return actual == predicate.value
    if isinstance(predicate, ILikeSubstring):
        return actual is not None and predicate.value.lower() in actual.lower()
    if isinstance(predicate, DateLTE):
        return actual is not None and actual <= predicate.value
    if isinstance(predicate, DateGTEOrNull):
        return actual is None or actual >= predicate.value
    raise TypeError(f"Unsupported predicate: {predicate!r}")


_OPERATOR_NAMES = {
    Equals: "equals",
    ILikeSubstring: "ilike_substring",
    DateLTE: "date_lte",
    DateGTEOrNull: "date_gte_or_null",
}


def describe_predicates(predicates: PredicateSet) -> list[dict]:
    """JSON-safe description of a predicate set, for errors and logs."""
    return [
        {
            "op": _OPERATOR_NAMES[type(p)],
            "field": p.field.value,
            "value": p.value.isoformat() if isinstance(p.value, date) else str(p.value),
        }
        for p in predicates
    ]
