"""Predicate Composer: tests for pure filter composition and pagination clamping.

Tests cover:
    - Pagination clamps out-of-range limit/offset instead of failing
    - Blank service-name fragments are treated as absent
    - Filters compose in a stable order, empty when nothing is given
    - In-memory matching is a case-insensitive substring on service_name
"""

from dataclasses import FrozenInstanceError
from datetime import date
from uuid import uuid4

import pytest

from subscription_service.core.domain_types import (
    DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT, SubscriptionField, UserId,
)
from subscription_service.core.predicates import (
    DateGTEOrNull, DateLTE, Equals, ILikeSubstring, Pagination,
    compose_filters, compose_list_query, describe_predicates, matches,
    normalize_fragment, normalize_pagination,
)
from subscription_service.core.subscription import SubscriptionRecord


def _record(service_name="Yandex Plus", user_id=None, **kw) -> SubscriptionRecord:
    return SubscriptionRecord(
        service_name=service_name,
        price=kw.pop("price", 400),
        user_id=user_id or UserId(uuid4()),
        start_date=kw.pop("start_date", date(2025, 1, 1)),
        **kw,
    )


# ─── normalize_pagination ────────────────────────────────────────

@pytest.mark.parametrize("limit", [0, -1, MAX_PAGE_LIMIT + 1, 5000])
def test_out_of_range_limit_falls_back_to_default(limit):
    assert normalize_pagination(limit, 0).limit == DEFAULT_PAGE_LIMIT


def test_limit_bounds_are_inclusive():
    assert normalize_pagination(1, 0).limit == 1
    assert normalize_pagination(MAX_PAGE_LIMIT, 0).limit == MAX_PAGE_LIMIT


def test_negative_offset_clamps_to_zero():
    assert normalize_pagination(10, -5) == Pagination(limit=10, offset=0)


def test_valid_offset_is_kept():
    assert normalize_pagination(10, 30).offset == 30


# ─── normalize_fragment ──────────────────────────────────────────

def test_fragment_none_stays_absent():
    assert normalize_fragment(None) is None


@pytest.mark.parametrize("blank", ["", "   ", "\t\n"])
def test_blank_fragment_is_absent(blank):
    assert normalize_fragment(blank) is None


def test_fragment_is_trimmed():
    assert normalize_fragment("  plus ") == "plus"


# ─── compose_filters / compose_list_query ────────────────────────

def test_no_filters_yields_empty_predicate_set():
    assert compose_filters(None, None) == ()
    assert compose_filters(None, "   ") == ()


def test_owner_then_service_name_order():
    owner = UserId(uuid4())
    assert compose_filters(owner, " plus ") == (
        Equals(SubscriptionField.USER_ID, owner),
        ILikeSubstring(SubscriptionField.SERVICE_NAME, "plus"),
    )


def test_service_name_only():
    assert compose_filters(None, "Kino") == (
        ILikeSubstring(SubscriptionField.SERVICE_NAME, "Kino"),
    )


def test_list_query_combines_filters_and_pagination():
    query = compose_list_query(None, "plus", 0, -5)
    assert query.predicates == (ILikeSubstring(SubscriptionField.SERVICE_NAME, "plus"),)
    assert query.pagination == Pagination(limit=100, offset=0)


def test_predicates_are_immutable():
    p = Equals(SubscriptionField.USER_ID, uuid4())
    with pytest.raises(FrozenInstanceError):
        p.value = "other"


# ─── matches ─────────────────────────────────────────────────────

def test_substring_match_is_case_insensitive():
    predicates = compose_filters(None, "plus")
    assert matches(_record("Yandex Plus"), predicates)
    assert not matches(_record("Kinopoisk"), predicates)


def test_owner_match_is_exact():
    owner = UserId(uuid4())
    predicates = compose_filters(owner, None)
    assert matches(_record(user_id=owner), predicates)
    assert not matches(_record(), predicates)


def test_empty_predicate_set_matches_everything():
    assert matches(_record("Anything"), ())


def test_date_predicates_treat_missing_end_as_open():
    predicates = (
        DateLTE(SubscriptionField.START_DATE, date(2025, 3, 1)),
        DateGTEOrNull(SubscriptionField.END_DATE, date(2025, 1, 1)),
    )
    assert matches(_record(start_date=date(2024, 6, 1)), predicates)
    assert matches(_record(end_date=date(2025, 1, 1)), predicates)
    assert not matches(_record(end_date=date(2024, 12, 31)), predicates)
    assert not matches(_record(start_date=date(2025, 3, 2)), predicates)


# ─── describe_predicates ─────────────────────────────────────────

def test_describe_predicates_is_json_safe():
    owner = uuid4()
    described = describe_predicates((
        Equals(SubscriptionField.USER_ID, owner),
        DateLTE(SubscriptionField.START_DATE, date(2025, 6, 1)),
    ))
    assert described == [
        {"op": "equals", "field": "user_id", "value": str(owner)},
        {"op": "date_lte", "field": "start_date", "value": "2025-06-01"},
    ]
