from __future__ import annotations

import pytest

from web_search_mcp.errors import SearchValidationError
from web_search_mcp.validator import SearchValidator


def test_validate_trims_query_and_applies_default() -> None:
    request = SearchValidator().validate("  python asyncio  ")

    assert request.query == "python asyncio"
    assert request.max_results == 10


def test_validate_accepts_boundaries() -> None:
    validator = SearchValidator()

    assert validator.validate("x", 1).max_results == 1
    assert validator.validate("x", 20).max_results == 20
    assert validator.validate("y" * 1000).query == "y" * 1000


@pytest.mark.parametrize(
    ("query", "message"),
    [
        ("", "Query must be a non-empty string"),
        (None, "Query must be a non-empty string"),
        (42, "Query must be a non-empty string"),
        ("   \n\t", "Query cannot be empty or whitespace only"),
        ("z" * 1001, "Query must not exceed 1000 characters"),
    ],
)
def test_validate_rejects_bad_queries(query: object, message: str) -> None:
    with pytest.raises(SearchValidationError) as exc_info:
        SearchValidator().validate(query)

    assert exc_info.value.user_message == message
    assert exc_info.value.category == "validation"


@pytest.mark.parametrize(
    ("max_results", "message"),
    [
        (0, "max_results must be at least 1"),
        (-3, "max_results must be at least 1"),
        (25, "max_results must not exceed 20"),
        (True, "max_results must be an integer"),
        (2.5, "max_results must be an integer"),
        ("5", "max_results must be an integer"),
    ],
)
def test_validate_rejects_bad_max_results(max_results: object, message: str) -> None:
    with pytest.raises(SearchValidationError) as exc_info:
        SearchValidator().validate("python", max_results)

    assert exc_info.value.user_message == message


def test_custom_default_must_fit_limit() -> None:
    assert SearchValidator(default_max_results=5).validate("x").max_results == 5
    with pytest.raises(ValueError):
        SearchValidator(default_max_results=21)
