import logging

import pytest

from netrequest.core.errors import InvalidOriginalPath, InvalidPathArgument
from netrequest.core.path import Endpoint, PathTemplate


def test_profile_picture_path_resolves():
    path = PathTemplate("/api/profile-picture/{image}", {"image": "name"})

    assert path.path == "/api/profile-picture/name"
    assert path.original_path == "/api/profile-picture/{image}"
    assert str(path) == "/api/profile-picture/name"


def test_every_occurrence_of_a_placeholder_is_replaced():
    path = PathTemplate("/{x}/a/{x}/{y}", {"x": "1", "y": "2"})

    assert path.path == "/1/a/1/2"


def test_values_are_inserted_verbatim():
    path = PathTemplate("/files/{name}", {"name": "a b/c?d"})

    assert path.path == "/files/a b/c?d"


def test_empty_original_path_fails():
    with pytest.raises(InvalidOriginalPath):
        PathTemplate("", {})


def test_missing_placeholder_fails_and_names_the_key():
    with pytest.raises(InvalidPathArgument) as exc:
        PathTemplate("/a/{x}", {"y": "1"})

    assert exc.value.key == "y"


def test_failure_after_a_successful_substitution_returns_nothing():
    with pytest.raises(InvalidPathArgument):
        PathTemplate("/a/{x}", {"x": "1", "typo": "2"})


def test_no_arguments_keeps_the_path():
    assert PathTemplate("/plain").path == "/plain"


def test_template_is_immutable():
    path = PathTemplate("/a/{x}", {"x": "1"})

    with pytest.raises(Exception):
        path.path = "/other"
    with pytest.raises(TypeError):
        path.arguments["x"] = "2"


def test_template_from_endpoint():
    path = PathTemplate.from_endpoint(Endpoint("/users/{id}"), {"id": "42"})

    assert path.path == "/users/42"


def test_endpoint_without_leading_slash_only_warns(caplog):
    with caplog.at_level(logging.WARNING, logger="netrequest.endpoint"):
        endpoint = Endpoint("users")

    assert endpoint.raw_value == "users"
    assert any(r.message == "endpoint_missing_leading_slash" for r in caplog.records)


def test_endpoint_with_leading_slash_is_silent(caplog):
    with caplog.at_level(logging.WARNING, logger="netrequest.endpoint"):
        Endpoint("/users")

    assert not caplog.records
