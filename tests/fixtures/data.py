"""Fixtures that return sample values."""

import pytest


@pytest.fixture
def person():
    """Associative map laid out as a property list."""
    return {"id": 5, "name": "Bob", "age": 42}


@pytest.fixture
def people():
    """Heterogeneous collection of records with partially overlapping keys."""
    return [
        {"id": 5, "name": "Bob", "age": 42},
        {"name": "Alice", "sex": "F"},
        {"foo": "bar"},
    ]


@pytest.fixture
def followers():
    """Regular list of rows with a heading row."""
    return [
        ["ID", "name", "followers", "haters"],
        [1, "Alice", 12, 3],
        [2, "Bob", 5, 9],
        [3, "Carol", 140, 0],
    ]


@pytest.fixture
def app_messages():
    """Collection of tables: messages per application, step and language."""
    return {
        "start-app": {
            "welcome": {"en": "Welcome", "fr": "Bienvenue"},
            "start": {"en": "Press start", "fr": "Appuyez sur start"},
            "end": {"en": "Goodbye", "fr": "Au revoir"},
        },
        "final-app": {
            "welcome": {"en": "Hello again", "fr": "Rebonjour"},
            "start": {"en": "Continue", "fr": "Continuer"},
            "end": {"en": "See you", "fr": "A bientot"},
        },
    }


@pytest.fixture
def lua_table():
    """Mapping mixing identifier, integer and arbitrary string keys."""
    return {
        "key": "value",
        0: "implicitely indexed",
        "subtree": [5, 6, 7],
        "Not an identifier": 'Somthing "in" the air',
        "05": "It's not '5'",
    }
