"""
Shared fixtures for dbadmin tests
"""
import pytest

from dbadmin.state.delete_builder_state import DeleteBuilderState


SCHEMA = {
    "tables": [
        {
            "name": "users",
            "columns": [
                {"name": "id", "data_type": "integer"},
                {"name": "age", "data_type": "int"},
                {"name": "name", "data_type": "varchar(50)"},
                {"name": "balance", "data_type": "decimal(10,2)"},
                {"name": "score", "data_type": "double precision"},
                {"name": "created_at", "data_type": "timestamp without time zone"},
            ],
        },
        {
            "name": "orders",
            "columns": [
                {"name": "id", "data_type": "bigint"},
                {"name": "status", "data_type": "text"},
            ],
        },
        {
            "name": "t",
            "columns": [
                {"name": "a", "data_type": "text"},
                {"name": "b", "data_type": "text"},
                {"name": "c", "data_type": "text"},
            ],
        },
    ]
}


@pytest.fixture
def schema():
    return SCHEMA


@pytest.fixture
def notifications():
    return []


@pytest.fixture
def warnings():
    return []


@pytest.fixture
def builder(schema, notifications, warnings):
    return DeleteBuilderState(
        schema=schema,
        on_sql_change=notifications.append,
        on_warning=warnings.append,
    )
