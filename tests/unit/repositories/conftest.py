"""
Motor collection doubles for repository tests

find() devuelve un cursor encadenable (sort/limit) y to_list es async,
igual que en motor, así se puede revisar la query sin un Mongo real.
"""

import pytest
from unittest.mock import AsyncMock, MagicMock


@pytest.fixture
def collection():
    cursor = MagicMock()
    cursor.sort.return_value = cursor
    cursor.limit.return_value = cursor
    cursor.to_list = AsyncMock(return_value=[])

    coll = MagicMock()
    coll.find.return_value = cursor
    coll.find_one = AsyncMock(return_value=None)
    coll.find_one_and_update = AsyncMock(return_value=None)
    coll.insert_one = AsyncMock()
    coll.cursor = cursor
    return coll


@pytest.fixture
def test_db(collection):
    db = MagicMock()
    db.__getitem__.return_value = collection
    return db
