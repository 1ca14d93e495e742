import pytest

import src.depends as depends
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork


@pytest.mark.asyncio
async def test_database_access_goes_through_unit_of_work():
    assert not hasattr(depends, "get_session")

    provider = depends.get_unit_of_work()
    uow = await provider.__anext__()
    try:
        assert isinstance(uow, SqlAlchemyUnitOfWork)
    finally:
        await provider.aclose()
