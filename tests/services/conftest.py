import pytest_asyncio
from factories import seed_portfolio


@pytest_asyncio.fixture
async def portfolio(db):
    """Reference data plus five monthly records, flushed into the test transaction."""
    return await seed_portfolio(db)
