import pytest_asyncio
from factories import seed_portfolio


@pytest_asyncio.fixture
async def portfolio(seed_db):
    """Committed reference data plus five monthly records, visible to the app."""
    data = await seed_portfolio(seed_db)
    await seed_db.commit()
    return data
