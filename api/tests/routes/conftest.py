"""Route test configuration.

Rate limiting is switched off, and ``persist`` commits seed rows through the
app's own session maker so requests can see them.
"""

from collections.abc import Awaitable, Callable
from unittest.mock import patch

import factory
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker


@pytest.fixture(autouse=True)
def _disable_rate_limiter():
    """Route tests hit the same endpoint many times per second."""
    with patch("core.ratelimit.limiter.enabled", False):
        yield


@pytest.fixture
def persist(
    session_maker: async_sessionmaker[AsyncSession],
) -> Callable[..., Awaitable]:
    """``await persist(OrganizacionFactory, activo=False)`` -> committed row."""

    async def _persist(factory_class: type[factory.Factory], **kwargs):
        instance = factory_class.build(**kwargs)
        async with session_maker() as session:
            session.add(instance)
            await session.commit()
        return instance

    return _persist
