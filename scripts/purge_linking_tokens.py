#!/usr/bin/env python3
"""Delete expired linking tokens.

Expired tokens are already refused at consume time; this only keeps the
table small. Safe to run from cron at any interval.
"""

import asyncio
import sys

import logfire

from lynkr.config import Settings
from lynkr.domain.service import LinkingTokenService
from lynkr.util.di.container import create_container
from lynkr.util.observability import configure_logfire


async def purge() -> int:
    container = create_container()
    try:
        # One request scope: the purge commits when it closes
        async with container() as request_container:
            service = await request_container.get(LinkingTokenService)
            return await service.purge_expired()
    finally:
        await container.close()


def main() -> int:
    settings = Settings()
    configure_logfire(settings)

    try:
        removed = asyncio.run(purge())
    except Exception as e:
        logfire.error(
            "Linking token purge failed",
            error=str(e),
            error_type=type(e).__name__,
            _exc_info=sys.exc_info(),
        )
        raise

    logfire.info("Expired linking tokens purged", removed=removed)
    return 0


if __name__ == "__main__":
    sys.exit(main())
