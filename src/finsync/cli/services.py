"""Service wiring for CLI commands."""

import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

import click

from finsync.config import SyncConfig
from finsync.database.base import LocalStore
from finsync.domain.category_matcher import CategoryMatcher
from finsync.domain.finance import FinanceService
from finsync.domain.statement_import import ImportService
from finsync.domain.statement_parser import StatementParser
from finsync.domain.sync_queue import SyncQueue
from finsync.domain.sync_scheduler import SyncScheduler
from finsync.remote.base import RemoteStore
from finsync.remote.http_store import HTTPRemoteStore


@dataclass
class Services:
    """Everything a command needs, built around one local and one remote store."""

    config: SyncConfig
    store: LocalStore
    remote: RemoteStore
    queue: SyncQueue
    scheduler: SyncScheduler
    importer: ImportService
    finance: FinanceService
    token: Optional[str]


def build_services(
    config: SyncConfig, store: LocalStore, remote: RemoteStore, token: Optional[str]
) -> Services:
    """Construct the service graph."""

    def token_provider() -> Optional[str]:
        return token

    queue = SyncQueue(store, remote, max_attempts=config.max_attempts)
    scheduler = SyncScheduler(queue, token_provider, config.sync_interval_seconds)
    importer = ImportService(
        store,
        StatementParser(CategoryMatcher()),
        queue,
        remote,
        token_provider=token_provider,
        preview_rows=config.preview_rows,
    )
    finance = FinanceService(store, remote, queue, token_provider, scheduler)
    return Services(
        config=config,
        store=store,
        remote=remote,
        queue=queue,
        scheduler=scheduler,
        importer=importer,
        finance=finance,
        token=token,
    )


def run_with_services(ctx: click.Context, handler: Callable[[Services], Awaitable[Any]]) -> Any:
    """Run ``handler`` on a fresh event loop with an open remote client."""
    config: SyncConfig = ctx.obj["config"]

    async def runner() -> Any:
        async with HTTPRemoteStore(config.api_base_url, config.request_timeout_seconds) as remote:
            services = build_services(config, ctx.obj["store"], remote, ctx.obj.get("token"))
            return await handler(services)

    return asyncio.run(runner())
