"""FastAPI application for the subscriber watcher service.

Serves the OAuth login flow and runs the subscriber poller in the background.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from subscriber_watcher import __version__
from subscriber_watcher.auth_flow import AuthorizationFlow
from subscriber_watcher.config import Config
from subscriber_watcher.credentials import CredentialStore
from subscriber_watcher.exceptions import CredentialNotFoundError
from subscriber_watcher.guard import CredentialGuard
from subscriber_watcher.notifier import Notifier
from subscriber_watcher.oauth import OAuthClient
from subscriber_watcher.poller import SubscriberPoller
from subscriber_watcher.routes import router
from subscriber_watcher.tracker import CountTracker
from subscriber_watcher.youtube import YouTubeStatsClient

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load the persisted credential, then run the poller until shutdown."""
    logger.info("Starting subscriber watcher service...")

    try:
        credential = app.state.store.load()
        await app.state.guard.set_credential(credential)
        logger.info("Loaded stored credential")
    except CredentialNotFoundError as e:
        logger.warning(f"No token found, please authenticate via /login ({e})")

    poller_task = asyncio.create_task(app.state.poller.run_forever())
    logger.info("Service started successfully")

    try:
        yield
    finally:
        logger.info("Shutting down subscriber watcher service...")
        poller_task.cancel()
        try:
            await poller_task
        except asyncio.CancelledError:
            pass
        logger.info("Service shut down complete")


def create_app(config: Config, oauth_client: Optional[OAuthClient] = None) -> FastAPI:
    """Wire the services together and build the application.

    Args:
        config: Loaded and validated configuration.
        oauth_client: Optional OAuth client override.

    Returns:
        FastAPI: Application with services attached to ``app.state``.
    """
    oauth_client = oauth_client or OAuthClient(config)
    store = CredentialStore(config.token_path)
    guard = CredentialGuard(oauth_client, store, expiry_leeway=config.expiry_leeway)
    tracker = CountTracker()
    notifier = Notifier(config)
    poller = SubscriberPoller(
        guard=guard,
        stats_client=YouTubeStatsClient(timeout=config.request_timeout),
        tracker=tracker,
        notifier=notifier,
        channel_id=config.channel_id,
        interval=config.poll_interval,
    )

    app = FastAPI(
        title="Subscriber Watcher",
        description="Polls a YouTube channel's subscriber count and notifies on change",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.store = store
    app.state.guard = guard
    app.state.tracker = tracker
    app.state.notifier = notifier
    app.state.poller = poller
    app.state.auth_flow = AuthorizationFlow(oauth_client, store, guard)
    app.include_router(router)

    return app
