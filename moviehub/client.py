"""
MovieHub client - composition root

Builds one SessionContext and hands it by reference to every component
that needs the current session.

Usage:
    async with MovieHubClient() as hub:
        feed = await hub.feed.home()
        await hub.auth.login("ayse@example.com", "secret1")
        await hub.personalization.toggle_watched(hub.session.current().id, feed.popular[0].id)
"""
from typing import List, Optional
import logging

import httpx
from sqlalchemy.engine import Engine

from moviehub.schemas.review import UserReviewEntry
from moviehub.services.api_client import MovieHubAPI
from moviehub.services.auth_service import AuthService
from moviehub.services.catalog_service import CatalogService
from moviehub.services.feed_service import FeedService
from moviehub.services.personalization_service import PersonalizationService
from moviehub.services.rating_service import RatingService
from moviehub.services.session_service import SessionContext, SessionGate, SessionState
from moviehub.services.storage_service import KeyValueStore

logger = logging.getLogger(__name__)


class MovieHubClient:
    def __init__(
        self,
        base_url: str = None,
        store_engine: Optional[Engine] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        cache_ttl: Optional[int] = None,
    ):
        self.store = KeyValueStore(store_engine)
        self.session = SessionContext(self.store)
        self.gate = SessionGate(self.session)
        self.api = MovieHubAPI(self.session, base_url=base_url, transport=transport)

        catalog_args = {} if cache_ttl is None else {"cache_ttl": cache_ttl}
        self.catalog = CatalogService(self.api, **catalog_args)
        self.ratings = RatingService(self.api)
        self.auth = AuthService(self.api, self.session)
        self.personalization = PersonalizationService(self.api, self.gate, self.ratings)
        self.feed = FeedService(self.catalog, self.gate, self.ratings)

    async def start(self) -> SessionState:
        """Cold start: settle the session state from the durable store."""
        state = await self.session.load()
        logger.info(f"MovieHub client started ({state.value})")
        return state

    async def my_reviews(self) -> List[UserReviewEntry]:
        """Reviews written by the logged-in user across the whole catalog"""
        session = await self.gate.require("view_reviews")
        return await self.ratings.get_user_reviews(session.id, await self.catalog.fetch_all())

    async def aclose(self) -> None:
        await self.api.aclose()

    async def __aenter__(self) -> "MovieHubClient":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()
