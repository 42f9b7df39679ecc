"""Composition root — build every collaborator once and hand references down."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from personfinder.config import Config
from personfinder.controller import SearchController
from personfinder.metrics import MetricsCollector
from personfinder.providers import BaseProvider, build_providers
from personfinder.repository import InMemoryPersonRepository, PersonRepository
from personfinder.service import PersonSearchService
from personfinder.usecase import SearchPersonUseCase

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class App:
    config: Config
    providers: list[BaseProvider]
    repository: PersonRepository
    metrics: MetricsCollector
    search_service: PersonSearchService
    use_case: SearchPersonUseCase
    controller: SearchController


def build_app(
    config: Config | None = None,
    *,
    providers: list[BaseProvider] | None = None,
    repository: PersonRepository | None = None,
) -> App:
    """Wire the application; pass *providers* / *repository* to override in tests."""
    config = config or Config.from_env()
    providers = providers if providers is not None else build_providers(config)
    repository = repository or InMemoryPersonRepository()
    metrics = MetricsCollector()

    search_service = PersonSearchService(providers)
    use_case = SearchPersonUseCase(search_service, repository, cache_ttl=config.cache_ttl)
    provider_names = [p.get_provider_name() for p in providers]
    controller = SearchController(use_case, metrics, repository, provider_names=provider_names)

    logger.info("PersonFinder ready with providers: %s", ", ".join(provider_names) or "none")
    return App(
        config=config,
        providers=providers,
        repository=repository,
        metrics=metrics,
        search_service=search_service,
        use_case=use_case,
        controller=controller,
    )
