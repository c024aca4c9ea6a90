from fastapi import Request

from ..scrape import ScrapeService


def get_service(request: Request) -> ScrapeService:
    # Built once in the application lifespan; tests swap it via dependency_overrides.
    return request.app.state.service
