from fastapi import Request

from repository import TrackerRepository


def get_repository(request: Request) -> TrackerRepository:
    """Hand each request the repository built once in ``create_app``."""
    return request.app.state.repository
