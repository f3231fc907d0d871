from fastapi import Request

from transit_tracker.services import Services


def get_services(request: Request) -> Services:
    return request.app.state.services
