"""FastAPI dependencies: services and route-level rate limits."""

from fastapi import Request

from arta_backend.api.rate_limit import RateLimiters
from arta_backend.services import ServiceContainer
from arta_backend.services.auth_service import AuthService
from arta_backend.services.feedback_service import FeedbackService


def services(request: Request) -> ServiceContainer:
    return request.app.state.services


def auth_service(request: Request) -> AuthService:
    return services(request)["auth_service"]


def feedback_service(request: Request) -> FeedbackService:
    return services(request)["feedback_service"]


def _limiters(request: Request) -> RateLimiters:
    return request.app.state.limiters


def auth_rate_limit(request: Request) -> None:
    _limiters(request).auth.check(request)


def feedback_rate_limit(request: Request) -> None:
    _limiters(request).feedback.check(request)


def read_rate_limit(request: Request) -> None:
    _limiters(request).read.check(request)
