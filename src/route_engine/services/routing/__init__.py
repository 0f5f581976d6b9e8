"""Route planning service exports."""

from .chain import MOCK_ROUTE_WARNING, ProviderStep, RouteProviderChain

__all__ = ["RouteProviderChain", "ProviderStep", "MOCK_ROUTE_WARNING"]
