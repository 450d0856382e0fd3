"""Swagger 1.2 support: model registration for API declarations."""

from routedoc.swagger.registry import ModelRegistry

__all__ = ["ModelRegistry"]
