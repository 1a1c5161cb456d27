# API Module
# HTTP adapter over the financial plan calculators

from .routes import router

__all__ = ["router"]
