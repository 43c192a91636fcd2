"""Routes package - Blueprint imports and exports"""
from smrutimap.routes.health import bp as health_bp

__all__ = ['health_bp']
