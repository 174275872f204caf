"""
Pick'n'Go cart panel.

- auth: session identity
- cart: cart rows, transaction records, CartView
- services: money helpers and content API clients
- routers: FastAPI endpoints for the panel
"""

__version__ = "0.1.0"
