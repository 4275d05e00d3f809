"""HTTP middleware: client address resolution for rate-limit keys.

Applied in main app; import and use from marketsearch.main.
"""

from marketsearch.middleware.client_address import ClientAddressMiddleware

__all__ = ["ClientAddressMiddleware"]
