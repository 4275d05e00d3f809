"""PostgREST HTTP store backend."""

from marketsearch.infrastructure.postgrest.client import PostgRESTClient, build_params

__all__ = ["PostgRESTClient", "build_params"]
