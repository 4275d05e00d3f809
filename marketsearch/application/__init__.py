"""Application layer: DTOs, interfaces, services, and the search use case.

Depends on the domain only; infrastructure is reached through the
Protocols in marketsearch.application.interfaces.
"""
