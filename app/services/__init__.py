"""Service layer for business logic.

Import services from their modules directly; the identity provider depends
on ``app.services.exceptions``, so this package must not import services
eagerly.
"""
