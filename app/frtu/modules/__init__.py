"""
Feature modules live under this package.

Each module owns its routes and service logic and reuses the platform
primitives (record store, audit log, DB session).
"""
