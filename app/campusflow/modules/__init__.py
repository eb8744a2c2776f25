"""
Feature modules an organizer can switch on per event.

Each module owns its models, service functions, and routes, and exposes a
``fetch_module_data(session, event)`` used by the event composer. Modules reuse
platform primitives (auth, RBAC, audit, DB session) rather than their own.
"""
