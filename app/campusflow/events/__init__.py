"""
Events: the container every feature module hangs off.

An event owns its slug, lifecycle status, theme snapshot, and the list of
enabled modules; ``composer`` assembles the full detail view from them.
"""
