"""
Platform-level registries and services shared by all events:
module catalog, theme presets, AI theme generation, recommendations, stats.
"""
