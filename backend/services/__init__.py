"""
Transit Hub - Services Package

Milestone catalog, event state, workflow engine, statistics and the transit
file store.
"""
