"""
Immutable data transfer objects for the scoring & settlement engine.
"""
