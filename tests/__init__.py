"""
Aerial Imagery Gallery Test Suite

Structure:
- unit/: Unit tests for the normalization core, prefetch helpers and gallery controller
- integration/: Snapshot builder and gallery server exercised end to end with fakes
"""
