"""
Shared plumbing: JSON logging, YAML config loading, Asset/SortKey types, small utils.
"""
