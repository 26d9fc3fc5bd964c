"""SearchBlocker scanner package.

Provides the injection pattern definitions and the search validator.
"""
