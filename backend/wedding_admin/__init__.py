"""
Wedding Admin API package.
"""
