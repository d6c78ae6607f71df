"""
HTTP layer: the plain-text blob protocol at the root and the versioned JSON API.
"""
