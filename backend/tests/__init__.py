"""
Tests package for the floppy backend.
"""
