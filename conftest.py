"""
Root pytest configuration.

Makes ``tests.fixtures`` importable when pytest is run from the
repository root.
"""
