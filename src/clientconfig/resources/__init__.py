"""Packaged configuration documents, reachable as ``classpath:<name>``."""
