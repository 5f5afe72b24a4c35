"""
Spec assistant core package.

This package currently focuses on the search subsystem. It exposes
dataclasses for parsed specifications and their searchable documents,
an index mapping/storage layer on top of Whoosh, a concurrent indexer that
flattens specifications and scenarios into independent documents, and a
query engine returning highlighted hits with tag facets.
"""
