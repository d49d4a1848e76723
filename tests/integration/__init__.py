"""Integration tests for disclosure-relay.

Integration tests validate the real services wired together:
- Listing fetch, parse and cutoff filtering
- Content extraction through both strategies
- Publishing into an in-memory CMS collection
- Processed-store file operations

Run with: pytest tests/integration/ -v -s
"""
