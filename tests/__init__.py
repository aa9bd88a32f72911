# Olympics Gallery Test Suite
"""
Unit tests cover the pure helpers, repositories, storage backends and
services in isolation; integration tests drive the HTTP API end to end
on the local storage backend.
"""
