"""Test utilities for switchback applications::

    from switchback.testing import TestClient
"""

from switchback.testing.client import TestClient, TestResponse

__all__ = ["TestClient", "TestResponse"]
