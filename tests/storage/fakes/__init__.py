# Fake implementations for testing

from .fake_kloset_server import FakeKlosetServer

__all__ = ["FakeKlosetServer"]
