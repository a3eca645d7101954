"""slotwise: staff scheduling with a waiting queue."""

__version__ = "0.1.0"
