"""repairfit: fitness evaluation for test-driven program repair."""

__version__ = "0.1.0"
