# fleetrecon/performance/exceptions.py

"""
Performance Module Custom Exceptions
"""


class PerformanceError(Exception):
    """Base exception for all performance dashboard errors"""
    pass


class InvalidDateRangeError(PerformanceError):
    """Raised when the requested start date lies after the end date"""
    pass
