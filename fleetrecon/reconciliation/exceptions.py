# fleetrecon/reconciliation/exceptions.py

"""
Reconciliation Module Custom Exceptions
"""


class ReconciliationError(Exception):
    """Base exception for all reconciliation errors"""
    pass


class InvalidReportFormatError(ReconciliationError):
    """Raised when an export is requested in a format other than excel or csv"""

    def __init__(self, fmt: str):
        self.format = fmt
        super().__init__(f"Unsupported report format '{fmt}', use 'excel' or 'csv'")
