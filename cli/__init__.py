"""ComplaintDesk command-line client"""

__version__ = "1.0.0"
