"""
Version information for BlackGrid.

VERSION_STRING is sent as the User-Agent of col-def requests.
"""

VERSION = (0, 3, 1, 0)
VERSION_STRING = "0.3.1"
