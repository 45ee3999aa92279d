"""
QR Label Sheet Service: sequential code allocation and printable QR label sheets.
"""

__version__ = "1.0.0"
