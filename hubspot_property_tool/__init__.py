"""
HubSpot Property Tool
Bulk-create and audit custom HubSpot properties
"""
__version__ = '0.1.0'
