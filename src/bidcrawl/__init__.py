"""
bidcrawl - Procurement listing crawler for stateful grid portals.

Walks every page of a bid/RFP listing grid, enriches each listing with
detail and document-list fragments, and writes a deduplicated JSON record set.
"""

__version__ = "0.1.0"
__app_name__ = "bidcrawl"
