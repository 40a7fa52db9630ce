"""
Stock adjustment for invoice line items.
"""
