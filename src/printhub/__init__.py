"""
PrintHub Package

Print-order storefront backend. Customers upload documents, pick print
settings and get a price from the tiered pricing catalog; admins manage
orders, users, pricing rules and bindings.
"""

__version__ = "1.0.0"
