"""
Multi-tenant storefront backend.
"""
