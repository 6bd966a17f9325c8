"""
Services module for the gym schedule core

This module includes all service-related modules, which implement the business logic:
occurrence resolution, grid building, template mutations, reservations and
reference data (with optional Redis caching).
"""
