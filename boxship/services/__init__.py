# ==== SERVICES PACKAGE ==== #

"""
Services package for business logic.

This package contains the shipping engine (validation, cost computation,
color conversions, display formatting) and the box store that persists
its records.
"""
