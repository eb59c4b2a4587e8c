# ==== ROUTES PACKAGE ==== #

"""
Routes package for API endpoints.

This package contains the FastAPI route modules for the box form, the
box list and the pricing lookups of Boxship.
"""
