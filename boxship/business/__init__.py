# ==== BUSINESS LOGIC PACKAGE ==== #

"""
Business logic package for domain rules.

This package contains the destination pricing table and the system
error types shared by the shipping engine and the box store.
"""
