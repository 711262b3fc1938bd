"""
Middleware package for the Newsroom backend.
"""
