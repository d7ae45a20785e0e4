"""
Workflow logic behind the API routes.
"""
