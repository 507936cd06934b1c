"""Service package — Business logic layer.

Services enforce the authorization matrix and the issue lifecycle rules,
call repositories for persistence and leave the final commit to the router.
"""
