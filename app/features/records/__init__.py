"""
Permission-scoped record access.

Generic get/find_one/create/update/delete over every resource of the policy
matrix, with ownership, department and soft-delete visibility applied uniformly.
"""
