"""
Properties app for CenterScope.

Shopping centers, their spaces, tenants and leases, and the read API over them.
"""
