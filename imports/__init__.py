"""
Imports app for CenterScope.

CSV uploads, the import reconciler and import batch tracking.
"""
