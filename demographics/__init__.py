"""
Demographics app for CenterScope.

Census demographics around a coordinate, served over HTTP.
"""
