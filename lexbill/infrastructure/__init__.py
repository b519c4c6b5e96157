"""
Infrastructure layer.
Database, repositories, email delivery and the HTTP surface.
"""
