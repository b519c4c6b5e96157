"""
Domain layer: entities, repository ports and billing services.
"""
