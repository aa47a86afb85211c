"""
Collaborator implementations: catalog, interaction history and search analytics
"""
