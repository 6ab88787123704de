"""
Articles app for the Newsroom.

Provides slug generation, content formatting, keyword search, editor CRUD
and the public category feed.
"""

default_app_config = 'apps.articles.apps.ArticlesConfig'
