"""
Media app for the Newsroom.

Blob storage for article and submission images.
"""

default_app_config = 'apps.media.apps.MediaConfig'
