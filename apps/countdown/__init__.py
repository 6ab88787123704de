"""
Countdown app for the Newsroom.

Singleton settings for the "next issue" countdown shown on the site.
"""

default_app_config = 'apps.countdown.apps.CountdownConfig'
