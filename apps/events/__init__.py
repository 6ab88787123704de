"""
Events app for the Newsroom.

Calendar entries, optionally spanning several days, with nested
sub-events and a time-based status.
"""

default_app_config = 'apps.events.apps.EventsConfig'
