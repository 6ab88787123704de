"""
Submissions app for the Newsroom.

Public submission form and the editor review workflow (approve / reject).
"""

default_app_config = 'apps.submissions.apps.SubmissionsConfig'
