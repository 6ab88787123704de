"""
Countdown API URLs.
"""

from django.urls import path
from .views import CountdownSettingsView

app_name = 'countdown'

urlpatterns = [
    path('', CountdownSettingsView.as_view(), name='countdown-settings'),
]
