"""
Event API URLs.
"""

from django.urls import path
from .views import EventDetailView, EventListCreateView, EventTickerView, PublicEventsView

app_name = 'events'

urlpatterns = [
    path('public/', PublicEventsView.as_view(), name='event-public'),
    path('ticker/', EventTickerView.as_view(), name='event-ticker'),
    path('', EventListCreateView.as_view(), name='event-list'),
    path('<str:pk>/', EventDetailView.as_view(), name='event-detail'),
]
