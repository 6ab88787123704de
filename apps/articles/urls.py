"""
Article API URLs.
"""

from django.urls import path
from .views import (
    ArticleBySlugView,
    ArticleDetailView,
    ArticleFeedView,
    ArticleImageView,
    ArticleListCreateView,
    ArticlePreviewView,
    ArticleSearchView,
    DashboardView,
)

app_name = 'articles'

urlpatterns = [
    # Public pages (before the detail route to avoid conflict)
    path('feed/', ArticleFeedView.as_view(), name='article-feed'),
    path('search/', ArticleSearchView.as_view(), name='article-search'),
    path('by-slug/<str:category>/<str:slug>/', ArticleBySlugView.as_view(), name='article-by-slug'),

    # Editor
    path('preview/', ArticlePreviewView.as_view(), name='article-preview'),
    path('', ArticleListCreateView.as_view(), name='article-list'),
    path('<str:pk>/', ArticleDetailView.as_view(), name='article-detail'),
    path('<str:pk>/image/', ArticleImageView.as_view(), name='article-image'),
]

# Dashboard endpoint - mounted at /api/dashboard/ in main urls.py
dashboard_urlpatterns = [
    path('', DashboardView.as_view(), name='dashboard'),
]
