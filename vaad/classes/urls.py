"""
classes/urls.py
───────────────
URL patterns for the committee-admin pages.
Include in the root urls.py with:
    path('', include('classes.urls')),
"""

from django.urls import path

from . import views

urlpatterns = [
    path('dashboard/',      views.dashboard_view,         name='dashboard'),
    path('onboarding/',     views.onboarding_view,        name='onboarding'),
    path('classes/new/',    views.create_class_page_view, name='create_class_page'),
    path('classes/create/', views.create_class_view,      name='create_class'),
    path('settings/',       views.settings_view,          name='class_settings'),
]
