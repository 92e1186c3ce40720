"""
core/urls.py
────────────
URL patterns for the landing page and the public invite-code pages.
Include in the root urls.py with:
    path('', include('core.urls')),
after the admin directory include, so /directory/<code>/ does not shadow it.
"""

from django.urls import path

from . import views

urlpatterns = [
    path('', views.home_view, name='homepage'),

    # Public pages, reached by invite code without an account
    path('calendar/<str:code>/',     views.public_calendar_view,  name='public_calendar'),
    path('directory/<str:code>/',    views.public_directory_view, name='public_directory'),
    path('join/<str:code>/',         views.join_view,             name='public_join'),
    path('parent-form/<str:token>/', views.parent_form_view,      name='parent_form'),
]
