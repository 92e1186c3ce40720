"""
URL configuration for the vaad project.

  /admin/                  Django admin
  /signup/ /login/ ...     accounts (auth)
  /dashboard/ /settings/   classes (committee admin pages, class wizard)
  /directory/              directory (children, parents, staff)
  /budget/                 finances (budget plan, expenses, payments)
  /calendar/<code>/ ...    core (public invite-code pages)
"""

from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path('admin/', admin.site.urls),

    path('', include('accounts.urls')),
    path('', include('classes.urls')),
    path('directory/', include('directory.urls')),
    path('budget/', include('finances.urls')),

    # public pages last: /directory/<code>/ must not shadow the admin directory
    path('', include('core.urls')),
]

handler404 = 'core.views.handler404'
handler500 = 'core.views.handler500'
