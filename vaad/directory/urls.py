"""
directory/urls.py
─────────────────
Admin directory pages.  Include in the root urls.py with:
    path('directory/', include('directory.urls')),
"""

from django.urls import path

from . import views

urlpatterns = [
    path('',                               views.directory_view,         name='directory'),
    path('children/new/',                  views.child_form_view,        name='child_create'),
    path('children/<int:child_id>/',       views.child_form_view,        name='child_edit'),
    path('children/<int:child_id>/delete/', views.child_delete_view,     name='child_delete'),
    path('children/import/',               views.import_children_view,   name='children_import'),
    path('children/template/',             views.children_template_view, name='children_template'),
    path('staff/new/',                     views.staff_form_view,        name='staff_create'),
    path('staff/<int:staff_id>/',          views.staff_form_view,        name='staff_edit'),
    path('staff/<int:staff_id>/delete/',   views.staff_delete_view,      name='staff_delete'),
]
