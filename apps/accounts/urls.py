from django.urls import path
from . import views

app_name = 'users'

urlpatterns = [
    # Authentication
    path('register/', views.register, name='register'),

    # User profile
    path('user/', views.get_current_user, name='current-user'),
]
