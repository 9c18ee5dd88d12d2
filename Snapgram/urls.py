from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path('admin/', admin.site.urls),
    path('user/', include('user.urls')),
    path('core/', include('core.urls')),
    path('', include('Profile.urls')),
    path('', include('posts.urls')),
]
