from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'expenses'

# Note: categories must be registered BEFORE empty prefix to avoid URL conflicts
router = DefaultRouter()
router.register(r'categories', views.ExpenseCategoryViewSet, basename='category')
router.register(r'', views.ExpenseViewSet, basename='expense')

urlpatterns = [
    path('', include(router.urls)),
]
