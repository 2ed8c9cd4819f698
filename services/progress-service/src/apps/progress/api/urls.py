# services/progress-service/src/apps/progress/api/urls.py
"""
Progress Service API URLs

URL routing for all progress service endpoints.
"""

from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views import StudentProgressViewSet, LessonViewSet, FeedbackViewSet

router = DefaultRouter()

router.register(r'students', StudentProgressViewSet, basename='student-progress')
router.register(r'lessons', LessonViewSet, basename='lesson')
router.register(r'feedback', FeedbackViewSet, basename='feedback')

app_name = 'progress'

urlpatterns = [
    path('', include(router.urls)),
]
