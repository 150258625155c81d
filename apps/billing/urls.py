# billing/urls.py
from django.urls import path
from rest_framework.routers import DefaultRouter
from .views import BillViewSet, BillableEventsView

router = DefaultRouter()
router.register(r'bills', BillViewSet, basename='bill')

urlpatterns = [
    path(
        'patients/<int:patient_id>/billable-events/',
        BillableEventsView.as_view(),
        name='billable-events'
    ),
] + router.urls
