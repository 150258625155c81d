# insurance/urls.py
from django.urls import path
from .views import InsuranceProviderListView, PatientInsuranceView, VerifyInsuranceView

urlpatterns = [
    path('providers/', InsuranceProviderListView.as_view(), name='insurance-providers'),
    path('<int:patient_id>/', PatientInsuranceView.as_view(), name='patient-insurances'),
    path('<int:patient_id>/verify/', VerifyInsuranceView.as_view(), name='verify-insurance'),
]
