# clinical/admin.py
from django.contrib import admin
from .models import Consultation, Report, Prescription, RoomStay


class ReportInline(admin.TabularInline):
    model = Report
    extra = 0
    fields = ['title', 'result', 'price', 'created_at']
    readonly_fields = ['created_at']


@admin.register(Consultation)
class ConsultationAdmin(admin.ModelAdmin):
    list_display = ['id', 'patient', 'doctor_name', 'consultation_date', 'status', 'fee']
    list_filter = ['status', 'consultation_date']
    search_fields = ['patient__full_name', 'doctor_name']
    readonly_fields = ['created_at', 'updated_at']
    inlines = [ReportInline]


@admin.register(Prescription)
class PrescriptionAdmin(admin.ModelAdmin):
    list_display = ['id', 'patient', 'consultation', 'status', 'total_price', 'issued_at']
    list_filter = ['status']
    search_fields = ['patient__full_name', 'medications']


@admin.register(RoomStay)
class RoomStayAdmin(admin.ModelAdmin):
    list_display = [
        'id', 'patient', 'room_number', 'room_type', 'daily_charge',
        'admitted_at', 'discharged_at', 'status'
    ]
    list_filter = ['status', 'room_type']
    search_fields = ['patient__full_name', 'room_number']
