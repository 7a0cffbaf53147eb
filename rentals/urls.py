from django.urls import path

from .views import *

urlpatterns = [
    path('register/', register_user, name='register'),
    path('login/', login_user, name='login'),
    path('profile/', profile_detail, name='profile'),

    path('properties/', property_list, name='property-list'),
    path('properties/<int:property_id>/', property_detail, name='property-detail'),
    path('properties/<int:property_id>/units/', add_unit, name='add-unit'),
    path('units/', unit_list, name='unit-list'),
    path('units/<int:unit_id>/', unit_detail, name='unit-detail'),
    path('units/<int:unit_id>/occupy/', occupy_unit, name='occupy-unit'),
    path('units/<int:unit_id>/vacate/', vacate_unit, name='vacate-unit'),
    path('tenants/', tenant_list, name='tenant-list'),
    path('tenants/<int:tenant_id>/', tenant_detail, name='tenant-detail'),

    path('payments/', payment_list, name='payment-list'),
    path('payments/<int:payment_id>/receipt/', payment_receipt, name='payment-receipt'),
    path('maintenance/', maintenance_list, name='maintenance-list'),
    path('maintenance/<int:request_id>/advance/', advance_maintenance, name='advance-maintenance'),

    path('dashboard/', dashboard, name='dashboard'),
    path('reports/', report, name='report'),
    path('reports/monthly.csv', monthly_report_csv, name='monthly-report-csv'),
    path('reports/arrears.csv', arrears_report_csv, name='arrears-report-csv'),
    path('reports/export.xlsx', financial_report_xlsx, name='financial-report-xlsx'),
]
