"""Site Attendance package.

This package is organized by feature modules (geofence, attendance, payroll,
sync, ...) with a thin Flask controller layer and service/repository layers.
"""
