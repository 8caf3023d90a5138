"""HRM System package.

This package is organized by feature modules (employees, attendance, leave,
payroll, ...) with a thin Flask controller layer on top of service and
repository layers. Controllers speak JSON under ``/api``.
"""
