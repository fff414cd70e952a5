"""Attendance & Payroll package.

This package is organized by feature modules (attendance, payroll, leaves,
holidays, ...) with a thin Flask controller layer on top of service and
repository layers. Every multi-write workflow runs inside one unit of work.
"""
