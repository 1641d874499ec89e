"""Class Attendance package.

Organized by feature modules (directory, sessions, attendance, reports)
with a thin Flask controller layer and service/repository layers underneath.
"""
