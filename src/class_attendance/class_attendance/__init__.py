"""Class Attendance package.

Feature modules (tokens, schedules, overrides, attendance, ...) with a thin
Flask controller layer over service/repository layers.
"""
