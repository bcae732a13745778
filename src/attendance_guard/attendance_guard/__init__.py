"""Attendance Guard package.

Fraud detection and trust scoring for QR attendance check-ins, organized by
feature modules (fraud, attendance, sessions, audit) with a thin Flask
controller layer over service/repository layers.
"""
