"""Attendance Tracker package.

Organized by feature modules (users, courses, attendance, identity, realtime)
with a thin Flask/Socket.IO controller layer over service/repository layers.
"""
