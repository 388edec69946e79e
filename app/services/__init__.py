"""
Service Organization
====================

**application/**
  Singleton services managed by ServiceContainer. One instance per application.
  Examples: LoginService, ParkingService, ReportService, ActivityLogger

``container_builder`` wires them together; ``container`` holds the result.
"""
