"""
Service Organization
====================
Services are organized by their role:

**application/**
  Singleton services managed by ServiceContainer. One instance per application.
  Examples: DiagnosisService, SoilService, AssistantService

**ai/**
  Outbound clients for the AI microservices. No inference runs in-process.

**utilities/**
  Infrastructure helpers without business rules.
  Examples: UploadStorage
"""
