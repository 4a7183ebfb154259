"""
Test suite for backpaws application.

This module contains all test cases for the application:
- Unit tests for models, services, web handlers and CLI tools
- Integration tests for complete upload and metadata workflows
"""
