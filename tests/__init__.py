"""
Test Suite for subscan

Test Structure:
- unit/: Unit tests mirroring src/ package structure
- integration/: Pipeline and CLI workflow tests

Test Data:
All messages and subscription records are synthetic. Network access is
replaced by in-process transports and fakes; no test talks to a real
mailbox or text-generation service.
"""
