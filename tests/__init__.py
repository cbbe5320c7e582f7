"""
Mars Raw Images Test Suite

Structure:
- unit/: Unit tests for individual components, with HTTP replaced by
  canned responses
"""
