"""
Mock upstream services used by the test suites.
"""
