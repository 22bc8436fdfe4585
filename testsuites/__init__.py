"""
Test suites package.

Kept importable so test modules can share helpers such as
``testsuites.unit.fakes`` and ``testsuites.e2e.browser_manager``.
"""
