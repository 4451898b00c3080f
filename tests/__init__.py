"""
ecrverify Test Suite

- Unit tests for the reader, inspector, checks and runner
- CLI tests against a fake registry client
- Functional post-deploy tests against a real account (opt-in)
"""
