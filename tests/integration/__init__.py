"""
Integration tests for the submission relay.

These tests use mocked AWS services to run the Lambda handler end to end,
from SNS notification to stored artifact, email and delivery record.
"""
