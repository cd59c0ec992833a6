"""
GitHub Module
=============

Bounded Context for the GitHub integration.

Responsibilities:
- Link one repository and report its status
- List, merge and write pull requests / issues through the REST API
- Keep local mirrors and a webhook event log
- Open tickets for untracked issues and resolve tickets on merge
"""
