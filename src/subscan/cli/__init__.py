"""
Command Line Interface Package

Command Structure:
- subscan: Main entry point with utility commands (version, config, records)
- subscan scan: Discover subscriptions, optionally importing every new one
- subscan review: Interactive per-candidate resolution and commit
"""
