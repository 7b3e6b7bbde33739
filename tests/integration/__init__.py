"""Integration tests for the drivelink CLI.

These tests drive the Typer application end to end with CliRunner. Network
access is replaced by fake probers patched into the image commands.

Test Structure:
- test_cli_links.py: Offline link inspection and conversion
- test_cli_images.py: Resolution, accessibility checks and bulk runs
- test_cli_config.py: Configuration management and global options
"""
